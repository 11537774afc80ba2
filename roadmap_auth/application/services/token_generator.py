from __future__ import annotations

import secrets
import string

from roadmap_auth.domain.users.repositories import TokenGenerator

ALPHABET = string.ascii_letters + string.digits
DEFAULT_TOKEN_LENGTH = 128


class SecretsTokenGenerator(TokenGenerator):
    """Alphanumeric tokens drawn from the OS CSPRNG (~5.95 bits per char)."""

    def __init__(self, default_length: int = DEFAULT_TOKEN_LENGTH) -> None:
        if default_length < 1:
            raise ValueError("default_length must be positive")
        self._default_length = default_length

    @property
    def default_length(self) -> int:
        return self._default_length

    def generate(self, length: int | None = None) -> str:
        size = self._default_length if length is None else length
        if size < 1:
            raise ValueError("token length must be positive")
        return "".join(secrets.choice(ALPHABET) for _ in range(size))
