"""Password hashing strategies."""

from __future__ import annotations

from argon2 import PasswordHasher as _Argon2
from argon2 import Type
from argon2.exceptions import (
    HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from roadmap_auth.domain.users.exceptions import HashingFailureError
from roadmap_auth.domain.users.repositories import PasswordHasher
from roadmap_auth.shared.config import HashingConfig


class Argon2PasswordHasher(PasswordHasher):
    """Argon2id with a fresh random salt per hash.

    Runs on the calling thread; ``timeout`` is accepted for interface
    compatibility and has no effect here. Wrap in ``PooledPasswordHasher`` to
    keep hashing off request threads.
    """

    def __init__(self, config: HashingConfig | None = None) -> None:
        config = config or HashingConfig()  # type: ignore[call-arg]
        self._argon2 = _Argon2(
            time_cost=config.time_cost,
            memory_cost=config.memory_cost,
            parallelism=config.parallelism,
            hash_len=config.hash_len,
            salt_len=config.salt_len,
            type=Type.ID,
        )

    def hash(self, password: str | bytes, *, timeout: float | None = None) -> str:
        try:
            return self._argon2.hash(password)
        except (HashingError, TypeError, UnicodeError) as exc:
            raise HashingFailureError(f"argon2 rejected input: {type(exc).__name__}") from exc

    def verify(
        self, password: str | bytes, hashed: str, *, timeout: float | None = None
    ) -> bool:
        try:
            return self._argon2.verify(hashed, password)
        except VerifyMismatchError:
            return False
        except InvalidHashError as exc:
            raise HashingFailureError("stored hash is malformed") from exc
        except VerificationError as exc:
            raise HashingFailureError(f"verification error: {exc}") from exc
        except UnicodeError as exc:
            raise HashingFailureError("could not encode verify input") from exc

    def needs_rehash(self, hashed: str) -> bool:
        try:
            return self._argon2.check_needs_rehash(hashed)
        except InvalidHashError as exc:
            raise HashingFailureError("stored hash is malformed") from exc
