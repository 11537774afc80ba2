# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:
    """Credential record. ``password`` holds plaintext before sign-up and the hash after."""

    username: str
    email: str
    password: str = field(repr=False)
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def with_password(self, password: str) -> User:
        return replace(self, password=password)

    @property
    def password_hash(self) -> str:
        return self.password


@dataclass(slots=True, frozen=True)
class Session:

    username: str
    token: str = field(repr=False)
    refresh_token: str = field(repr=False)
    expiry_date: datetime | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def rotated(
        self, token: str, expiry_date: datetime, *, updated_at: datetime | None = None
    ) -> Session:
        """Same session with a new access token; ``refresh_token`` is kept."""

        return replace(
            self, token=token, expiry_date=expiry_date, updated_at=updated_at or self.updated_at
        )
