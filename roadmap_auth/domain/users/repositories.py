# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from .entities import Session, User


class CredentialStore(Protocol):
    def add_user(self, user: User) -> None: ...
    def find_user(self, username: str) -> User: ...


class SessionStore(Protocol):
    def find_by_username(self, username: str) -> Session: ...
    def find_by_refresh_token(self, refresh_token: str) -> Session: ...
    def find_by_token(self, token: str) -> Session: ...
    def insert(self, session: Session) -> None: ...
    def update_token_and_expiry(self, session: Session) -> None: ...
    def delete(self, username: str) -> bool: ...


class PasswordHasher(Protocol):
    def hash(self, password: str, *, timeout: float | None = None) -> str: ...
    def verify(self, password: str, hashed: str, *, timeout: float | None = None) -> bool: ...
    def needs_rehash(self, hashed: str) -> bool: ...


class TokenGenerator(Protocol):
    def generate(self, length: int | None = None) -> str: ...
