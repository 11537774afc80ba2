# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from roadmap_auth.domain.users.entities import User
from roadmap_auth.domain.users.exceptions import (
    CredentialNotFoundError,
    DuplicateCredentialError,
    StorageFailureError,
)
from roadmap_auth.domain.users.repositories import CredentialStore
from roadmap_auth.infrastructure.db.models import UserRow, as_utc
from roadmap_auth.infrastructure.unit_of_work import storage_errors, unit_of_work_scope
from roadmap_auth.shared.logging import logger


def _to_domain(row: UserRow) -> User:
    return User(
        username=row.username,
        email=row.email,
        password=row.password_hash,
        name=row.name,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class SqlAlchemyCredentialStore(CredentialStore):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def add_user(self, user: User) -> None:
        """Insert ``user``; its ``password`` must already be a hash."""

        now = datetime.now(UTC)
        try:
            with storage_errors("add_user"), unit_of_work_scope(self._session_factory) as session:
                session.add(
                    UserRow(
                        username=user.username,
                        email=user.email,
                        password_hash=user.password,
                        name=user.name,
                        created_at=user.created_at or now,
                        updated_at=user.updated_at or now,
                    )
                )
        except IntegrityError as exc:
            if self._username_taken(user.username):
                logger.info(f"credentials: username already registered user={user.username}")
                raise DuplicateCredentialError(context={"username": user.username}) from exc
            logger.error(f"credentials: insert rejected for user={user.username}: {exc.orig}")
            raise StorageFailureError("could not add user") from exc

    def _username_taken(self, username: str) -> bool:
        with storage_errors("check_username"), unit_of_work_scope(
            self._session_factory
        ) as session:
            return session.get(UserRow, username) is not None

    def find_user(self, username: str) -> User:
        with storage_errors("find_user"), unit_of_work_scope(self._session_factory) as session:
            row = session.get(UserRow, username)
            user = _to_domain(row) if row is not None else None
        if user is None:
            raise CredentialNotFoundError()
        return user
