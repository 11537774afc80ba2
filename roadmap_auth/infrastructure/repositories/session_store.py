# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from roadmap_auth.domain.users.entities import Session as DomainSession
from roadmap_auth.domain.users.exceptions import (
    SessionConflictError,
    SessionNotFoundError,
    StorageFailureError,
)
from roadmap_auth.domain.users.repositories import SessionStore
from roadmap_auth.infrastructure.db.models import UserSessionRow, as_utc
from roadmap_auth.infrastructure.unit_of_work import storage_errors, unit_of_work_scope
from roadmap_auth.shared.logging import logger, token_hint

_TABLE = UserSessionRow.__table__


def _to_domain(row: UserSessionRow) -> DomainSession:
    return DomainSession(
        username=row.username,
        token=row.token,
        refresh_token=row.refresh_token,
        expiry_date=as_utc(row.expiry_date) if row.expiry_date is not None else None,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class SqlAlchemySessionStore(SessionStore):
    """``users_session`` rows, keyed by username."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _find_one(self, column: InstrumentedAttribute, value: str, action: str) -> DomainSession:
        with storage_errors(action), unit_of_work_scope(self._session_factory) as session:
            row = session.execute(
                select(UserSessionRow).where(column == value)
            ).scalar_one_or_none()
            found = _to_domain(row) if row is not None else None
        if found is None:
            raise SessionNotFoundError()
        return found

    def find_by_username(self, username: str) -> DomainSession:
        return self._find_one(UserSessionRow.username, username, "find_session_by_username")

    def find_by_refresh_token(self, refresh_token: str) -> DomainSession:
        return self._find_one(
            UserSessionRow.refresh_token, refresh_token, "find_session_by_refresh_token"
        )

    def find_by_token(self, token: str) -> DomainSession:
        return self._find_one(UserSessionRow.token, token, "find_session_by_token")

    def _username_taken(self, username: str) -> bool:
        with storage_errors("check_session_owner"), unit_of_work_scope(
            self._session_factory
        ) as session:
            return session.get(UserSessionRow, username) is not None

    def insert(self, session: DomainSession) -> None:
        """Create the row; a row already present for the username raises ``SessionConflictError``."""

        if session.expiry_date is None:
            raise StorageFailureError("refusing to insert a session without expiry_date")
        now = datetime.now(UTC)
        stmt = insert(_TABLE).values(
            username=session.username,
            token=session.token,
            refresh_token=session.refresh_token,
            expiry_date=session.expiry_date,
            created_at=session.created_at or now,
            updated_at=session.updated_at or now,
        )
        try:
            with storage_errors("insert_session"), unit_of_work_scope(
                self._session_factory
            ) as db:
                affected = db.connection().execute(stmt).rowcount
        except IntegrityError as exc:
            if self._username_taken(session.username):
                raise SessionConflictError(
                    f"session already exists for user={session.username}"
                ) from exc
            logger.error(f"sessions: insert rejected for user={session.username}: {exc.orig}")
            raise StorageFailureError("could not create session") from exc

        if affected != 1:
            logger.error(f"sessions: insert affected {affected} rows for user={session.username}")
            raise StorageFailureError("could not create session")
        logger.debug(
            f"sessions: inserted user={session.username} token={token_hint(session.token)}"
        )

    def update_token_and_expiry(self, session: DomainSession) -> None:
        if session.expiry_date is None:
            raise StorageFailureError("refusing to store a session without expiry_date")
        stmt = (
            update(_TABLE)
            .where(_TABLE.c.username == session.username)
            .values(
                token=session.token,
                expiry_date=session.expiry_date,
                updated_at=session.updated_at or datetime.now(UTC),
            )
        )
        try:
            with storage_errors("update_session"), unit_of_work_scope(
                self._session_factory
            ) as db:
                affected = db.connection().execute(stmt).rowcount
        except IntegrityError as exc:
            logger.error(f"sessions: update rejected for user={session.username}: {exc.orig}")
            raise StorageFailureError("could not update token") from exc
        if affected == 0:
            logger.error(f"sessions: update matched no row for user={session.username}")
            raise StorageFailureError("could not update token")
        logger.debug(
            f"sessions: updated user={session.username} token={token_hint(session.token)}"
        )

    def delete(self, username: str) -> bool:
        stmt = delete(_TABLE).where(_TABLE.c.username == username)
        with storage_errors("delete_session"), unit_of_work_scope(self._session_factory) as db:
            affected = db.connection().execute(stmt).rowcount
        return affected > 0
