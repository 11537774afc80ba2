# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Credential and session lifecycle orchestration."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from roadmap_auth.domain.exceptions import InvariantViolationError
from roadmap_auth.domain.users.entities import Session, User
from roadmap_auth.domain.users.exceptions import (
    CredentialNotFoundError,
    HashingFailureError,
    InvalidRefreshTokenError,
    SessionConflictError,
    SessionExpiredError,
    SessionNotFoundError,
    StorageFailureError,
)
from roadmap_auth.domain.users.repositories import (
    CredentialStore,
    PasswordHasher,
    SessionStore,
    TokenGenerator,
)
from roadmap_auth.shared.logging import logger, token_hint

DEFAULT_SESSION_DURATION = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SessionService:
    """Sign-up, login and the one-session-per-user token lifecycle.

    Lifecycle per username: no session -> active -> (refreshed ->)* active.
    Expiry is only detected on demand through :meth:`is_expired`; nothing
    sweeps stale rows. The service keeps no mutable state of its own, so a
    single instance can serve concurrent requests.
    """

    def __init__(
        self,
        *,
        credentials: CredentialStore,
        sessions: SessionStore,
        password_hasher: PasswordHasher,
        token_generator: TokenGenerator,
        session_duration: timedelta = DEFAULT_SESSION_DURATION,
        clock: Callable[[], datetime] | None = None,
        log: Any = None,
    ) -> None:
        if session_duration <= timedelta(0):
            raise ValueError("session_duration must be positive")
        self._credentials = credentials
        self._sessions = sessions
        self._password_hasher = password_hasher
        self._token_generator = token_generator
        self._session_duration = session_duration
        self._clock = clock or _utcnow
        self._log = log or logger

    @property
    def session_duration(self) -> timedelta:
        return self._session_duration

    def _now(self) -> datetime:
        return _as_utc(self._clock())

    # credentials

    def sign_up(self, user: User, *, timeout: float | None = None) -> bool:
        """Store ``user`` with its plaintext password replaced by a hash.

        ``DuplicateCredentialError`` and ``StorageFailureError`` propagate
        unchanged so the caller decides whether to reveal a taken username.
        """

        try:
            hashed = self._password_hasher.hash(user.password, timeout=timeout)
        except HashingFailureError as exc:
            self._log.error(f"sign_up: hashing failed for user={user.username}: {exc}")
            raise

        self._credentials.add_user(user.with_password(hashed))
        self._log.info(f"sign_up: registered user={user.username}")
        return True

    def login(self, username: str, password: str, *, timeout: float | None = None) -> bool:
        """Check a username/password pair.

        An unknown username raises ``CredentialNotFoundError``, whose public
        payload is identical to a wrong password. A malformed stored hash is
        a server fault and surfaces as ``HashingFailureError``.
        """

        try:
            stored = self._credentials.find_user(username)
        except CredentialNotFoundError:
            self._log.info(f"login: rejected, no credential for user={username}")
            raise

        try:
            matched = self._password_hasher.verify(password, stored.password_hash, timeout=timeout)
        except HashingFailureError as exc:
            self._log.error(f"login: cannot verify stored hash for user={username}: {exc}")
            raise

        if matched:
            self._log.info(f"login: accepted user={username}")
        else:
            self._log.info(f"login: rejected, password mismatch for user={username}")
        return matched

    # sessions

    def create_session(self, username: str) -> Session:
        """Issue a session, or rotate the access token of the existing one."""

        try:
            existing = self._sessions.find_by_username(username)
        except SessionNotFoundError:
            existing = None

        if existing is not None:
            self._log.debug(f"create_session: user={username} already has a session, refreshing")
            return self._refresh_existing(existing.refresh_token, username)

        now = self._now()
        session = Session(
            username=username,
            token=self._token_generator.generate(),
            refresh_token=self._token_generator.generate(),
            expiry_date=now + self._session_duration,
            created_at=now,
            updated_at=now,
        )
        try:
            self._sessions.insert(session)
        except SessionConflictError:
            # Lost the insert race to a concurrent creator; its row is the session now.
            self._log.warning(f"create_session: concurrent insert for user={username}, refreshing")
            try:
                winner = self._sessions.find_by_username(username)
            except SessionNotFoundError as exc:
                raise StorageFailureError(
                    f"session for user={username} vanished after insert conflict"
                ) from exc
            return self._refresh_existing(winner.refresh_token, username)

        self._log.info(
            f"create_session: issued session user={username} "
            f"token={token_hint(session.token)} exp={session.expiry_date.isoformat()}"
        )
        return session

    def _refresh_existing(self, refresh_token: str, username: str) -> Session:
        try:
            return self.refresh_session(refresh_token)
        except InvalidRefreshTokenError as exc:
            raise StorageFailureError(
                f"session for user={username} disappeared during refresh"
            ) from exc

    def refresh_session(self, refresh_token: str) -> Session:
        """Give the session behind ``refresh_token`` a new access token and expiry.

        The refresh token itself is neither rotated nor aged: it stays valid
        for as long as its row exists.
        """

        if not refresh_token:
            raise InvalidRefreshTokenError()
        try:
            current = self._sessions.find_by_refresh_token(refresh_token)
        except SessionNotFoundError as exc:
            self._log.info(f"refresh_session: unknown refresh token {token_hint(refresh_token)}")
            raise InvalidRefreshTokenError() from exc

        now = self._now()
        updated = current.rotated(
            self._token_generator.generate(),
            now + self._session_duration,
            updated_at=now,
        )
        try:
            self._sessions.update_token_and_expiry(updated)
        except StorageFailureError as exc:
            self._log.error(f"refresh_session: update failed for user={current.username}: {exc}")
            raise StorageFailureError("could not update token") from exc

        self._log.info(
            f"refresh_session: rotated token user={updated.username} "
            f"token={token_hint(updated.token)} exp={updated.expiry_date.isoformat()}"
        )
        return updated

    def is_expired(self, session: Session) -> bool:
        """True when the current time is strictly past ``session.expiry_date``."""

        if session.expiry_date is None:
            self._log.error(f"is_expired: session for user={session.username} has no expiry")
            raise InvariantViolationError("session has no expiry date", field="expiry_date")
        return self._now() > _as_utc(session.expiry_date)

    def validate_session(self, session: Session) -> bool:
        """Return whether ``session`` is EXPIRED (not whether it is valid).

        Kept under this name for callers ported from the original router;
        new code should call :meth:`is_expired`.
        """

        return self.is_expired(session)

    def authenticate(self, token: str) -> Session:
        if not token:
            raise SessionNotFoundError()
        session = self._sessions.find_by_token(token)
        if self.is_expired(session):
            self._log.info(f"authenticate: stale token for user={session.username}")
            raise SessionExpiredError()
        return session

    def revoke_session(self, username: str) -> bool:
        removed = self._sessions.delete(username)
        if removed:
            self._log.info(f"revoke_session: removed session user={username}")
        else:
            self._log.debug(f"revoke_session: no session for user={username}")
        return removed


__all__ = ["DEFAULT_SESSION_DURATION", "SessionService"]
