from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from roadmap_auth.domain.users.entities import Session, User
from roadmap_auth.domain.users.exceptions import (
    CredentialNotFoundError,
    DuplicateCredentialError,
    SessionConflictError,
    SessionNotFoundError,
    StorageFailureError,
)
from roadmap_auth.infrastructure.db import Database, UserSessionRow
from roadmap_auth.infrastructure.repositories.credential_store import SqlAlchemyCredentialStore
from roadmap_auth.infrastructure.repositories.session_store import SqlAlchemySessionStore

EXPIRY = datetime(2025, 3, 1, 12, 30, tzinfo=UTC)


@pytest.fixture()
def credentials(database: Database) -> SqlAlchemyCredentialStore:
    return SqlAlchemyCredentialStore(database.session_factory)


@pytest.fixture()
def sessions(database: Database, credentials: SqlAlchemyCredentialStore) -> SqlAlchemySessionStore:
    credentials.add_user(
        User(username="alice", email="alice@example.com", password="$argon2id$stub", name="Alice")
    )
    return SqlAlchemySessionStore(database.session_factory)


def _session(**overrides) -> Session:
    values = {
        "username": "alice",
        "token": "a" * 128,
        "refresh_token": "r" * 128,
        "expiry_date": EXPIRY,
    }
    values.update(overrides)
    return Session(**values)


def test_add_and_find_user(credentials: SqlAlchemyCredentialStore) -> None:
    credentials.add_user(
        User(username="bob", email="bob@example.com", password="$argon2id$stub", name="Bob")
    )

    found = credentials.find_user("bob")

    assert found.username == "bob"
    assert found.email == "bob@example.com"
    assert found.password_hash == "$argon2id$stub"
    assert found.name == "Bob"
    assert found.created_at is not None and found.created_at.tzinfo is not None
    assert found.updated_at is not None


def test_find_user_is_exact_match(credentials: SqlAlchemyCredentialStore) -> None:
    credentials.add_user(User(username="bob", email="b@example.com", password="h", name="Bob"))

    with pytest.raises(CredentialNotFoundError):
        credentials.find_user("bo")
    with pytest.raises(CredentialNotFoundError):
        credentials.find_user("nobody")


def test_duplicate_user_keeps_original(credentials: SqlAlchemyCredentialStore) -> None:
    credentials.add_user(User(username="bob", email="b@example.com", password="h1", name="Bob"))

    with pytest.raises(DuplicateCredentialError) as excinfo:
        credentials.add_user(
            User(username="bob", email="evil@example.com", password="h2", name="Mallory")
        )

    assert excinfo.value.to_dict() == {"error": "username_taken", "context": {"username": "bob"}}
    found = credentials.find_user("bob")
    assert (found.email, found.password_hash, found.name) == ("b@example.com", "h1", "Bob")


def test_insert_and_lookup_session(sessions: SqlAlchemySessionStore) -> None:
    sessions.insert(_session())

    by_name = sessions.find_by_username("alice")
    by_refresh = sessions.find_by_refresh_token("r" * 128)
    by_token = sessions.find_by_token("a" * 128)

    assert by_name == by_refresh == by_token
    assert by_name.expiry_date == EXPIRY
    assert by_name.token == "a" * 128


def test_lookups_miss(sessions: SqlAlchemySessionStore) -> None:
    with pytest.raises(SessionNotFoundError):
        sessions.find_by_username("alice")
    with pytest.raises(SessionNotFoundError):
        sessions.find_by_refresh_token("nope")
    with pytest.raises(SessionNotFoundError):
        sessions.find_by_token("nope")


def test_second_insert_for_user_conflicts(sessions: SqlAlchemySessionStore) -> None:
    sessions.insert(_session())

    with pytest.raises(SessionConflictError):
        sessions.insert(_session(token="b" * 128, refresh_token="s" * 128))

    assert sessions.find_by_username("alice").token == "a" * 128


def test_insert_for_unknown_user_is_storage_failure(sessions: SqlAlchemySessionStore) -> None:
    with pytest.raises(StorageFailureError) as excinfo:
        sessions.insert(_session(username="ghost"))

    assert not isinstance(excinfo.value, SessionConflictError)


def test_update_touches_only_token_and_expiry(
    sessions: SqlAlchemySessionStore, database: Database
) -> None:
    sessions.insert(_session())
    later = EXPIRY + timedelta(minutes=10)

    sessions.update_token_and_expiry(
        _session(token="c" * 128, refresh_token="ignored", expiry_date=later)
    )

    found = sessions.find_by_username("alice")
    assert found.token == "c" * 128
    assert found.expiry_date == later
    assert found.refresh_token == "r" * 128
    with database.session_scope() as db:
        assert db.query(UserSessionRow).count() == 1


def test_update_without_row_fails(sessions: SqlAlchemySessionStore) -> None:
    with pytest.raises(StorageFailureError):
        sessions.update_token_and_expiry(_session())


def test_delete(sessions: SqlAlchemySessionStore) -> None:
    sessions.insert(_session())

    assert sessions.delete("alice") is True
    assert sessions.delete("alice") is False
    with pytest.raises(SessionNotFoundError):
        sessions.find_by_username("alice")


def test_add_user_constraint_failure_is_storage_failure(
    credentials: SqlAlchemyCredentialStore,
) -> None:
    with pytest.raises(StorageFailureError) as excinfo:
        credentials.add_user(User(username="bob", email=None, password="h", name="Bob"))

    assert not isinstance(excinfo.value, DuplicateCredentialError)
    assert excinfo.value.detail == "could not add user"
    with pytest.raises(CredentialNotFoundError):
        credentials.find_user("bob")


def test_update_colliding_token_is_storage_failure(
    sessions: SqlAlchemySessionStore, credentials: SqlAlchemyCredentialStore
) -> None:
    credentials.add_user(User(username="bob", email="b@example.com", password="h", name="Bob"))
    sessions.insert(_session())
    sessions.insert(_session(username="bob", token="b" * 128, refresh_token="s" * 128))

    with pytest.raises(StorageFailureError) as excinfo:
        sessions.update_token_and_expiry(_session(token="b" * 128))

    assert "b" * 128 not in str(excinfo.value)
    assert sessions.find_by_username("alice").token == "a" * 128
    assert sessions.find_by_username("bob").token == "b" * 128
