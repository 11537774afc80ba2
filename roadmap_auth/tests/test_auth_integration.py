from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

import pytest

from roadmap_auth.container import Container
from roadmap_auth.domain.users.entities import User
from roadmap_auth.domain.users.exceptions import (
    CredentialNotFoundError,
    DuplicateCredentialError,
    InvalidRefreshTokenError,
)
from roadmap_auth.infrastructure.db import Database, UserRow, UserSessionRow
from roadmap_auth.shared.config import AppConfig


@pytest.fixture()
def container(app_config: AppConfig, database: Database) -> Iterator[Container]:
    built = Container(app_config, database=database)
    yield built
    built.password_hasher.shutdown()


def _user(username: str = "alice", password: str = "P@ss1") -> User:
    return User(username=username, email=f"{username}@example.com", password=password, name="A")


def test_sign_up_login_session_flow(container: Container, database: Database) -> None:
    service = container.session_service

    assert service.sign_up(_user()) is True
    assert service.login("alice", "P@ss1") is True
    assert service.login("alice", "wrong") is False
    with pytest.raises(CredentialNotFoundError):
        service.login("bob", "P@ss1")

    a = service.create_session("alice")
    b = service.create_session("alice")
    assert b.refresh_token == a.refresh_token
    assert b.token != a.token
    assert b.expiry_date >= a.expiry_date
    assert len(a.token) == len(a.refresh_token) == 128

    c = service.refresh_session(a.refresh_token)
    assert c.refresh_token == a.refresh_token
    assert service.validate_session(c) is False
    assert service.authenticate(c.token).username == "alice"

    with database.session_scope() as db:
        stored = db.get(UserRow, "alice")
        assert stored is not None
        assert stored.password_hash != "P@ss1"
        assert stored.password_hash.startswith("$argon2id$")
        assert db.query(UserSessionRow).count() == 1


def test_duplicate_sign_up(container: Container) -> None:
    service = container.session_service
    service.sign_up(_user())

    with pytest.raises(DuplicateCredentialError):
        service.sign_up(_user(password="other"))
    assert service.login("alice", "P@ss1") is True


def test_unknown_refresh_token(container: Container) -> None:
    with pytest.raises(InvalidRefreshTokenError):
        container.session_service.refresh_session("x" * 128)


def test_concurrent_create_session_keeps_one_row(container: Container, database: Database) -> None:
    service = container.session_service
    service.sign_up(_user())

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda _: service.create_session("alice"), range(8)))

    assert len({session.refresh_token for session in results}) == 1
    with database.session_scope() as db:
        assert db.query(UserSessionRow).count() == 1


def test_revoke_then_create_issues_new_refresh_token(container: Container) -> None:
    service = container.session_service
    service.sign_up(_user())
    first = service.create_session("alice")

    assert service.revoke_session("alice") is True
    second = service.create_session("alice")

    assert second.refresh_token != first.refresh_token
