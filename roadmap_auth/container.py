"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from roadmap_auth.application.services.password_hashing import Argon2PasswordHasher
from roadmap_auth.application.services.session_service import SessionService
from roadmap_auth.application.services.token_generator import SecretsTokenGenerator
from roadmap_auth.infrastructure.db import Database
from roadmap_auth.infrastructure.hashing_pool import PooledPasswordHasher
from roadmap_auth.infrastructure.repositories.credential_store import SqlAlchemyCredentialStore
from roadmap_auth.infrastructure.repositories.session_store import SqlAlchemySessionStore
from roadmap_auth.shared.config import AppConfig, load_config
from roadmap_auth.shared.logging import logger


class Container:
    """Builds the object graph for one process. Call :meth:`close` on shutdown."""

    def __init__(self, config: AppConfig | None = None, *, database: Database | None = None) -> None:
        self.config = config or load_config()
        self._database = database

    @cached_property
    def database(self) -> Database:
        return self._database or Database(self.config.database)

    @cached_property
    def password_hasher(self) -> PooledPasswordHasher:
        hashing = self.config.hashing
        return PooledPasswordHasher(
            Argon2PasswordHasher(hashing),
            max_workers=hashing.max_workers,
            default_timeout=hashing.timeout,
        )

    @cached_property
    def token_generator(self) -> SecretsTokenGenerator:
        return SecretsTokenGenerator(self.config.session.token_length)

    @cached_property
    def credential_store(self) -> SqlAlchemyCredentialStore:
        return SqlAlchemyCredentialStore(self.database.session_factory)

    @cached_property
    def session_store(self) -> SqlAlchemySessionStore:
        return SqlAlchemySessionStore(self.database.session_factory)

    @cached_property
    def session_service(self) -> SessionService:
        return SessionService(
            credentials=self.credential_store,
            sessions=self.session_store,
            password_hasher=self.password_hasher,
            token_generator=self.token_generator,
            session_duration=self.config.session.duration,
            log=logger,
        )

    def close(self) -> None:
        if "password_hasher" in self.__dict__:
            self.password_hasher.shutdown()
        if "database" in self.__dict__:
            self.database.dispose()
