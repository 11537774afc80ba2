from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from roadmap_auth.infrastructure.db import Database
from roadmap_auth.shared.config import AppConfig, DatabaseConfig, HashingConfig, SessionConfig


@pytest.fixture()
def fast_hashing() -> HashingConfig:
    # minimum argon2 cost so the suite stays quick
    return HashingConfig(
        time_cost=1, memory_cost=8, parallelism=1, hash_len=16, salt_len=8, max_workers=2
    )


@pytest.fixture()
def database_config(tmp_path: Path) -> DatabaseConfig:
    return DatabaseConfig(url=f"sqlite:///{tmp_path / 'auth.db'}")


@pytest.fixture()
def database(database_config: DatabaseConfig) -> Iterator[Database]:
    db = Database(database_config)
    db.init_schema()
    yield db
    db.drop_schema()
    db.dispose()


@pytest.fixture()
def app_config(database_config: DatabaseConfig, fast_hashing: HashingConfig) -> AppConfig:
    return AppConfig(
        database=database_config,
        hashing=fast_hashing,
        session=SessionConfig(duration_minutes=30, token_length=128),
    )
