from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from roadmap_auth.shared.config import AppConfig, HashingConfig, SessionConfig
from roadmap_auth.shared.logging import (
    clear_correlation_id,
    get_correlation_id,
    logger,
    sanitize_message,
    set_correlation_id,
    setup_logging,
    token_hint,
)


def test_session_defaults() -> None:
    config = SessionConfig()

    assert config.token_length == 128
    assert config.duration == timedelta(minutes=30)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SESSION_DURATION_MINUTES", "15")
    monkeypatch.setenv("TOKEN_LENGTH", "64")
    monkeypatch.setenv("HASHING_WORKERS", "8")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///override.db")

    config = AppConfig()

    assert config.session.duration == timedelta(minutes=15)
    assert config.session.token_length == 64
    assert config.hashing.max_workers == 8
    assert config.database.url == "sqlite:///override.db"


def test_rejects_short_tokens() -> None:
    with pytest.raises(ValidationError):
        SessionConfig(token_length=8)


def test_rejects_zero_workers() -> None:
    with pytest.raises(ValidationError):
        HashingConfig(max_workers=0)


def test_debug_logging_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG_LOGGING", "yes")

    assert AppConfig().debug_logging is True


@pytest.mark.parametrize(
    ("message", "secret"),
    [
        ("stored $argon2id$v=19$m=65536,t=3,p=4$c2FsdA$ZGlnZXN0 for alice", "ZGlnZXN0"),
        ("refresh_token=" + "R" * 40, "R" * 40),
        ("token: " + "T" * 40, "T" * 40),
        ("password=hunter22", "hunter22"),
        ("postgresql+psycopg://app:s3cr3t@db/auth", "s3cr3t"),
        ("Authorization: Bearer " + "b" * 30, "b" * 30),
    ],
)
def test_sanitize_message_redacts(message: str, secret: str) -> None:
    cleaned = sanitize_message(message)

    assert secret not in cleaned
    assert "REDACTED" in cleaned


def test_sanitize_keeps_plain_text() -> None:
    assert sanitize_message("login: accepted user=alice") == "login: accepted user=alice"


def test_token_hint() -> None:
    assert token_hint("abcdefghijkl") == "abcdef…"
    assert token_hint("") == "<none>"
    assert token_hint(None) == "<none>"


def test_correlation_id_roundtrip() -> None:
    set_correlation_id("req-42")
    assert get_correlation_id() == "req-42"

    clear_correlation_id()
    assert get_correlation_id() == "-"


def test_setup_logging_redacts_file_sink(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    log_file = tmp_path / "logs" / "auth.log"
    monkeypatch.setenv("LOG_FILE", str(log_file))

    setup_logging("DEBUG")
    logger.info("sign_up: password=hunter22 user=alice")
    logger.complete()

    content = log_file.read_text(encoding="utf-8")
    assert "user=alice" in content
    assert "hunter22" not in content

    monkeypatch.delenv("LOG_FILE")
    setup_logging("INFO")
