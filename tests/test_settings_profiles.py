from __future__ import annotations

from pathlib import Path

import pytest

from becs_portal.core.config import MAX_UPLOAD_SIZE_BYTES, Settings


def test_environment_profiles_apply_defaults() -> None:
    dev = Settings(environment="development")
    assert dev.environment == "development"
    assert dev.log_level == "DEBUG"
    assert dev.reload is True
    assert dev.db_auto_create is True

    test_profile = Settings(environment="test")
    assert test_profile.environment == "test"
    assert test_profile.log_level == "WARNING"
    assert test_profile.reload is False
    assert test_profile.db_auto_create is False

    ci_profile = Settings(environment="ci")
    assert ci_profile.environment == "ci"
    assert ci_profile.log_level == "INFO"
    assert ci_profile.reload is False


def test_environment_aliases_are_normalised() -> None:
    assert Settings(environment="DEV").environment == "development"
    assert Settings(environment="testing").environment == "test"
    assert Settings(environment="staging").environment == "development"


def test_environment_profile_respects_explicit_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BECS_LOG_LEVEL", "error")
    overridden = Settings(environment="test")
    assert overridden.log_level == "ERROR"

    monkeypatch.delenv("BECS_LOG_LEVEL", raising=False)
    monkeypatch.setenv("BECS_DB_AUTO_CREATE", "true")
    assert Settings(environment="test").db_auto_create is True


def test_upload_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BECS_UPLOAD_DIR", "/srv/becs/uploads")
    monkeypatch.setenv("BECS_MAX_UPLOAD_SIZE_BYTES", "-5")

    settings = Settings()

    assert settings.upload_dir == Path("/srv/becs/uploads")
    assert settings.max_upload_size_bytes == MAX_UPLOAD_SIZE_BYTES


def test_cors_origins_accept_comma_separated_text() -> None:
    settings = Settings(cors_allow_origins="https://portal.example.com, https://admin.example.com")

    assert settings.cors_allow_origins == ["https://portal.example.com", "https://admin.example.com"]
