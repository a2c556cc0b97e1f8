"""Tests for Settings validation."""

import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.shared.enums import ActionFailurePolicy


def test_defaults_need_no_environment(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("ACTION_FAILURE_POLICY", raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_url == ""
    assert settings.action_failure_policy is ActionFailurePolicy.CONTINUE
    assert settings.tenant_header_name == "X-Tenant-ID"


def test_database_url_must_use_asyncpg() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_url="postgresql://u:p@localhost/db")
    ok = Settings(_env_file=None, database_url="postgresql+asyncpg://u:p@localhost/db")
    assert ok.database_url.startswith("postgresql+asyncpg")


@pytest.mark.parametrize(
    "overrides",
    [
        {"channel_gateway_url": "gw.example.com"},
        {"webhook_timeout_seconds": 0},
        {"telemetry_sample_rate": 1.5},
    ],
)
def test_invalid_values_are_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_failure_policy_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("ACTION_FAILURE_POLICY", "abort")
    assert Settings(_env_file=None).action_failure_policy is ActionFailurePolicy.ABORT
