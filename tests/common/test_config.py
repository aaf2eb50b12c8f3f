from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from orderlink.config import (
    ConfigurationError,
    LinkageConfig,
    MissingConfigurationError,
    get_authorization_config,
    get_database_config,
    get_linkage_config,
    get_storage_config,
    require_env_vars,
)
from orderlink.domain.model import OrderStatus


def test_require_env_vars_reports_all_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIRST_VAR", raising=False)
    monkeypatch.setenv("SECOND_VAR", "   ")

    with pytest.raises(MissingConfigurationError, match="FIRST_VAR, SECOND_VAR"):
        require_env_vars(["FIRST_VAR", "SECOND_VAR"])


def test_linkage_defaults() -> None:
    config = get_linkage_config()

    assert config.match_window_seconds == 60
    assert config.paid_statuses == {OrderStatus.COMPLETED, OrderStatus.PROCESSING}
    assert config.subscriptions_enabled


def test_linkage_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORDERLINK_PAID_STATUSES", "completed")
    monkeypatch.setenv("ORDERLINK_MATCH_WINDOW_SECONDS", "120")
    monkeypatch.setenv("ORDERLINK_SUBSCRIPTIONS_ENABLED", "0")

    config = get_linkage_config()

    assert config.paid_statuses == {OrderStatus.COMPLETED}
    assert config.match_window_seconds == 120
    assert not config.subscriptions_enabled


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("ORDERLINK_PAID_STATUSES", "completed,shipped"),
        ("ORDERLINK_MATCH_WINDOW_SECONDS", "soon"),
        ("ORDERLINK_MATCH_WINDOW_SECONDS", "-1"),
    ],
)
def test_linkage_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_linkage_config()


def test_linkage_config_requires_paid_status() -> None:
    with pytest.raises(ConfigurationError):
        LinkageConfig(paid_statuses=frozenset())


def test_authorization_requires_secret() -> None:
    with pytest.raises(MissingConfigurationError):
        get_authorization_config()


def test_authorization_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORDERLINK_AUTH_SECRET", "s3cret")
    monkeypatch.setenv("ORDERLINK_OPERATORS", "alice, bob")
    monkeypatch.setenv("ORDERLINK_TOKEN_TTL_SECONDS", "300")

    config = get_authorization_config()

    assert config.secret == "s3cret"
    assert config.operators == {"alice", "bob"}
    assert config.token_ttl_seconds == 300


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_storage_uses_data_dir_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ORDERLINK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    storage = get_storage_config()

    assert storage.resolve_data_dir() == tmp_path.resolve()
    assert get_database_config().uri == f"sqlite+pysqlite:///{tmp_path.resolve() / 'orderlink.db'}"
