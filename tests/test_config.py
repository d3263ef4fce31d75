"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import pytest
from pydantic import ValidationError

from qgo import config as config_module
from qgo.config import AppConfig, ConnectionProfileConfig, Settings, load_config, save_config
from qgo.errors import ProfileNotFound
from qgo.models import DatabaseKind


def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.query_timeout_seconds == 5
    assert settings.max_rows_display == 1000
    assert settings.history_size == 1000


def test_settings_reject_zero_timeout() -> None:
    with pytest.raises(ValidationError):
        Settings(query_timeout_seconds=0)


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
active_profile = "Local"

[settings]
query_timeout_seconds = 12
max_rows_display = 50

[[profiles]]
id = "8a6e0804-2bd0-4672-b79e-d97b2a1d7ba5"
name = "Local"
kind = "PostgreSQL"
host = "localhost"
username = "postgres"
database = "postgres"
password = "should-not-load"

[[profiles]]
name = "Notes"
kind = "SQLite"
database = "/home/me/notes.db"
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.active_profile == "Local"
    assert result.settings.query_timeout_seconds == 12
    assert result.settings.max_rows_display == 50
    assert result.settings.history_size == 1000
    assert [profile.name for profile in result.profiles] == ["Local", "Notes"]
    assert result.profiles[0].kind is DatabaseKind.POSTGRESQL
    assert str(result.profiles[0].id) == "8a6e0804-2bd0-4672-b79e-d97b2a1d7ba5"
    assert result.profiles[0].to_profile().password == ""
    assert result.profiles[0].to_profile().port == 5432
    assert result.profiles[1].kind is DatabaseKind.SQLITE


def test_load_config_backs_up_toml_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("active_profile = [unterminated")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()
    backup = tmp_path / "config.toml.backup"
    assert backup.read_text() == "active_profile = [unterminated"


def test_load_config_backs_up_invalid_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[[profiles]]\nname = "Odd"\nkind = "Oracle"\n')
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()
    assert (tmp_path / "config.toml.backup").exists()


def test_save_config_round_trips(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)
    original = AppConfig(
        profiles=[
            ConnectionProfileConfig(
                name='Quote "Me"',
                kind=DatabaseKind.MYSQL,
                host="db.local",
                port=3307,
                username="root",
                database="shop",
            ),
            ConnectionProfileConfig(name="Notes", kind=DatabaseKind.SQLITE, database="C:\\data\\notes.db"),
        ],
        settings=Settings(query_timeout_seconds=9, max_rows_display=None),
        active_profile="Notes",
    )

    save_config(original)
    content = config_path.read_text()
    loaded = load_config()

    assert "[[profiles]]" in content
    assert 'kind = "MySQL"' in content
    assert "password" not in content
    assert "max_rows_display = \"none\"" in content
    assert loaded.active_profile == "Notes"
    assert loaded.settings.query_timeout_seconds == 9
    assert loaded.settings.max_rows_display is None
    assert loaded.profiles == original.profiles


def test_with_profile_replaces_same_name() -> None:
    first = ConnectionProfileConfig(name="Local", kind=DatabaseKind.SQLITE, database="a.db")
    second = ConnectionProfileConfig(name="Local", kind=DatabaseKind.SQLITE, database="b.db")

    config = AppConfig().with_profile(first).with_profile(second)

    assert len(config.profiles) == 1
    assert config.profiles[0].database == "b.db"


def test_without_profile_removes_and_clears_active() -> None:
    profile = ConnectionProfileConfig(name="Local", kind=DatabaseKind.SQLITE)
    config = AppConfig(profiles=[profile], active_profile="Local")

    updated = config.without_profile(profile.id)

    assert updated.profiles == []
    assert updated.active_profile is None
    assert config.profiles == [profile]


def test_without_profile_raises_for_unknown_id() -> None:
    with pytest.raises(ProfileNotFound):
        AppConfig().without_profile(uuid4())


def test_with_active_profile_updates_field() -> None:
    config = AppConfig()

    updated = config.with_active_profile("Local")

    assert updated.active_profile == "Local"


def test_with_settings_updates_values() -> None:
    config = AppConfig()

    updated = config.with_settings(history_size=10)

    assert updated.settings.history_size == 10
    assert config.settings.history_size == 1000


def test_profile_lookup_helpers() -> None:
    profile = ConnectionProfileConfig(name="Warehouse", kind=DatabaseKind.POSTGRESQL, host="wh", port=6543)
    config = AppConfig(profiles=[profile])

    assert config.profile_by_name("Warehouse") is profile
    assert config.profile_by_id(profile.id) is profile
    assert config.profile_by_name("Missing") is None
    assert profile.display_name == "Warehouse (wh:6543)"


@pytest.mark.parametrize("port", [-1, 65536, 70000])
def test_profile_port_must_fit_tcp_range(port: int) -> None:
    with pytest.raises(ValidationError):
        ConnectionProfileConfig(name="bad", kind=DatabaseKind.MYSQL, port=port)


def test_load_config_backs_up_out_of_range_port(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[[profiles]]\nname = "bad"\nkind = "MySQL"\nport = 70000\n')
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()
    assert (tmp_path / "config.toml.backup").exists()


def test_with_settings_validates_updates() -> None:
    config = AppConfig()

    with pytest.raises(ValidationError):
        config.with_settings(query_timeout_seconds=0)
    assert config.with_settings(max_rows_display=None).settings.max_rows_display is None


def test_max_rows_none_is_read_from_toml() -> None:
    assert Settings.model_validate({"max_rows_display": "none"}).max_rows_display is None


def test_history_file_sits_next_to_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "qgo" / "config.toml")

    assert config_module.history_file() == tmp_path / "qgo" / "history.txt"
