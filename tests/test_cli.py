"""Tests for the profile management commands."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from qgo import config as config_module
from qgo.cli import main, parse_args
from qgo.config import load_config
from qgo.models import DatabaseKind


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", path)
    return path


def test_parse_args_defaults_to_tui() -> None:
    args = parse_args([])

    assert args.command is None
    assert args.connection is None


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0

    assert capsys.readouterr().out.startswith("qgo version ")


def test_list_without_profiles(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["list"]) == 0

    assert "No database connections found" in capsys.readouterr().out


def test_add_list_and_remove(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["add", "Warehouse", "--kind", "postgres", "--host", "wh", "--user", "bi", "--database", "dw"]) == 0

    config = load_config()
    assert len(config.profiles) == 1
    profile = config.profiles[0]
    assert profile.kind is DatabaseKind.POSTGRESQL
    assert profile.to_profile().port == 5432

    capsys.readouterr()
    assert main(["list"]) == 0
    listing = capsys.readouterr().out
    assert "Warehouse (wh:5432)" in listing
    assert str(profile.id) in listing

    assert main(["remove", str(profile.id)]) == 0
    assert load_config().profiles == []


def test_remove_by_name_and_unknown(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["add", "Notes", "--kind", "sqlite", "--database", "notes.db"])

    assert main(["remove", "Notes"]) == 0
    assert main(["remove", "Notes"]) == 1
    assert "Connection not found: Notes" in capsys.readouterr().err


def test_add_with_test_checks_connection(
    config_path: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    db_path = tmp_path / "ok.db"
    with sqlite3.connect(db_path) as conn:
        conn.execute("CREATE TABLE t (id INTEGER)")

    assert main(["add", "Ok", "--kind", "sqlite", "--database", str(db_path), "--test"]) == 0
    assert "Connection test succeeded." in capsys.readouterr().out

    missing = tmp_path / "missing.db"
    assert main(["add", "Missing", "--kind", "sqlite", "--database", str(missing), "--test"]) == 1
    assert "Connection test failed" in capsys.readouterr().err
    assert [profile.name for profile in load_config().profiles] == ["Ok"]


def test_connect_to_unknown_profile_fails(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-c", "Nope"]) == 1

    assert "Connection not found: Nope" in capsys.readouterr().err


@pytest.mark.parametrize("port", ["70000", "-1", "abc"])
def test_add_rejects_invalid_port(config_path: Path, port: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["add", "Bad", "--kind", "mysql", "--port", port])

    assert excinfo.value.code == 2
    assert not config_path.exists()


def test_add_save_anyway_keeps_failed_profile(
    config_path: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    missing = tmp_path / "missing.db"

    code = main(["add", "Later", "--kind", "sqlite", "--database", str(missing), "--test", "--save-anyway"])

    assert code == 0
    assert "Connection test failed" in capsys.readouterr().err
    assert [profile.name for profile in load_config().profiles] == ["Later"]


def test_settings_shows_defaults_without_saving(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["settings"]) == 0

    out = capsys.readouterr().out
    assert "Query timeout: 5 seconds" in out
    assert "Max rows display: 1000" in out
    assert "History size: 1000" in out
    assert not config_path.exists()


def test_settings_updates_are_persisted(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["settings", "--timeout", "12", "--max-rows", "none", "--history-size", "50"]) == 0

    settings = load_config().settings
    assert settings.query_timeout_seconds == 12
    assert settings.max_rows_display is None
    assert settings.history_size == 50
    assert "Max rows display: none" in capsys.readouterr().out

    assert main(["settings", "--max-rows", "25"]) == 0
    settings = load_config().settings
    assert settings.max_rows_display == 25
    assert settings.query_timeout_seconds == 12


@pytest.mark.parametrize("argv", [["--timeout", "0"], ["--max-rows", "0"], ["--history-size", "-3"]])
def test_settings_rejects_out_of_range_values(config_path: Path, argv: list[str]) -> None:
    with pytest.raises(SystemExit):
        main(["settings", *argv])

    assert not config_path.exists()
