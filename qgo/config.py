"""App configuration loading helpers."""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID, uuid4

import tomllib

from pydantic import BaseModel, Field, ValidationError, field_validator

from .dialects import dialect_for
from .errors import ProfileNotFound
from .models import ConnectionProfile, DatabaseKind

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "qgo" / "config.toml"
HISTORY_FILE_NAME = "history.txt"


class Settings(BaseModel):
    """User-tunable settings stored next to the profiles."""

    query_timeout_seconds: int = Field(default=5, ge=1)
    max_rows_display: int | None = Field(default=1000, ge=1)
    history_size: int = Field(default=1000, ge=0)

    @field_validator("max_rows_display", mode="before")
    @classmethod
    def _no_limit(cls, value: object) -> object:
        # TOML has no null, so an unlimited display is stored as "none".
        if isinstance(value, str) and value.strip().lower() == "none":
            return None
        return value


class ConnectionProfileConfig(BaseModel):
    """Connection profile as stored in config.toml (never holds a password)."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    kind: DatabaseKind
    host: str = "localhost"
    port: int | None = Field(default=None, ge=0, le=65535)
    username: str = ""
    database: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_profile(self, password: str = "") -> ConnectionProfile:
        port = self.port if self.port is not None else dialect_for(self.kind).default_port
        return ConnectionProfile(
            id=self.id,
            name=self.name,
            kind=self.kind,
            host=self.host,
            port=port,
            username=self.username,
            password=password,
            database=self.database,
            created_at=self.created_at,
        )

    @property
    def display_name(self) -> str:
        return self.to_profile().display_name


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    profiles: list[ConnectionProfileConfig] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)
    active_profile: str | None = None

    def profile_by_name(self, name: str) -> ConnectionProfileConfig | None:
        return next((profile for profile in self.profiles if profile.name == name), None)

    def profile_by_id(self, profile_id: UUID) -> ConnectionProfileConfig | None:
        return next((profile for profile in self.profiles if profile.id == profile_id), None)

    def with_profile(self, profile: ConnectionProfileConfig) -> AppConfig:
        """Return a copy with ``profile`` added, replacing any same-named entry."""

        profiles = [entry for entry in self.profiles if entry.name != profile.name]
        profiles.append(profile)
        return self.model_copy(update={"profiles": profiles})

    def without_profile(self, profile_id: UUID) -> AppConfig:
        """Return a copy without the profile ``profile_id``."""

        profiles = [entry for entry in self.profiles if entry.id != profile_id]
        if len(profiles) == len(self.profiles):
            raise ProfileNotFound(profile_id)
        removed = self.profile_by_id(profile_id)
        active = self.active_profile
        if removed is not None and removed.name == active:
            active = None
        return self.model_copy(update={"profiles": profiles, "active_profile": active})

    def with_active_profile(self, name: str | None) -> AppConfig:
        """Return a copy with the active profile updated."""

        return self.model_copy(update={"active_profile": name})

    def with_settings(self, **updates: object) -> AppConfig:
        """Return a copy with settings changes applied and validated.

        Raises:
            ValidationError: if an updated value is out of range.
        """

        settings = Settings.model_validate({**self.settings.model_dump(), **updates})
        return self.model_copy(update={"settings": settings})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing or broken."""

    try:
        with CONFIG_FILE.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Failed to parse existing config %s: %s", CONFIG_FILE, exc)
        _backup_config()
        return AppConfig()

    try:
        return AppConfig.model_validate(_from_toml(raw))
    except ValidationError as exc:
        LOG.warning("Invalid config %s: %s", CONFIG_FILE, exc)
        _backup_config()
        return AppConfig()


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    settings = config.settings
    lines: list[str] = []
    if config.active_profile:
        lines.append(f"active_profile = {_toml_str(config.active_profile)}")
        lines.append("")
    lines.append("[settings]")
    lines.append(f"query_timeout_seconds = {settings.query_timeout_seconds}")
    max_rows = _toml_str("none") if settings.max_rows_display is None else settings.max_rows_display
    lines.append(f"max_rows_display = {max_rows}")
    lines.append(f"history_size = {settings.history_size}")
    for profile in config.profiles:
        lines.append("")
        lines.append("[[profiles]]")
        lines.append(f"id = {_toml_str(str(profile.id))}")
        lines.append(f"name = {_toml_str(profile.name)}")
        lines.append(f"kind = {_toml_str(profile.kind.value)}")
        lines.append(f"host = {_toml_str(profile.host)}")
        if profile.port is not None:
            lines.append(f"port = {profile.port}")
        lines.append(f"username = {_toml_str(profile.username)}")
        lines.append(f"database = {_toml_str(profile.database)}")
        lines.append(f"created_at = {profile.created_at.isoformat()}")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def history_file() -> Path:
    """Query history lives next to the config file."""

    return CONFIG_FILE.with_name(HISTORY_FILE_NAME)


def _from_toml(raw: dict[str, object]) -> dict[str, object]:
    data: dict[str, object] = {}
    active_profile = raw.get("active_profile")
    if isinstance(active_profile, str):
        data["active_profile"] = active_profile
    settings = raw.get("settings")
    if isinstance(settings, dict):
        data["settings"] = settings
    profiles = raw.get("profiles")
    if isinstance(profiles, list):
        # Stray password keys from hand-edited files are dropped, never loaded.
        data["profiles"] = [
            {key: value for key, value in profile.items() if key != "password"}
            for profile in profiles
            if isinstance(profile, dict) and profile.get("name")
        ]
    return data


def _backup_config() -> None:
    backup = CONFIG_FILE.with_suffix(".toml.backup")
    try:
        shutil.copyfile(CONFIG_FILE, backup)
    except OSError as exc:
        LOG.warning("Failed to create config backup %s: %s", backup, exc)
        return
    LOG.warning("Backed up unreadable config to %s; using defaults", backup)


def _toml_str(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes.
    return json.dumps(value, ensure_ascii=False)


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "ConnectionProfileConfig",
    "Settings",
    "history_file",
    "load_config",
    "save_config",
]
