"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field

StyleName = Literal["client", "labs", "plain"]

DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.compose",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/drive.readonly",
]


def _default_config_dir() -> Path:
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config) if xdg_config else Path.home() / ".config"
    return base / "gworkspace-cli"


class GoogleSettings(BaseModel):
    """Settings controlling OAuth credentials and token lookup."""

    config_dir: Path = Field(
        default_factory=_default_config_dir,
        description="Global directory holding credentials.json and the legacy token",
    )
    credentials_path: Path | None = Field(
        default=None, description="OAuth client file; defaults to config_dir/credentials.json"
    )
    project_token_path: Path = Field(
        default=Path(".gworkspace/token.local.json"),
        description="Per-project token file, checked before the global token",
    )
    redirect_uri: str = Field(
        default="http://localhost:3000/callback", description="OAuth redirect URI"
    )
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))
    timeout_seconds: float = Field(
        default=30.0, gt=0, description="Request timeout for Google API calls"
    )

    def resolved_credentials_path(self) -> Path:
        """Return the OAuth client file location."""
        return self.credentials_path or self.config_dir / "credentials.json"

    def global_token_path(self) -> Path:
        """Return the legacy global token location."""
        return self.config_dir / "token.json"

    def token_candidates(self) -> list[Path]:
        """Token files in lookup priority order."""
        return [self.project_token_path, self.global_token_path()]


class MailSettings(BaseModel):
    """Defaults applied to outgoing mail."""

    style: StyleName = Field(default="client", description="Template for send-md")
    sender: str | None = Field(default=None, description="Optional From header")
    escape_title: bool = Field(
        default=False, description="HTML-escape the title placed in the template"
    )


class CalendarSettings(BaseModel):
    """Defaults for calendar commands."""

    calendar_id: str = Field(default="primary", description="Calendar to operate on")
    max_results: int = Field(default=10, ge=1, description="Events listed per call")
    time_zone: str = Field(default="UTC", description="Zone for timed events")


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="WARNING", description="Root logging level")
    structured: bool = Field(
        default=False, description="Toggle JSON structured logging"
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    google: GoogleSettings = Field(default_factory=GoogleSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_PREFIX = "GWORKSPACE_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _collect_env_values(
    env_file: Path | str | None, include_environment: bool
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    combined: dict[str, Any] = {**file_values, **env_values}

    for key, value in combined.items():
        path = _normalize_key(key)
        if not path:
            continue
        normalized_value: Any = value
        if isinstance(value, str) and value == "":
            normalized_value = None
        elif isinstance(value, str):
            lowercase_value = value.lower()
            if lowercase_value == "true":
                normalized_value = True
            elif lowercase_value == "false":
                normalized_value = False
            elif path[-1] == "scopes":
                normalized_value = [
                    scope.strip() for scope in value.split(",") if scope.strip()
                ]
        _merge_into_tree(collected, path, normalized_value)

    return collected


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment)
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "CalendarSettings",
    "GoogleSettings",
    "LoggingSettings",
    "MailSettings",
    "StyleName",
    "load_app_settings",
]
