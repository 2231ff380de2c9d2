"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without polluting
  the CLI.
- Lets services and adapters read server/timeouts consistently.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

APP_NAME = "dict-client"
DEFAULT_PORT = 2628


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env file."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        try:
            existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", env_path, exc)
            existing = {}

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = [f"# {APP_NAME} user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without logic in the core.
    - One configuration contract for CLI, services and the connection.
    """

    model_config = SettingsConfigDict(
        env_prefix="DICTCLIENT_",
        extra="ignore",
        case_sensitive=False,
        # Project file first (dev), then the user's global file.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    host: str = Field(
        default="dict.org",
        min_length=1,
        description="DICT server host name.",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        ge=1,
        le=65535,
        description="DICT server TCP port (RFC 2229 default: 2628).",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Socket deadline for connect/read (None blocks forever).",
    )
    quit_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="How long close() waits for the QUIT acknowledgement.",
    )
    encoding: str = Field(
        default="utf-8",
        min_length=1,
        description="Text encoding of the wire protocol.",
    )

    default_database: str = Field(
        default="*",
        min_length=1,
        description="Database selector used when none is given ('*' = all, '!' = first match).",
    )
    default_strategy: str = Field(
        default=".",
        min_length=1,
        description="MATCH strategy used when none is given ('.' = server default).",
    )
    suggest_on_miss: bool = Field(
        default=True,
        description="Run MATCH for suggestions when DEFINE finds nothing.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level (DEBUG, INFO, WARNING, ERROR).",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON lines instead of Rich-formatted log output.",
    )
