"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) away from the CLI.
- Lets adapters (HTTP lookups, cache) and the batch runner read the same
  tunables consistently.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "dodobox"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "dodobox"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "dodobox"
    return Path.home() / ".config" / "dodobox"


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


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Write or update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# dodobox user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class LookupProvider(str, Enum):
    """Which remote service answers reputation lookups."""

    ENDPOINT = "endpoint"
    ABUSEIPDB = "abuseipdb"


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typed and validated at the edge (env vars) without leaking into the core.
    - One configuration contract shared by the CLI, adapters and batch runner.
    """

    model_config = SettingsConfigDict(
        env_prefix="DODOBOX_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the per-user config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    batch_size: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Lookups launched concurrently per group.",
    )
    batch_delay_ms: int = Field(
        default=500,
        ge=0,
        description="Pause between groups in milliseconds (0 disables it).",
    )

    provider: LookupProvider = Field(
        default=LookupProvider.ENDPOINT,
        description="Lookup backend: the check endpoint or AbuseIPDB directly.",
    )
    lookup_endpoint: str = Field(
        default="http://localhost:4570/check/endpoint",
        min_length=8,
        description="URL of the check endpoint receiving {'ip': ...} POSTs.",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="dodobox/0.1",
        min_length=1,
        description="User-Agent sent with lookups.",
    )

    abuseipdb_api_key: str | None = Field(
        default=None,
        description="AbuseIPDB API key (only for provider=abuseipdb).",
    )
    abuseipdb_base_url: str = Field(
        default="https://api.abuseipdb.com/api/v2",
        min_length=8,
        description="AbuseIPDB API base URL.",
    )
    abuseipdb_max_age_days: int = Field(
        default=90,
        ge=1,
        le=365,
        description="maxAgeInDays sent to the AbuseIPDB check endpoint.",
    )

    cache_ttl_seconds: float = Field(
        default=3600.0,
        ge=0,
        description="How long successful lookups are reused (0 disables the cache).",
    )

    log_level: str = Field(
        default="WARNING",
        description="Log level for structlog and stdlib loggers.",
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of the console format.",
    )
