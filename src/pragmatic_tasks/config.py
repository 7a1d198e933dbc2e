# src/pragmatic_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every path lives under a local data dir unless overridden.
- Library code never reads the environment itself; settings are passed in.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "PTASKS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Local data paths ----
    data_dir: Path
    tasks_file: Path
    logs_dir: Path

    # ---- Status derivation ----
    timezone: Optional[str]
    detect_cycles: bool

    # ---- Connector flags ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "pragmatic-tasks").strip() or "pragmatic-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/ptasks"))
        log_dir = _env_path(_k("LOG_DIR"), data_dir)
        tasks_file = _env_path(_k("TASKS_FILE"), data_dir / "tasks.json")
        logs_dir = _env_path(_k("LOGS_DIR"), data_dir / "logs")

        # Empty means "local time of this process".
        timezone = _env(_k("TIMEZONE"), "").strip() or None
        detect_cycles = _env_bool(_k("DETECT_CYCLES"), True)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            data_dir=data_dir,
            tasks_file=tasks_file,
            logs_dir=logs_dir,
            timezone=timezone,
            detect_cycles=detect_cycles,
            console_enabled=console_enabled,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
