# src/pragmatic_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the resource store and the task catalog into AppState.
"""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import get_settings
from ..core.state import AppState
from ..storage.resource import ResourceStore
from ..tasks.task_catalog import TaskCatalog
from ..tasks.task_loader import load_tasks

logger = logging.getLogger(__name__)


def _check_timezone(settings) -> None:
    tz_name = getattr(settings, "timezone", None)
    if not tz_name:
        return
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name!r}") from None


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.logs_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    A missing tasks file yields an empty catalog; a malformed one raises.
    """
    if settings is None:
        settings = get_settings()

    _check_timezone(settings)
    _ensure_local_dirs(settings)

    store = ResourceStore(settings.logs_dir)
    detect_cycles = bool(getattr(settings, "detect_cycles", True))

    if settings.tasks_file.exists():
        catalog = load_tasks(settings.tasks_file, store, detect_cycles=detect_cycles)
    else:
        logger.warning("Tasks file %s not found; starting with no tasks.", settings.tasks_file)
        catalog = TaskCatalog(detect_cycles=detect_cycles)

    return AppState(settings=settings, catalog=catalog, store=store)
