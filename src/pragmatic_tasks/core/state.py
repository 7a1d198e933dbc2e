# src/pragmatic_tasks/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from ..storage.resource import ResourceStore
from ..tasks.task_catalog import TaskCatalog


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    catalog: TaskCatalog
    store: ResourceStore

    # Serializes console commands against each other.
    lock: threading.Lock = field(default_factory=threading.Lock)

    def now(self) -> datetime:
        """Current instant in the configured timezone (local time when unset)."""
        tz_name = getattr(self.settings, "timezone", None)
        if tz_name:
            return datetime.now(ZoneInfo(tz_name))
        return datetime.now().astimezone()
