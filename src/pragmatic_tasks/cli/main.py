# src/pragmatic_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState from the tasks file, then either runs
the console REPL or prints a one-shot task listing (console disabled).
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import handle_line, run_console_loop
from ..errors import TaskError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except (TaskError, ValueError, OSError) as e:
        logger.error("Failed to load tasks from %s: %s", settings.tasks_file, e)
        sys.exit(1)

    if settings.console_enabled:
        run_console_loop(state)
    else:
        print(handle_line(state, "/tasks"))

    logger.info("Bye.")


if __name__ == "__main__":
    main()
