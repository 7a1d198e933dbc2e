# src/pragmatic_tasks/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..errors import TaskError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str) -> str | None:
    """
    Run one console line through the command registry.

    Task errors and I/O errors are reported to the user; the loop keeps going.
    """
    try:
        with state.lock:
            response = command_registry.handle(state, line)
    except (TaskError, ValueError, OSError) as e:
        logger.warning("Command %r failed: %s", line, e)
        return f"Error: {e}"
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    if response is None:
        return "Not a command. Use /help to list available commands."
    return response


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (%d tasks).", len(state.catalog))
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        _print_ts(handle_line(state, user_input) or "")

    logger.info("Console connector finished.")
