# config.example.py

"""
Documentation-only module (safe to commit).

Settings are read from environment variables, optionally via a local .env
file (gitignored). See src/pragmatic_tasks/config.py for how they are parsed.
"""

ENV_VARS = {
    # App / logging
    "PTASKS_APP_NAME": "App display name (default: pragmatic-tasks).",
    "PTASKS_LOG_LEVEL": "Console logging level (default: INFO). The file log is always DEBUG.",
    "PTASKS_LOG_DIR": "Directory for ptasks.log (default: <data_dir>).",
    # Paths (gitignored)
    "PTASKS_DATA_DIR": "Local data directory (default: .local/ptasks).",
    "PTASKS_TASKS_FILE": "JSON task declarations (default: <data_dir>/tasks.json).",
    "PTASKS_LOGS_DIR": "Root for completion-log XML files (default: <data_dir>/logs).",
    # Status derivation
    "PTASKS_TIMEZONE": "IANA zone used to decide what 'today' is (default: process local time).",
    "PTASKS_DETECT_CYCLES": "Fail on 'do before' cycles instead of recursing (true/false, default: true).",
    # Connectors
    "PTASKS_CONSOLE_ENABLED": "Run the interactive console; otherwise print /tasks once (true/false).",
}
