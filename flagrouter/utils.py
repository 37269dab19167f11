# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""utils.py"""
from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path

import pythonjsonlogger.json
from rich.logging import RichHandler

LOG_MODE_ENV = "FLAGROUTER_LOG_MODE"
JSON_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def get_program_name() -> str:
    """Return the name the running program was invoked as."""
    script = sys.argv[0] if sys.argv and sys.argv[0] else "flagrouter"
    program = shutil.which(script)
    if program:
        return os.path.basename(program)
    return Path(script).name


def running_in_container() -> bool:
    try:
        with open("/proc/1/cgroup", "r", encoding="UTF-8") as cgroup:
            content = cgroup.read()
    except OSError:
        return False
    return any(
        runtime in content for runtime in ("docker", "kubepods", "containerd", "podman")
    )


def setup_logging(
    mode: str | None = None,
    log_filename: str | None = "flagrouter.log",
    json_log_to_file: bool = False,
    file_log_level: int = logging.DEBUG,
    console_log_level: int = logging.WARNING,
) -> None:
    """
    Configure logging for a flagrouter program.

    Sets up a console handler, either human-readable Rich output or JSON, and
    optionally a file handler in plain text or JSON.

    Args:
        mode (str | None):
            "cli" for Rich console logs, "json" for JSON lines. Falls back to the
            `FLAGROUTER_LOG_MODE` environment variable, then to "json" inside a
            container and "cli" elsewhere.
        log_filename (str | None):
            File to append logs to. None disables file logging.
        json_log_to_file (bool):
            Format file logs as JSON instead of plain text.
        file_log_level (int):
            Level for the file handler. Defaults to `logging.DEBUG`.
        console_log_level (int):
            Level for the console handler. Defaults to `logging.WARNING`.

    Raises:
        ValueError: If `mode` is not "cli" or "json".
    """
    if not mode:
        mode = os.getenv(LOG_MODE_ENV) or ("json" if running_in_container() else "cli")

    if mode == "cli":
        console_handler: RichHandler | logging.StreamHandler = RichHandler(
            rich_tracebacks=True,
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
    elif mode == "json":
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(pythonjsonlogger.json.JsonFormatter(JSON_LOG_FORMAT))
    else:
        raise ValueError(f"Invalid log mode: {mode}")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    if root.hasHandlers():
        root.handlers.clear()

    console_handler.setLevel(console_log_level)
    root.addHandler(console_handler)

    if log_filename:
        file_handler = logging.FileHandler(log_filename, "a", "UTF-8")
        file_handler.setLevel(file_log_level)
        if json_log_to_file:
            file_handler.setFormatter(pythonjsonlogger.json.JsonFormatter(JSON_LOG_FORMAT))
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(name)s] [%(levelname)s] %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        root.addHandler(file_handler)

    logger = logging.getLogger("flagrouter")
    logger.propagate = True
    logger.debug("Logging initialized in '%s' mode.", mode)
