# src/daemon_runner/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .config import Settings, get_settings


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow all daemon_runner logs
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    - suppress third-party noise unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "daemon_runner" or name.startswith("daemon_runner."):
            return True

        # Python warnings captured into logging.
        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    console_level: int | str | None = None,
    log_dir: str | Path | None = None,
    file_level: int = logging.DEBUG,
    settings: Settings | None = None,
) -> None:
    """
    Configure logging with:
    - Console handler: filtered for interactive use
    - File handler (only when log_dir is given): full logs for debugging

    console_level / log_dir default to settings.log_level / settings.log_dir
    (DAEMON_RUNNER_LOG_LEVEL / DAEMON_RUNNER_LOG_DIR); settings defaults to get_settings().

    Meant for applications embedding the runner; call it ONCE, early.
    """
    if settings is None:
        settings = get_settings()
    if console_level is None:
        console_level = settings.log_level
    if log_dir is None:
        log_dir = settings.log_dir

    if isinstance(console_level, str):
        console_level = getattr(logging, console_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "daemon_runner.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
