"""
Rich console logging for wahook.

Every record logged through ``get_logger`` is prefixed with the chat and
sender of the event being handled, read from the context variables set by
the notification pipeline.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from wahook.core.config.settings import settings
from wahook.core.logging.context import get_current_chat_context, get_current_sender_context

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
CONSOLE_FORMAT = "[%(name)s] %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_console = Console(
    theme=Theme(
        {
            "info": "cyan",
            "warning": "yellow",
            "error": "bold red",
            "debug": "dim white",
        }
    )
)


class CompactFormatter(logging.Formatter):
    """Shows ``processors.payload_builder`` instead of ``wahook.processors.payload_builder``."""

    def format(self, record):
        if record.name.startswith("wahook."):
            parts = record.name.split(".")
            if len(parts) > 2:
                record.name = ".".join(parts[-2:])
        return super().format(record)


def event_prefix() -> str:
    """``[C:<chat>][U:<sender>]`` for the current event, empty outside one."""
    chat = get_current_chat_context()
    sender = get_current_sender_context()
    prefix = ""
    if chat:
        prefix += f"[C:{chat}]"
    if sender:
        prefix += f"[U:{sender}]"
    return prefix


class ContextLogger(logging.LoggerAdapter):
    """Adapter that prefixes each message with the current event context."""

    def process(self, msg, kwargs):
        prefix = event_prefix()
        if prefix:
            msg = f"{prefix} {msg}"
        return msg, kwargs


def setup_logging(
    *,
    level: str = "INFO",
    mode: str = "PROD",
    log_dir: str | None = None,
) -> None:
    """
    Configure the root logger.

    The console always gets a RichHandler; ``mode="DEV"`` with a ``log_dir``
    also writes a daily file ``wahook_YYYYMMDD.log``.
    """
    lvl = level.upper()
    if lvl not in LEVELS:
        lvl = "INFO"

    rich_handler = RichHandler(
        console=_console,
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        markup=False,
    )
    rich_handler.setFormatter(CompactFormatter(CONSOLE_FORMAT))
    handlers: list[logging.Handler] = [rich_handler]

    if mode.upper() == "DEV" and log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logfile = os.path.join(log_dir, f"wahook_{datetime.now():%Y%m%d}.log")
        file_handler = logging.FileHandler(logfile, encoding="utf-8")
        file_handler.setFormatter(CompactFormatter(FILE_FORMAT))
        handlers.append(file_handler)
        _console.print(f"[green]DEV mode:[/] console + file {logfile}")

    logging.basicConfig(level=lvl, handlers=handlers, force=True)
    logging.getLogger("wahook").info(f"Logging initialized ({lvl}, {mode})")


def setup_app_logging() -> None:
    """Configure logging from settings, once at application startup."""
    setup_logging(
        level=settings.log_level,
        mode="DEV" if settings.is_development else "PROD",
        log_dir=settings.log_dir if settings.is_development else None,
    )


def get_logger(name: str) -> ContextLogger:
    """Logger for ``name`` (usually ``__name__``) carrying the event context."""
    return ContextLogger(logging.getLogger(name), {})
