"""
Logging for FocusForge: structlog events rendered through stdlib logging.

Output goes to stderr so the CLI's JSON results on stdout stay parseable.
FOCUSFORGE_LOG_LEVEL picks the level (default WARNING) and
FOCUSFORGE_LOG_FORMAT=json switches from console to JSON lines.

Each CLI invocation runs inside command_context(), so every event logged
while the command runs carries the command name and store backend:

    setup_logging()
    with command_context("task done", backend="sqlite"):
        await tracker.set_task_completed(task_id, True)
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

DEFAULT_LEVEL = "WARNING"

HANDLER_NAME = "focusforge"

# Per-request chatter from the HTTP client used by the AI decomposer
NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_level(level: str | None = None) -> int:
    """Numeric level for a name, falling back to WARNING for unknown names."""
    name = (level or os.environ.get("FOCUSFORGE_LOG_LEVEL") or DEFAULT_LEVEL).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def _wants_json(json_output: bool | None) -> bool:
    if json_output is not None:
        return json_output
    return os.environ.get("FOCUSFORGE_LOG_FORMAT", "").lower() == "json"


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Route structlog through a single stderr handler on the root logger.

    Calling it again replaces FocusForge's handler; handlers installed by
    anything else (pytest's capture, an embedding app) are left alone.
    """
    numeric_level = resolve_level(level)
    use_json = _wants_json(json_output)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
    ]

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


@contextmanager
def command_context(command: str, **values: Any) -> Iterator[None]:
    """Bind the running command (and any extra fields) to every log event."""
    with structlog.contextvars.bound_contextvars(command=command, **values):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["command_context", "get_logger", "resolve_level", "setup_logging"]
