"""Structured logging for chii workers and CLI commands.

Provides:
- JSON-formatted logs for log aggregation
- A console format for local runs
- Job context (job name, subject type, period) attached to every record

Usage:
    from chii.observability.logging import configure_logging

    configure_logging(json_format=True, level="INFO")

    logger = logging.getLogger(__name__)
    with LogContext(job="trending_subjects", subject_type=2):
        logger.info("Calculating")  # Includes job and subject_type
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson

job_var: contextvars.ContextVar[str] = contextvars.ContextVar("job", default="")
subject_type_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "subject_type", default=""
)
period_var: contextvars.ContextVar[str] = contextvars.ContextVar("period", default="")

_CONTEXT_VARS: dict[str, contextvars.ContextVar[str]] = {
    "job": job_var,
    "subject_type": subject_type_var,
    "period": period_var,
}

# Attributes of a bare LogRecord; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Loggers that are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "asyncio")


def current_context() -> dict[str, str]:
    """Job context of the running task, empty values omitted."""
    context = {}
    for name, var in _CONTEXT_VARS.items():
        value = var.get()
        if value:
            context[name] = value
    return context


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Example:
    {"timestamp": "2026-01-10T12:34:56.789000+00:00", "level": "INFO",
     "logger": "chii.trending.aggregator", "message": "Calculating ...",
     "job": "trending_subjects", "subject_type": "2"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(current_context())
        entry.update(_extra_fields(record))

        if record.exc_info and record.exc_info[0] is not None:
            entry["error"] = {
                "type": record.exc_info[0].__name__,
                "detail": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return orjson.dumps(entry, default=str).decode()


class ConsoleFormatter(logging.Formatter):
    """Single-line format for terminals.

    2026-01-10 12:34:56 | INFO     | chii.jobs.tasks | Updating ... | job=trending_subjects
    """

    LEVEL_COLORS = {
        logging.DEBUG: "36",
        logging.INFO: "32",
        logging.WARNING: "33",
        logging.ERROR: "31",
        logging.CRITICAL: "35",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def _level(self, record: logging.LogRecord) -> str:
        label = f"{record.levelname:8}"
        color = self.LEVEL_COLORS.get(record.levelno)
        if not self.use_colors or color is None:
            return label
        return f"\033[{color}m{label}\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        parts = [when, self._level(record), record.name, record.getMessage()]
        context = current_context()
        if context:
            parts.append(" ".join(f"{key}={value}" for key, value in context.items()))

        line = " | ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Route all logging to stderr through a single chii formatter.

    Replaces any handlers already installed on the root logger, so calling
    it twice does not duplicate output.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else ConsoleFormatter(use_colors))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class LogContext:
    """Attach job context to every record logged inside the block.

    Unknown keys are ignored.

    Usage:
        with LogContext(job="trending_subject_topics", period="week"):
            logger.info("Updating")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.values = {key: str(value) for key, value in kwargs.items() if key in _CONTEXT_VARS}
        self._tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []

    def __enter__(self) -> LogContext:
        for key, value in self.values.items():
            var = _CONTEXT_VARS[key]
            self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, *exc: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)
