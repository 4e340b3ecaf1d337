"""Structured logging helpers with run identifiers.

This module provides LoggerAdapter for structured logging with mandatory
fields (operation, status) and module-level loggers with NullHandler so the
library stays silent until the CLI configures a handler.

Logs are written to stderr; stdout is reserved for rendered source output.

Examples
--------
>>> from docsync.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.info("Scan started", extra={"operation": "scan", "status": "started"})
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import time
from contextlib import AbstractContextManager
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

__all__ = [
    "JsonFormatter",
    "LoggerAdapter",
    "get_logger",
    "get_run_id",
    "measure_duration",
    "setup_logging",
    "with_fields",
]

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("run_id", default=None)

_STRUCTURED_FIELDS = ("run_id", "operation", "status", "duration_ms")

_EXCLUDED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Formats log records as one JSON object per line with timestamp, level,
    logger name, message and any JSON-compatible extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format. May include extra fields in record.__dict__.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        data: dict[str, object] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + "Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in _STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value
        if "run_id" not in data:
            ctx_run_id = _run_id.get()
            if ctx_run_id is not None:
                data["run_id"] = ctx_run_id
        for key, value in record.__dict__.items():
            if (
                key not in _EXCLUDED_ATTRS
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger adapter that injects structured context fields.

    Every entry carries ``operation`` and ``status``; the run identifier is
    taken from context when not given explicitly.

    Examples
    --------
    >>> from docsync.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Resolved aliases", extra={"operation": "resolve", "resolved": 3})
    """

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:  # noqa: ANN401
        """Merge adapter fields and context into the record's extra dict.

        Parameters
        ----------
        msg : str
            Log message string.
        kwargs : Any
            Keyword arguments from the logging call, including ``extra``.

        Returns
        -------
        tuple[str, Any]
            Processed message and kwargs with injected fields.
        """
        extra = dict(kwargs.get("extra") or {})
        if isinstance(self.extra, dict):
            for key, value in self.extra.items():
                extra.setdefault(key, value)
        if "run_id" not in extra:
            ctx_run_id = _run_id.get()
            if ctx_run_id is not None:
                extra["run_id"] = ctx_run_id
        extra.setdefault("operation", "unknown")
        kwargs["extra"] = extra
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log with a ``status`` field inferred from ``level`` when absent."""
        extra = dict(kwargs.get("extra") or {})
        if "status" not in extra:
            if level >= logging.ERROR:
                extra["status"] = "error"
            elif level >= logging.WARNING:
                extra["status"] = "warning"
            else:
                extra["status"] = "success"
        kwargs["extra"] = extra
        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)


def get_logger(name: str) -> LoggerAdapter:
    """Get a logger adapter with structured logging support.

    Parameters
    ----------
    name : str
        Logger name (typically ``__name__`` from the calling module).

    Returns
    -------
    LoggerAdapter
        Logger adapter with structured context injection.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def setup_logging(level: int | str = logging.WARNING, stream: IO[str] | None = None) -> None:
    """Configure the root logger with the JSON formatter.

    Parameters
    ----------
    level : int | str, optional
        Logging level threshold or level name. Defaults to ``logging.WARNING``.
    stream : IO[str] | None, optional
        Destination stream. Defaults to ``sys.stderr``.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def get_run_id() -> str | None:
    """Return the run identifier bound to the current context, if any."""
    return _run_id.get()


class _WithFieldsContext(AbstractContextManager[LoggerAdapter]):
    def __init__(self, logger: logging.Logger | LoggerAdapter, fields: Mapping[str, object]) -> None:
        self._logger = logger
        self._fields = dict(fields)
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> LoggerAdapter:
        base_logger = (
            self._logger.logger if isinstance(self._logger, LoggerAdapter) else self._logger
        )
        run_id = self._fields.get("run_id")
        if isinstance(run_id, str):
            self._token = _run_id.set(run_id)
        return LoggerAdapter(base_logger, dict(self._fields))

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _run_id.reset(self._token)
        del exc_type, exc_value, exc_tb


def with_fields(
    logger: logging.Logger | LoggerAdapter,
    **fields: object,
) -> AbstractContextManager[LoggerAdapter]:
    """Context manager attaching structured fields to every entry.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Base logger to wrap (may already be an adapter).
    **fields : object
        Fields injected into all log entries within the context. A string
        ``run_id`` is also bound to the context for the duration.

    Returns
    -------
    AbstractContextManager[LoggerAdapter]
        Context manager yielding an adapter with the bound fields.

    Examples
    --------
    >>> from docsync.logging import get_logger, with_fields
    >>> logger = get_logger(__name__)
    >>> with with_fields(logger, run_id="run-1", operation="splice") as log:
    ...     log.info("Spliced file")
    """
    return _WithFieldsContext(logger, fields)


def measure_duration(start: float) -> float:
    """Return milliseconds elapsed since ``start`` (a ``time.monotonic()`` value)."""
    return round((time.monotonic() - start) * 1000, 3)
