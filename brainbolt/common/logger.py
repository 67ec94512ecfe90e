"""
Application Logger

This module provides the logging setup shared by the quiz engine: a root
``brainbolt`` logger with text or JSON output, child loggers per module,
a context adapter for user/session fields and an execution-time decorator.
"""

import os
import sys
import json
import time
import logging
import datetime
import functools
import asyncio
from typing import Dict, Any, Optional, Union, Callable, TypeVar

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-34s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "brainbolt"

F = TypeVar('F', bound=Callable[..., Any])

__all__ = [
    'configure_logger',
    'get_logger',
    'LoggerAdapter',
    'JsonFormatter',
    'with_context',
    'app_logger',
    'log_execution_time'
]


class JsonFormatter(logging.Formatter):
    """
    Formatter that renders each record as a single JSON object.

    Context attached through ``LoggerAdapter`` (the ``data`` extra) is merged
    into the top level of the object.
    """

    def __init__(self, *, indent: Optional[int] = None):
        super().__init__()
        self.indent = indent

    def format(self, record: logging.LogRecord) -> str:
        log_object = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno
        }

        if record.exc_info:
            log_object["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        data = getattr(record, 'data', None)
        if isinstance(data, dict):
            log_object.update(data)

        return json.dumps(log_object, indent=self.indent, default=str)


def configure_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Union[str, int] = logging.INFO,
    format_string: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    use_json: bool = False,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    Configure a logger with appropriate handlers and formatters.

    Args:
        name: Logger name
        level: Log level, as a name or a ``logging`` constant
        format_string: Log format string for text output
        date_format: Date format string for text output
        use_json: Whether to emit JSON lines instead of text
        log_file: Optional path of a file to log to as well
        console_output: Whether to log to stdout

    Returns:
        Configured logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers = []

    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(format_string, date_format)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        try:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except (FileNotFoundError, PermissionError) as e:
            logger.warning(f"Could not create log file {log_file}: {e}")

    return logger


def get_logger(name: str, parent: Optional[logging.Logger] = None) -> logging.Logger:
    """Get a logger by name, optionally as a child of ``parent``."""
    if parent:
        return parent.getChild(name)
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds contextual fields (user id, session id, ...)
    to every record it emits, under the ``data`` extra.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        super().__init__(logger, context or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        kwargs = kwargs.copy()
        extra = kwargs.setdefault('extra', {})
        data = extra.setdefault('data', {})
        if self.extra:
            data.update(self.extra)
        return msg, kwargs

    def with_context(self, **context) -> 'LoggerAdapter':
        """Return a new adapter carrying this adapter's context plus ``context``."""
        new_context = dict(self.extra)
        new_context.update(context)
        return LoggerAdapter(self.logger, new_context)


def with_context(name: Optional[str] = None, **context) -> LoggerAdapter:
    """Create a logger adapter with context, on ``name`` or the app logger."""
    logger = get_logger(name) if name else app_logger
    return LoggerAdapter(logger, context)


def get_app_logger() -> logging.Logger:
    """
    Get or create the application logger.

    The logger is configured from ``LOG_LEVEL``, ``LOG_JSON`` and ``LOG_FILE``
    the first time it is requested.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    if not logger.handlers:
        return configure_logger(
            name=ROOT_LOGGER_NAME,
            level=os.environ.get("LOG_LEVEL", "INFO"),
            use_json=os.environ.get("LOG_JSON", "false").lower() == "true",
            log_file=os.environ.get("LOG_FILE"),
            console_output=True
        )

    return logger


app_logger = get_app_logger()


def log_execution_time(logger: Optional[logging.Logger] = None,
                       failure_level: int = logging.ERROR) -> Callable[[F], F]:
    """
    Decorator to log the execution time of a function at DEBUG level.

    Failures are logged at ``failure_level`` with their duration and
    re-raised unchanged.
    Works for both plain and ``async`` functions.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start_time
                (logger or get_app_logger()).log(
                    failure_level,
                    f"{func.__name__} failed after {elapsed:.3f} seconds: {e}"
                )
                raise
            elapsed = time.perf_counter() - start_time
            (logger or get_app_logger()).debug(f"{func.__name__} executed in {elapsed:.3f} seconds")
            return result

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start_time
                (logger or get_app_logger()).log(
                    failure_level,
                    f"{func.__name__} failed after {elapsed:.3f} seconds: {e}"
                )
                raise
            elapsed = time.perf_counter() - start_time
            (logger or get_app_logger()).debug(f"{func.__name__} executed in {elapsed:.3f} seconds")
            return result

        return async_wrapper if asyncio.iscoroutinefunction(func) else wrapper
    return decorator
