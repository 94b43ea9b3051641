"""Package loggers writing to stdout.

Every module asks for its logger through ``get_logger(__name__)``. The first
request for a name attaches one stdout handler; the level defaults to
``SLIDECARDS_LOG_LEVEL`` and can be changed for the whole package at runtime
with ``set_log_level``.
"""

import inspect
import logging
import os
import sys
from functools import wraps
from typing import Any, Callable, TypeVar

PACKAGE_LOGGER = "slidecards_core"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

F = TypeVar("F", bound=Callable[..., Any])


def _level_from(value: str | int | None) -> int:
    """Numeric level for a level name, number or None (INFO)."""
    if isinstance(value, int):
        return value
    return getattr(logging, (value or "INFO").upper(), logging.INFO)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Logger for a module, with a stdout handler attached once.

    Args:
        name: Dotted module name, normally ``__name__``
        level: Level for this logger only; the environment default otherwise

    Returns:
        The logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        # One line per record, even when the application configures the root logger
        logger.propagate = False

    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(_level_from(os.environ.get("SLIDECARDS_LOG_LEVEL")))

    return logger


def set_log_level(level: str | int) -> None:
    """Change the level of every logger under ``slidecards_core``.

    Args:
        level: Level name such as ``"DEBUG"``, or a numeric level
    """
    numeric = _level_from(level)
    for name, logger in logging.root.manager.loggerDict.items():
        in_package = name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}.")
        if in_package and isinstance(logger, logging.Logger):
            logger.setLevel(numeric)


def log_exceptions(logger: logging.Logger) -> Callable[[F], F]:
    """Log any exception leaving the wrapped function, then let it propagate.

    Works for plain and ``async def`` functions alike.

    Args:
        logger: Where the traceback is written
    """

    def decorator(func: F) -> F:
        def report(e: Exception) -> None:
            logger.exception(f"{func.__qualname__} failed: {e}")

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    report(e)
                    raise

            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                report(e)
                raise

        return sync_wrapper  # type: ignore[return-value]

    return decorator
