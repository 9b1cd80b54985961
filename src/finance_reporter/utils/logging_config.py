"""Logging setup shared by the CLI, the aggregator and the renderer.

Every module logs through a child of the ``finance_reporter`` logger, so one
call to setup_logging() routes the whole package to a log file and,
optionally, to stderr.
"""

import logging
import sys
import time
from pathlib import Path

PACKAGE_LOGGER = "finance_reporter"
DEFAULT_LOG_FILE = "finance_reporter.log"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
) -> logging.Logger:
    """Route package log records to a file and optionally stderr.

    Calling it again replaces the handlers installed by the previous call,
    so the CLI can reconfigure once settings are loaded.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL); unknown
            names fall back to INFO.
        log_file: Log file path, created along with its directory.
            Defaults to DEFAULT_LOG_FILE in the working directory.
        console_output: Also write records to stderr.

    Returns:
        The package logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = Path(log_file or DEFAULT_LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handlers: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if console_output:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, nested under the package logger.

    Args:
        name: Module name (typically __name__) or a short suffix.
    """
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


class LogContext:
    """Context manager that logs an operation's start, duration and failure.

    Example::

        with LogContext(logger, "render", pages=3):
            ...

    logs ``Starting render (pages=3)`` and ``Finished render in 0.042s`` at
    DEBUG, or ``render failed after 0.010s: ...`` at ERROR. Exceptions are
    never suppressed.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: object):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.elapsed: float | None = None
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        self.logger.debug(f"Starting {self.operation} ({details})" if details else f"Starting {self.operation}")
        self._started = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.debug(f"Finished {self.operation} in {self.elapsed:.3f}s")
        else:
            self.logger.error(
                f"{self.operation} failed after {self.elapsed:.3f}s: {exc_type.__name__}: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),  # type: ignore[arg-type]
            )
        return False
