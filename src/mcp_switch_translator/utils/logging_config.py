"""Logging configuration for the switch translator.

Provides:
- Console output on stderr (stdout carries the MCP stdio transport)
- A rotating main log file
- A separate rotating perf log for generation, import and tool timings

Environment Variables:
    TRANSLATOR_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    TRANSLATOR_LOG_FILE: Path to log file (default: ~/.switch-translator/translator.log)
    TRANSLATOR_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    TRANSLATOR_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from mcp_switch_translator.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("generate_config")
    async def generate_config(self, device_id):
        ...
"""
import functools
import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

PACKAGE_LOGGER = "mcp_switch_translator"

# Timings go to their own logger so they can be filtered and filed apart
perf_logger = logging.getLogger("translator.perf")

DATEFMT = "%Y-%m-%d %H:%M:%S"
MAIN_FORMAT = "%(asctime)s.%(msecs)03d | %(name)-35s | %(levelname)-7s | %(message)s"
PERF_FORMAT = "%(asctime)s.%(msecs)03d | PERF | %(message)s"


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("TRANSLATOR_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".switch-translator" / "translator.log"
    return Path(os.environ.get("TRANSLATOR_LOG_FILE", str(default_path)))


def _rotating_handler(path: Path, fmt: str) -> RotatingFileHandler:
    max_size_mb = int(os.environ.get("TRANSLATOR_LOG_MAX_SIZE", "10"))
    backups = int(os.environ.get("TRANSLATOR_LOG_BACKUPS", "5"))

    handler = RotatingFileHandler(
        path,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backups,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATEFMT))
    return handler


def setup_logging() -> None:
    """Attach console, file and perf handlers.

    The package logger passes everything through; the console handler
    applies TRANSLATOR_LOG_LEVEL and the files keep DEBUG.
    """
    log_level = get_log_level()
    log_file = get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    perf_file = log_file.parent / "translator-perf.log"

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level)
    console.setFormatter(logging.Formatter(MAIN_FORMAT, datefmt=DATEFMT))

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(logging.DEBUG)
    pkg_logger.addHandler(console)
    pkg_logger.addHandler(_rotating_handler(log_file, MAIN_FORMAT))

    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(_rotating_handler(perf_file, PERF_FORMAT))
    perf_logger.addHandler(console)
    perf_logger.propagate = False

    pkg_logger.info(
        f"Logging initialized: level={logging.getLevelName(log_level)}, "
        f"file={log_file}, perf={perf_file}"
    )


class _Stopwatch:
    """Measures one operation and reports it to the perf log."""

    def __init__(self, operation: str, device_id: Optional[str], extra: str = ""):
        self.operation = operation
        self.device_id = device_id
        self.extra = extra
        self.start = time.perf_counter()

    def _line(self, outcome: str) -> str:
        elapsed = (time.perf_counter() - self.start) * 1000
        line = (
            f"{self.operation:20s} | {self.device_id or 'N/A':36s} | "
            f"{elapsed:8.2f}ms | {outcome}"
        )
        return f"{line} | {self.extra}" if self.extra else line

    def ok(self) -> None:
        perf_logger.info(self._line("OK"))

    def failed(self, error: Exception) -> None:
        perf_logger.warning(self._line(f"FAIL: {error}"))


def _device_id_of(args: tuple, kwargs: dict) -> Optional[str]:
    if "device_id" in kwargs:
        return kwargs["device_id"]
    # Engine methods are (self, device_id, ...)
    if len(args) > 1 and isinstance(args[1], str):
        return args[1]
    return None


def timed(operation: str):
    """Decorator logging the duration of an async engine method.

    Usage:
        @timed("import_config")
        async def import_config(self, device_id, text):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            watch = _Stopwatch(operation, _device_id_of(args, kwargs))
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                watch.failed(e)
                raise
            watch.ok()
            return result

        return wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, device_id: Optional[str] = None, **extra):
    """Async context manager for timing a block, such as one tool call.

    Usage:
        async with timed_section("tool:import_config", device_id=device_id):
            ...
    """
    watch = _Stopwatch(
        operation,
        device_id,
        " | ".join(f"{k}={v}" for k, v in extra.items()),
    )
    try:
        yield
    except Exception as e:
        watch.failed(e)
        raise
    watch.ok()
