"""Thread-safe leveled logger writing to standard output and an optional file."""

from __future__ import annotations

import enum
import sys
import threading
from datetime import datetime
from typing import IO, Optional


class LogLevel(enum.IntEnum):
    """Severity of a log message, ordered from least to most severe."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


_LEVEL_NAMES = {
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFO: "INFO",
    LogLevel.WARNING: "WARN",
    LogLevel.ERROR: "ERROR",
}


def _timestamp() -> str:
    now = datetime.now()
    return f"{now:%Y-%m-%d %H:%M:%S}.{now.microsecond // 1000:03d}"


class Logger:
    """Writes ``[timestamp] [LEVEL] message`` lines to a stream and a log file."""

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream
        self._min_level = LogLevel.INFO
        self._file: Optional[IO[str]] = None
        self._lock = threading.Lock()

    def set_log_level(self, level: LogLevel) -> None:
        with self._lock:
            self._min_level = LogLevel(level)

    def set_log_file(self, filename) -> None:
        """Append log lines to ``filename`` from now on."""
        with self._lock:
            if self._file is not None:
                self._file.close()
            self._file = open(filename, "a", encoding="utf-8")

    def log(self, level: LogLevel, message: str) -> None:
        if level < self._min_level:
            return
        with self._lock:
            line = f"[{_timestamp()}] [{_LEVEL_NAMES.get(level, 'UNKNOWN')}] {message}"
            print(line, file=self._stream or sys.stdout, flush=True)
            if self._file is not None:
                self._file.write(line + "\n")
                self._file.flush()

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self.log(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)

    def close(self) -> None:
        """Close the log file, if one is open."""
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None


_instance: Optional[Logger] = None
_instance_lock = threading.Lock()


def get_logger() -> Logger:
    """Return the process-wide logger."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = Logger()
        return _instance