"""Simple logger abstraction."""

from __future__ import annotations

import sys
from typing import TextIO


_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}


class Logger:
    """Minimal logger with level filtering.

    Progress (debug/info) goes to stdout, problems (warn/error) to stderr.
    """

    def __init__(
        self,
        level: str = "INFO",
        stream: TextIO | None = None,
        err_stream: TextIO | None = None,
    ) -> None:
        self._level = _LEVELS.get(level.upper(), _LEVELS["INFO"])
        self._stream = stream
        self._err_stream = err_stream

    def set_stream(self, stream: TextIO | None, err_stream: TextIO | None = None) -> None:
        self._stream = stream
        self._err_stream = err_stream

    def _write(self, message: str, error: bool = False) -> None:
        if error:
            stream = self._err_stream or sys.stderr
        else:
            stream = self._stream or sys.stdout
        print(message, file=stream)

    def set_level(self, level: str) -> None:
        self._level = _LEVELS.get(level.upper(), _LEVELS["INFO"])

    def debug(self, message: str) -> None:
        if self._level <= _LEVELS["DEBUG"]:
            self._write(message)

    def info(self, message: str) -> None:
        if self._level <= _LEVELS["INFO"]:
            self._write(message)

    def warn(self, message: str) -> None:
        if self._level <= _LEVELS["WARN"]:
            self._write(message, error=True)

    def error(self, message: str) -> None:
        if self._level <= _LEVELS["ERROR"]:
            self._write(message, error=True)


_LOGGER = Logger()


def get_logger() -> Logger:
    """Return the shared logger instance."""
    return _LOGGER
