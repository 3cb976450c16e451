"""Console log formatter that colours level names."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO


class ColoredFormatter(logging.Formatter):
    """Applies ANSI colours to ``levelname`` and dims the logger name.

    Colour is off when ``NO_COLOR`` is set or the target stream is not a TTY.
    ``use_color`` forces it either way.
    """

    LEVEL_COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    DIM = "\033[2m"
    RESET = "\033[0m"

    def __init__(
        self,
        *args: Any,
        stream: TextIO | None = None,
        use_color: bool | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._stream = stream
        self._use_color = use_color

    def should_color(self) -> bool:
        if self._use_color is not None:
            return self._use_color
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stderr
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self.should_color():
            record = logging.makeLogRecord(record.__dict__)
            color = self.LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
            record.name = f"{self.DIM}{record.name}{self.RESET}"
        return super().format(record)
