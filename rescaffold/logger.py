"""Boot-time log queue and logging sink.

Messages logged before the sink exists are buffered in a ``LogQueue``.  Once
the sink is attached the queue is drained in arrival order and every later
message goes straight to the sink.  The sink itself is a stdlib ``logging``
logger with a Rich console handler and an optional per-environment file
handler.
"""

from __future__ import annotations

import logging
import traceback
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rich.logging import RichHandler

from .config import Config
from .utils import console

TRUNCATION_MARKER = "..."


class LogQueueError(Exception):
    """Raised when the log queue cannot attach or reach its sink."""


class LogLevel(str, Enum):
    """Levels accepted by the log queue and sink."""
    INFO = "info"
    WARN = "warn"
    DEBUG = "debug"
    ERROR = "error"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value: "LogLevel | str") -> "LogLevel":
        """Normalise a level name, accepting ``err`` and ``warning`` aliases."""
        if isinstance(value, LogLevel):
            return value
        name = str(value).strip().lower()
        return cls(_LEVEL_ALIASES.get(name, name))


_LEVEL_ALIASES: dict[str, str] = {
    "err": "error",
    "warning": "warn",
}

_STDLIB_LEVELS: dict[LogLevel, int] = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


@dataclass(frozen=True, slots=True)
class LogEntry:
    """A single queued log message."""

    message: str
    level: LogLevel = LogLevel.INFO
    show_stack: bool = False


def truncate_logged_output(output: str, max_length: int) -> str:
    """Shorten *output* to *max_length* characters and append ``...``.

    Examples::

        truncate_logged_output("abc " * 10, 10) -> "abc abc ab..."
    """
    if len(output) > max_length:
        return output[:max_length] + TRUNCATION_MARKER
    return output


# ---------------------------------------------------------------------------
# Sink
# ---------------------------------------------------------------------------


class LogSink:
    """Routes log messages to the configured console and file handlers."""

    def __init__(
        self,
        logger: logging.Logger,
        *,
        suppress_output: bool = False,
    ) -> None:
        self.logger = logger
        self.suppress_output = suppress_output

    def is_ready(self) -> bool:
        return bool(self.logger.handlers)

    def emit(self, message: str, level: LogLevel | str = LogLevel.INFO, *, show_stack: bool = False) -> None:
        """Write *message* at *level*.

        For ``error`` and ``critical`` messages ``show_stack`` appends the
        current call stack.
        """
        if self.suppress_output:
            return
        lvl = LogLevel.parse(level)
        if show_stack and lvl in (LogLevel.ERROR, LogLevel.CRITICAL):
            message = message + "\n" + "".join(traceback.format_stack()[:-1])
        self.logger.log(_STDLIB_LEVELS[lvl], message)

    def close(self) -> None:
        """Detach and close every handler."""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()


def configure_logging(config: Config, name: str = "rescaffold") -> LogSink:
    """Build the application sink from *config*.

    Always installs the Rich console handler.  A file handler writing to
    ``<log_dir>/<app_env>.log`` is added only when the log directory already
    exists and file logging is enabled.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_STDLIB_LEVELS[LogLevel.parse(config.logging.level)])
    logger.propagate = False

    # Clear any existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(console=console, show_path=False, markup=False)
    console_handler.set_name("console")
    logger.addHandler(console_handler)

    if config.logging.file_logging and config.log_path.is_dir():
        file_handler = logging.FileHandler(config.log_file_path, encoding="utf-8")
        file_handler.set_name("file")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return LogSink(logger, suppress_output=config.logging.suppress_output)


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------


class QueueState(str, Enum):
    BUFFERING = "buffering"
    LIVE = "live"


class LogQueue:
    """Two-state log front end: buffer until a sink attaches, then emit.

    The transition from ``BUFFERING`` to ``LIVE`` happens exactly once, in
    :meth:`attach`.  Buffered entries reach the sink in arrival order and
    before anything logged after the transition.
    """

    def __init__(self, output_length: int = 10_000) -> None:
        self.output_length = output_length
        self.state = QueueState.BUFFERING
        self._pending: deque[LogEntry] = deque()
        self._sink: Optional[LogSink] = None

    @property
    def pending(self) -> list[LogEntry]:
        """Entries still waiting for the sink (always empty once live)."""
        return list(self._pending)

    @property
    def is_live(self) -> bool:
        return self.state is QueueState.LIVE

    def log(
        self,
        message: object,
        level: LogLevel | str = LogLevel.INFO,
        *,
        show_stack: bool = False,
    ) -> None:
        """Queue *message* while buffering, emit it directly once live.

        ``show_stack`` is kept with the entry and handed to the sink, which
        appends the call stack for ``error`` and ``critical`` messages.
        """
        entry = LogEntry(str(message), LogLevel.parse(level), show_stack)
        if self.state is QueueState.BUFFERING:
            self._pending.append(entry)
            return
        self._emit(entry)

    def attach(self, sink: LogSink) -> int:
        """Attach the sink and flush every buffered entry in FIFO order.

        Returns:
            The number of buffered entries that were flushed.

        Raises:
            LogQueueError: If a sink was already attached, or *sink* has no
                handlers yet.
        """
        if self._sink is not None:
            raise LogQueueError("Log sink already attached; the queue drains only once")
        if not sink.is_ready():
            raise LogQueueError("Log sink has no handlers; configure logging first")

        self._sink = sink
        flushed = 0
        # Entries logged by the sink while draining land at the tail and are
        # flushed after everything queued before them.
        while self._pending:
            self._emit(self._pending.popleft())
            flushed += 1
        self.state = QueueState.LIVE
        return flushed

    def _emit(self, entry: LogEntry) -> None:
        if self._sink is None:
            raise LogQueueError("No log sink attached")
        self._sink.emit(
            truncate_logged_output(entry.message, self.output_length),
            entry.level,
            show_stack=entry.show_stack,
        )

    # Convenience wrappers ---------------------------------------------------

    def info(self, message: object) -> None:
        self.log(message, LogLevel.INFO)

    def debug(self, message: object) -> None:
        self.log(message, LogLevel.DEBUG)

    def warn(self, message: object) -> None:
        self.log(message, LogLevel.WARN)

    def error(self, message: object, *, show_stack: bool = False) -> None:
        self.log(message, LogLevel.ERROR, show_stack=show_stack)

    def critical(self, message: object, *, show_stack: bool = False) -> None:
        self.log(message, LogLevel.CRITICAL, show_stack=show_stack)
