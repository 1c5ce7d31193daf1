"""
Producer-side facade over a LogBuffer.

An InAppLog instance is created by the host application and handed to
whatever needs to log into (or read from) the in-app console. All helpers
are safe to call before initialize() or after dispose(); they do nothing.
"""
import logging
import traceback

from inapplog.config import Settings
from inapplog.log_buffer import LogBuffer, LogBufferHandler, install_log_handler, remove_log_handler
from inapplog.models import LogLevel

log = logging.getLogger("inapplog.console")

_STDLIB_LEVELS = {
    LogLevel.DEBUG:   logging.DEBUG,
    LogLevel.INFO:    logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR:   logging.ERROR,
}


class InAppLog:
    def __init__(self, buffer: LogBuffer | None = None, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.buffer = buffer if buffer is not None else LogBuffer(self.settings.capacity)
        self._logger: logging.Logger | None = None
        self._handlers: list[tuple[logging.Logger, LogBufferHandler]] = []

    @property
    def enabled(self) -> bool:
        return self.buffer.enabled

    @property
    def logger(self) -> logging.Logger | None:
        """The stdlib logger the helpers route through, if use_logging was set."""
        return self._logger

    def initialize(self, enabled: bool = True, use_logging: bool = False,
                   level: LogLevel | int | None = None) -> None:
        """
        Enable capture.

        With use_logging=True, debug()/info()/warning()/error() go through a
        stdlib logger created by create_logger(), so the host's logging
        configuration (level, extra handlers) applies to them.
        """
        if enabled:
            self.buffer.initialize()
        if enabled and use_logging:
            self._logger = self.create_logger(level=level)
        else:
            self._logger = None

    def add_log(self, message: str, level: LogLevel = LogLevel.DEBUG, tag: str | None = None) -> None:
        self.buffer.append_text(message, level=level, tag=tag)

    def debug(self, message: str, tag: str | None = None) -> None:
        self._log(LogLevel.DEBUG, message, tag)

    def info(self, message: str, tag: str | None = None) -> None:
        self._log(LogLevel.INFO, message, tag)

    def warning(self, message: str, tag: str | None = None) -> None:
        self._log(LogLevel.WARNING, message, tag)

    def error(self, message: str, tag: str | None = None, exc: BaseException | None = None) -> None:
        self._log(LogLevel.ERROR, message, tag, exc)

    def _log(self, level: LogLevel, message: str, tag: str | None,
             exc: BaseException | None = None) -> None:
        if self._logger is not None:
            self._logger.log(_STDLIB_LEVELS[level], message,
                             extra={"inapplog_tag": tag}, exc_info=exc)
            return
        if exc is not None:
            tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            message = f"{message}\n{tb.rstrip()}"
        self.add_log(message, level=level, tag=tag)

    def create_logger(self, name: str = "inapplog.host",
                      level: LogLevel | int | None = None) -> logging.Logger:
        """Return a stdlib logger whose records land in this console only."""
        logger = logging.getLogger(name)
        if isinstance(level, LogLevel):
            level = _STDLIB_LEVELS[level]
        logger.setLevel(logging.DEBUG if level is None else level)
        logger.propagate = False
        self._track(logger, install_log_handler(self.buffer, logger))
        return logger

    def capture_logging(self, logger: logging.Logger | None = None,
                        level: int = logging.NOTSET) -> LogBufferHandler:
        """Mirror records from `logger` (root by default) into the buffer."""
        target = logger or logging.getLogger()
        handler = install_log_handler(self.buffer, target, level)
        self._track(target, handler)
        log.debug("Capturing records from logger %r", target.name)
        return handler

    def _track(self, logger: logging.Logger, handler: LogBufferHandler) -> None:
        if (logger, handler) not in self._handlers:
            self._handlers.append((logger, handler))

    def dispose(self) -> None:
        for logger, handler in self._handlers:
            remove_log_handler(handler, logger)
        self._handlers.clear()
        self._logger = None
        self.buffer.dispose()
