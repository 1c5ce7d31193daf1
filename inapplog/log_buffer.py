"""
In-memory log buffer with live subscriber fan-out.

Records live in a bounded deque (oldest evicted first). Every appended
record is also pushed to each open Subscription's queue, so a viewer can
tail the log while producers keep appending without ever blocking.

Also provides a logging.Handler that feeds stdlib log records into a buffer.
"""
import logging
import queue
import threading
from collections import deque
from datetime import datetime

from inapplog.models import LogLevel, LogRecord

log = logging.getLogger("inapplog.log_buffer")

DEFAULT_CAPACITY = 100_000
CLEARED_MESSAGE = "--- Logs cleared ---"

_END = object()   # queued to a subscription when its channel closes


class _ClearedRecord(LogRecord):
    """The marker clear() publishes; recognised by type, never by its text."""


def is_clear_marker(record: LogRecord) -> bool:
    return isinstance(record, _ClearedRecord)


class Subscription:
    """
    One observer's view of the live record stream.

    Records published after subscribe() are queued here in publish order.
    The queue is unbounded; a slow reader never holds up the buffer.
    """

    def __init__(self, owner: "LogBuffer | None"):
        self._owner = owner
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._ended = False

    def _push(self, item) -> None:
        self._queue.put(item)

    @property
    def ended(self) -> bool:
        return self._ended

    def get(self, timeout: float | None = None) -> LogRecord | None:
        """Next record, or None on timeout or once the subscription has ended."""
        if self._ended:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _END:
            self._ended = True
            return None
        return item

    def drain(self) -> list[LogRecord]:
        """Return every record queued so far without blocking."""
        out: list[LogRecord] = []
        while not self._ended:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is _END:
                self._ended = True
                break
            out.append(item)
        return out

    def close(self) -> None:
        if self._ended:
            return
        if self._owner is not None:
            self._owner._unsubscribe(self)
        self._ended = True
        self._push(_END)   # wake a reader blocked in get()

    def __iter__(self):
        while True:
            item = self.get()
            if item is None:
                return
            yield item

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class LogBuffer:
    """
    Bounded, ordered log history plus broadcast notification.

    The buffer starts disabled. append() is a silent no-op until
    initialize() is called and again after dispose(), so producers can
    call it unconditionally. clear(), snapshot() and count() work in any
    state. A disposed buffer ends all live subscriptions; initialize()
    afterwards opens a fresh channel.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self._capacity = capacity
        self._records: deque[LogRecord] = deque(maxlen=capacity)
        self._subscribers: list[Subscription] = []
        self._lock = threading.Lock()
        self._enabled = False
        self._disposed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def enabled(self) -> bool:
        return self._enabled

    def initialize(self) -> None:
        with self._lock:
            if self._enabled:
                return
            self._enabled = True
            self._disposed = False
        log.debug("Log buffer enabled (capacity=%d)", self._capacity)

    def append(self, record: LogRecord) -> None:
        if not self._enabled:
            return
        with self._lock:
            if not self._enabled:
                return
            # deque(maxlen) drops exactly the oldest entry when full
            self._records.append(record)
            self._publish(record)

    def append_text(self, message: str, level: LogLevel = LogLevel.DEBUG,
                    tag: str | None = None) -> None:
        self.append(LogRecord.from_text(message, level=level, tag=tag))

    def clear(self) -> None:
        """Drop all history and publish a single clear marker to subscribers."""
        marker = _ClearedRecord.from_text(CLEARED_MESSAGE, level=LogLevel.INFO)
        with self._lock:
            self._records.clear()
            self._publish(marker)

    def subscribe(self, replay: bool = False) -> Subscription:
        """
        Open a subscription to records published from now on.

        With replay=True the retained history is queued first, atomically
        with registration, so nothing is missed or repeated in between.
        """
        sub = Subscription(self)
        with self._lock:
            if self._disposed:
                sub._ended = True
                return sub
            if replay:
                for record in self._records:
                    sub._push(record)
            self._subscribers.append(sub)
        return sub

    def snapshot(self) -> list[LogRecord]:
        """Current contents, oldest first. The list is a copy."""
        with self._lock:
            return list(self._records)

    def tail(self, limit: int) -> list[LogRecord]:
        """Return the last `limit` records, oldest first."""
        with self._lock:
            n = min(max(limit, 0), len(self._records))
            if n == 0:
                return []
            # deque doesn't support slicing
            return list(self._records)[-n:]

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def __len__(self) -> int:
        return self.count()

    def dispose(self) -> None:
        with self._lock:
            was_enabled = self._enabled
            self._enabled = False
            self._disposed = True
            subs, self._subscribers = self._subscribers, []
        for sub in subs:
            sub._push(_END)
        if was_enabled:
            log.debug("Log buffer disposed (%d subscriber(s) closed)", len(subs))

    # Caller must hold self._lock.
    def _publish(self, record: LogRecord) -> None:
        for sub in self._subscribers:
            sub._push(record)

    def _unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            try:
                self._subscribers.remove(sub)
            except ValueError:
                pass


# ── stdlib logging adapter ───────────────────────────────────

_HANDLER_FORMAT = "%(message)s"


class LogBufferHandler(logging.Handler):
    """
    Appends stdlib log records to a LogBuffer.

    The tag is taken from `extra={"inapplog_tag": ...}` when given, else the
    logger name. Exception text is appended by the formatter.
    """

    def __init__(self, buffer: LogBuffer, level: int = logging.NOTSET):
        super().__init__(level)
        self._buffer = buffer
        self.setFormatter(logging.Formatter(_HANDLER_FORMAT))

    @property
    def buffer(self) -> LogBuffer:
        return self._buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            ts = datetime.fromtimestamp(record.created)
            entry = LogRecord(
                timestamp=ts.replace(microsecond=ts.microsecond // 1000 * 1000),
                message=self.format(record),
                level=LogLevel.from_stdlib(record.levelno),
                tag=getattr(record, "inapplog_tag", None) or record.name,
            )
            self._buffer.append(entry)
        except Exception:
            self.handleError(record)


def install_log_handler(buffer: LogBuffer, logger: logging.Logger | None = None,
                        level: int = logging.NOTSET) -> LogBufferHandler:
    """Attach a LogBufferHandler for `buffer` to `logger` (root by default), once."""
    target = logger or logging.getLogger()
    for h in target.handlers:
        if isinstance(h, LogBufferHandler) and h.buffer is buffer:
            return h
    handler = LogBufferHandler(buffer, level)
    target.addHandler(handler)
    return handler


def remove_log_handler(handler: LogBufferHandler, logger: logging.Logger | None = None) -> None:
    (logger or logging.getLogger()).removeHandler(handler)
