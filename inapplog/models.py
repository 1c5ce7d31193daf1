"""
Log record model.

A LogRecord is one captured line: timestamp (millisecond precision),
message, level and an optional tag. Records are frozen once created.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime

_LEVEL_WIDTH = 7   # len("WARNING")


class LogLevel(enum.Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def parse(cls, name) -> "LogLevel":
        """
        Map a foreign level name onto the four levels.

        Accepts full names and single-letter shorthands ("e", "w", "i", "d")
        in any case. Unknown or empty names map to DEBUG.
        """
        key = str(name or "").strip().lower()
        if key in ("error", "e", "critical", "fatal"):
            return cls.ERROR
        if key in ("warning", "warn", "w"):
            return cls.WARNING
        if key in ("info", "i"):
            return cls.INFO
        return cls.DEBUG

    @classmethod
    def from_stdlib(cls, levelno: int) -> "LogLevel":
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_SEVERITY = {lvl: i for i, lvl in enumerate(LogLevel)}


def _now_ms() -> datetime:
    now = datetime.now()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


@dataclass(frozen=True)
class LogRecord:
    """One captured log line."""
    timestamp: datetime
    message: str
    level: LogLevel
    tag: str | None = None

    @classmethod
    def from_text(cls, message: str, level: LogLevel = LogLevel.DEBUG,
                  tag: str | None = None) -> "LogRecord":
        return cls(timestamp=_now_ms(), message=message, level=level, tag=tag)

    @classmethod
    def from_dict(cls, d: dict) -> "LogRecord":
        ts = d.get("ts")
        return cls(
            timestamp=datetime.fromisoformat(ts) if ts else _now_ms(),
            message=str(d.get("message", "")),
            level=LogLevel.parse(d.get("level")),
            tag=d.get("tag") or None,
        )

    def to_dict(self) -> dict:
        return {
            "ts": self.timestamp.isoformat(timespec="milliseconds"),
            "level": self.level.value,
            "tag": self.tag,
            "message": self.message,
        }

    def __str__(self) -> str:
        return format_record(self)


def _format_time(ts: datetime) -> str:
    return f"{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}.{ts.microsecond // 1000:03d}"


def format_record_without_time(record: LogRecord) -> str:
    """Render `LEVEL   [tag] message`."""
    level_str = record.level.name.upper().ljust(_LEVEL_WIDTH)
    tag_str = f"[{record.tag}] " if record.tag is not None else ""
    return f"{level_str} {tag_str}{record.message}"


def format_record(record: LogRecord) -> str:
    """Render `[HH:MM:SS.mmm] LEVEL   [tag] message`."""
    return f"[{_format_time(record.timestamp)}] {format_record_without_time(record)}"
