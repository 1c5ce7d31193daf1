"""Viewer-side record filtering and plain-text export."""
from dataclasses import dataclass
from typing import Iterable, Mapping

from inapplog.models import LogLevel, LogRecord, format_record, format_record_without_time

API_TAG = "API"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class LogFilter:
    """
    Active search / level / source selection.

    A record matches when every active criterion matches:
      search   — case-insensitive substring of the message or the tag
      level    — exact level equality
      api_only — tag equals api_tag (case-insensitive)
    """
    search: str = ""
    level: LogLevel | None = None
    api_only: bool = False
    api_tag: str = API_TAG

    @classmethod
    def from_args(cls, args: Mapping, api_tag: str = API_TAG) -> "LogFilter":
        """Build from query-string style args. Raises ValueError on an unknown level."""
        level_name = (args.get("level") or "").strip().lower()
        level = None
        if level_name:
            try:
                level = LogLevel(level_name)
            except ValueError:
                raise ValueError(
                    f"level must be one of {[lvl.value for lvl in LogLevel]}") from None
        return cls(
            search=args.get("search") or "",
            level=level,
            api_only=str(args.get("api_only", "")).strip().lower() in _TRUTHY,
            api_tag=api_tag,
        )

    @property
    def is_active(self) -> bool:
        return bool(self.search) or self.level is not None or self.api_only

    def matches(self, record: LogRecord) -> bool:
        needle = self.search.lower()
        if needle:
            in_message = needle in record.message.lower()
            in_tag = record.tag is not None and needle in record.tag.lower()
            if not (in_message or in_tag):
                return False
        if self.level is not None and record.level != self.level:
            return False
        if self.api_only and (record.tag or "").upper() != self.api_tag.upper():
            return False
        return True

    def apply(self, records: Iterable[LogRecord]) -> list[LogRecord]:
        return [r for r in records if self.matches(r)]


def export_text(records: Iterable[LogRecord], with_time: bool = True) -> str:
    fmt = format_record if with_time else format_record_without_time
    return "\n".join(fmt(r) for r in records)
