"""Level -> colour / icon lookup for viewers. Kept out of the record model."""
from inapplog.models import LogLevel

LEVEL_COLORS: dict[LogLevel, int] = {
    LogLevel.DEBUG:   0xFF9E9E9E,   # grey
    LogLevel.INFO:    0xFF2196F3,   # blue
    LogLevel.WARNING: 0xFFFF9800,   # orange
    LogLevel.ERROR:   0xFFF44336,   # red
}

LEVEL_ICONS: dict[LogLevel, str] = {
    LogLevel.DEBUG:   "\U0001F41B",
    LogLevel.INFO:    "ℹ️",
    LogLevel.WARNING: "⚠️",
    LogLevel.ERROR:   "❌",
}


def describe_level(level: LogLevel) -> dict:
    return {
        "name": level.value,
        "color": f"#{LEVEL_COLORS[level]:08X}",
        "icon": LEVEL_ICONS[level],
    }
