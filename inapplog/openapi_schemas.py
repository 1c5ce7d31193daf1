"""
Marshall model types (dataclasses, enums) to OpenAPI 3 schema dicts.
Schemas are derived from inapplog.models and inapplog.config, not duplicated.
"""
from __future__ import annotations

import dataclasses
import enum
import typing
from datetime import datetime
from typing import Any, get_args, get_origin

from inapplog import config, models


def _type_to_schema(typ: Any, refs: dict[type, str]) -> dict[str, Any]:
    """Map a Python type to an OpenAPI schema dict. refs maps class -> component name for $ref."""
    args = get_args(typ)

    # Optional / X | None
    if args and type(None) in args:
        inner = next(a for a in args if a is not type(None))
        s = dict(_type_to_schema(inner, refs))
        s["nullable"] = True
        return s

    if get_origin(typ) is list:
        item_type = args[0] if args else Any
        return {"type": "array", "items": _type_to_schema(item_type, refs)}

    if typ in refs:
        return {"$ref": f"#/components/schemas/{refs[typ]}"}

    if isinstance(typ, type) and issubclass(typ, enum.Enum):
        return {"type": "string", "enum": [m.value for m in typ]}
    if typ is datetime:
        return {"type": "string", "format": "date-time"}
    if typ is str:
        return {"type": "string"}
    if typ is bool:
        return {"type": "boolean"}
    if typ is int:
        return {"type": "integer"}
    if typ is float:
        return {"type": "number"}
    return {"type": "object"}


def _dataclass_to_schema(cls: type, refs: dict[type, str],
                         renames: dict[str, str] | None = None) -> dict[str, Any]:
    """Build OpenAPI schema for a dataclass from its fields and type hints."""
    hints = typing.get_type_hints(cls)
    renames = renames or {}
    properties: dict[str, Any] = {}
    required: list[str] = []
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        name = renames.get(f.name, f.name)
        properties[name] = _type_to_schema(hints.get(f.name, f.type), refs)
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            required.append(name)
    out: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        out["required"] = required
    if cls.__doc__:
        doc = cls.__doc__.strip().split("\n")[0]
        if doc and not doc.startswith(cls.__name__ + "("):
            out["description"] = doc
    return out


# Field names as they appear on the wire (LogRecord.to_dict)
_RECORD_RENAMES = {"timestamp": "ts"}

REF_MAP: dict[type, str] = {models.LogLevel: "LogLevel"}


def schemas_from_models() -> dict[str, dict[str, Any]]:
    """Return OpenAPI components/schemas dict keyed by schema name, derived from models."""
    record = _dataclass_to_schema(models.LogRecord, REF_MAP, _RECORD_RENAMES)
    record["example"] = {
        "ts": "2024-01-01T12:30:45.123",
        "level": "info",
        "tag": "Auth",
        "message": "login ok",
    }
    return {
        "LogLevel": _type_to_schema(models.LogLevel, {}),
        "LogRecord": record,
        "Settings": _dataclass_to_schema(config.Settings, REF_MAP),
    }


def log_list_schema() -> dict[str, Any]:
    """GET /logs response."""
    return {
        "type": "object",
        "properties": {
            "lines": {"type": "array", "items": {"$ref": "#/components/schemas/LogRecord"}},
            "count": {"type": "integer", "description": "Records currently retained"},
            "matched": {"type": "integer", "description": "Retained records passing the filter"},
        },
    }


def new_log_schema() -> dict[str, Any]:
    """POST /logs request body."""
    return {
        "type": "object",
        "required": ["message"],
        "properties": {
            "message": {"type": "string"},
            "level": {"type": "string", "description": "Lenient: error/e/critical, warning/warn/w, info/i; anything else is debug"},
            "tag": {"type": "string", "nullable": True},
        },
    }


def status_schema() -> dict[str, Any]:
    """GET /status response."""
    return {
        "type": "object",
        "properties": {
            "enabled": {"type": "boolean"},
            "count": {"type": "integer"},
            "capacity": {"type": "integer"},
        },
    }


def level_info_schema() -> dict[str, Any]:
    """GET /levels list item."""
    return {
        "type": "object",
        "properties": {
            "name": {"$ref": "#/components/schemas/LogLevel"},
            "color": {"type": "string", "example": "#FF2196F3"},
            "icon": {"type": "string"},
        },
    }
