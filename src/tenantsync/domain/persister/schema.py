"""Leveled schema describing how a record maps onto nested sublevels.

A schema is an ordered list of levels plus at most one frame per level. Each
level names a sublevel nested inside the previous one; each frame derives the
``(key, value)`` pair written into its level's sublevel. Both names and pairs
come from one of two rules:

* ``StaticValue``: a literal, identical for every record.
* ``DynamicField``: a dotted path looked up in the record (``"tenant.id"``).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from tenantsync.config.errors import ConfigurationError
from tenantsync.domain.errors import SchemaFieldError

_BOOL_LITERALS = {True: "true", False: "false"}


class Encoding(StrEnum):
    UTF8 = "utf8"
    JSON = "json"
    BOOL = "bool"

    def encode(self, value: object) -> str:
        match self:
            case Encoding.UTF8:
                if isinstance(value, str):
                    return value
                if isinstance(value, int) and not isinstance(value, bool):
                    return str(value)
                raise ConfigurationError(f"Cannot encode {value!r} as utf8")
            case Encoding.JSON:
                try:
                    return json.dumps(value, sort_keys=True, separators=(",", ":"))
                except (TypeError, ValueError) as exc:
                    raise ConfigurationError(f"Cannot encode {value!r} as json") from exc
            case Encoding.BOOL:
                if not isinstance(value, bool):
                    raise ConfigurationError(f"Cannot encode {value!r} as bool")
                return _BOOL_LITERALS[value]


@dataclass(frozen=True, slots=True)
class StaticValue:
    value: Any


@dataclass(frozen=True, slots=True)
class DynamicField:
    path: str


type ValueRule = StaticValue | DynamicField


@dataclass(frozen=True, slots=True)
class Level:
    name: ValueRule
    key_encoding: Encoding = Encoding.UTF8
    value_encoding: Encoding = Encoding.JSON


@dataclass(frozen=True, slots=True)
class Frame:
    level: int
    key: ValueRule
    value: ValueRule


@dataclass(frozen=True, slots=True)
class LeveledSchema:
    levels: tuple[Level, ...]
    frames: tuple[Frame, ...] = ()

    def __post_init__(self) -> None:
        if not self.levels:
            raise ConfigurationError("A leveled schema needs at least one level")
        seen: set[int] = set()
        for frame in self.frames:
            if not 0 <= frame.level < len(self.levels):
                raise ConfigurationError(f"Frame refers to unknown level {frame.level}")
            if frame.level in seen:
                raise ConfigurationError(f"Level {frame.level} has more than one frame")
            seen.add(frame.level)

    def frame_for(self, level: int) -> Frame | None:
        for frame in self.frames:
            if frame.level == level:
                return frame
        return None


def lookup_field(record: Mapping[str, Any], path: str) -> Any:
    """Return the value at a dotted ``path``; missing or null fields raise."""

    current: Any = record
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            raise SchemaFieldError(path)
        current = current[part]
    if current is None:
        raise SchemaFieldError(path)
    return current


def resolve_rule(rule: ValueRule, record: Mapping[str, Any]) -> Any:
    match rule:
        case StaticValue(value=value):
            return value
        case DynamicField(path=path):
            return lookup_field(record, path)
