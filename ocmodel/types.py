"""Versioned type identifiers of the form ``group.name/version``."""

from __future__ import annotations

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class Type:
    """A type with an optional group, an optional version and a name."""

    group: str = ""
    version: str = ""
    name: str = ""

    def __str__(self) -> str:
        name_part = f"{self.group}.{self.name}" if self.group else self.name
        if self.version:
            return f"{name_part}/{self.version}"
        return name_part

    def has_group(self) -> bool:
        """Return True if the type carries a group."""
        return self.group != ""

    def has_version(self) -> bool:
        """Return True if the type carries a version."""
        return self.version != ""

    def to_json(self) -> bytes:
        """Encode the type as a JSON string."""
        return json.dumps(str(self), ensure_ascii=False).encode("utf-8")


def new_type(group: str, version: str, name: str) -> Type:
    """Create a type with group, version and name."""
    return Type(group=group, version=version, name=name)


def new_ungrouped_versioned_type(name: str, version: str) -> Type:
    """Create a type without a group but with a version."""
    return Type(name=name, version=version)


def new_ungrouped_unversioned_type(name: str) -> Type:
    """Create a type with only a name."""
    return Type(name=name)


def type_from_string(typ: str) -> Type:
    """Parse ``name``, ``name/version``, ``group.name`` or ``group.name/version``."""
    parts = typ.split("/")
    if len(parts) > 2:
        raise ValueError(f"invalid type {typ!r}, too many segments")
    name_part = parts[0]
    version = parts[1] if len(parts) == 2 else ""
    group, _, name = name_part.rpartition(".")
    if not name:
        raise ValueError(f"invalid type {typ!r}, missing name")
    return Type(group=group, version=version, name=name)


def type_from_json(data: str | bytes) -> Type:
    """Parse a type from a JSON string or from an object holding a ``type`` string."""
    try:
        value = json.loads(data)
    except ValueError as exc:
        raise ValueError(f"could not unmarshal type: {exc}") from exc

    if value is None:
        text = ""
    elif isinstance(value, str):
        text = value
    elif isinstance(value, dict):
        inner = value.get("type")
        if inner is None:
            text = ""
        elif isinstance(inner, str):
            text = inner
        else:
            raise ValueError(
                f"could not unmarshal type: field 'type' is {type(inner).__name__}, not a string"
            )
    else:
        raise ValueError(
            f"could not unmarshal type: cannot decode {type(value).__name__} into a type"
        )
    return type_from_string(text)