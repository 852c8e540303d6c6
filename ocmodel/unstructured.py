"""Free-form JSON objects that carry a type."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ocmodel.deepcopy import deep_copy_json
from ocmodel.types import Type

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _encode_default(value: Any) -> Any:
    if isinstance(value, Type):
        return str(value)
    raise TypeError(f"cannot encode {type(value).__name__}")


@dataclass
class Unstructured:
    """A JSON object without a fixed schema."""

    data: dict[str, Any] = field(default_factory=dict)

    def set_type(self, typ: Type) -> None:
        """Store the type under the ``type`` key."""
        self.data["type"] = typ

    def get_type(self) -> Type:
        """Return the stored Type, or an empty Type if ``type`` is not a Type."""
        value = self.data.get("type")
        return value if isinstance(value, Type) else Type()

    def get(self, key: str, kind: type) -> Any:
        """Return the value under ``key`` if it is a ``kind``, otherwise None."""
        value = self.data.get(key)
        return value if isinstance(value, kind) else None

    def to_json(self) -> bytes:
        """Encode as compact JSON with sorted keys."""
        text = json.dumps(
            self.data,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=_encode_default,
        )
        for char, escaped in _HTML_ESCAPES.items():
            text = text.replace(char, escaped)
        return text.encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes | str) -> Unstructured:
        """Decode a JSON object."""
        value = json.loads(data)
        if value is None:
            return cls()
        if not isinstance(value, dict):
            raise ValueError(f"cannot decode {type(value).__name__} into an unstructured object")
        return cls(value)

    def deep_copy(self) -> Unstructured:
        """Return an independent copy."""
        return Unstructured(deep_copy_json(self.data))