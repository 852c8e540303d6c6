"""Typed objects kept as canonical JSON bytes."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from ocmodel.types import Type, type_from_json

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _unique_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise ValueError(f"duplicate key {key!r}")
        result[key] = value
    return result


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _format_number(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("NaN and Infinity are not valid JSON numbers")
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple))
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped
    k = len(digits)
    n = exponent + k
    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        body = "0." + "0" * (-n) + digits
    else:
        e = n - 1
        suffix = f"e{'+' if e >= 0 else '-'}{abs(e)}"
        body = digits + suffix if k == 1 else f"{digits[0]}.{digits[1:]}{suffix}"
    return sign + body


def _quote(text: str) -> str:
    out = ['"']
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch < " ":
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def _serialize(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, list):
        return "[" + ",".join(_serialize(item) for item in value) + "]"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda item: item[0].encode("utf-16-be"))
        return "{" + ",".join(f"{_quote(k)}:{_serialize(v)}" for k, v in items) + "}"
    raise ValueError(f"cannot canonicalize {type(value).__name__}")


def canonicalize_json(data: bytes | str) -> bytes:
    """Return the JSON Canonicalization Scheme (RFC 8785) form of a JSON document."""
    try:
        value = json.loads(
            data,
            object_pairs_hook=_unique_object,
            parse_int=float,
            parse_float=float,
            parse_constant=_reject_constant,
        )
        return _serialize(value).encode("utf-8")
    except ValueError as exc:
        raise ValueError(f"could not canonicalize data: {exc}") from exc


@dataclass
class Raw:
    """A typed object whose content is held as canonical JSON."""

    type: Type = field(default_factory=Type)
    data: bytes = b""

    def __str__(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    @classmethod
    def from_json(cls, data: bytes | str) -> Raw:
        """Read the ``type`` field and keep the canonicalized document."""
        try:
            obj = json.loads(data)
        except ValueError as exc:
            raise ValueError(f"could not unmarshal data into raw: {exc}") from exc
        if obj is not None and not isinstance(obj, dict):
            raise ValueError(
                f"could not unmarshal data into raw: expected an object, got {type(obj).__name__}"
            )
        typ = Type()
        if isinstance(obj, dict) and "type" in obj:
            try:
                typ = type_from_json(json.dumps(obj["type"]))
            except ValueError as exc:
                raise ValueError(f"could not unmarshal data into raw: {exc}") from exc
        return cls(type=typ, data=canonicalize_json(data))

    def to_json(self) -> bytes:
        """Return the stored JSON bytes."""
        return self.data