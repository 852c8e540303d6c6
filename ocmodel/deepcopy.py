"""Deep copies of JSON-shaped values."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

# Decimal stands in for an exact JSON number literal.
_SCALARS = (str, int, float, bool, Decimal, type(None))


def deep_copy_json_value(x: Any) -> Any:
    """Deep copy a value made of dicts, lists, strings, numbers, booleans and None."""
    if isinstance(x, dict):
        return {key: deep_copy_json_value(value) for key, value in x.items()}
    if isinstance(x, list):
        return [deep_copy_json_value(value) for value in x]
    if isinstance(x, _SCALARS):
        return x
    raise TypeError(f"cannot deep copy {type(x).__name__}")


def deep_copy_json(x: dict[str, Any]) -> dict[str, Any]:
    """Deep copy a JSON object."""
    if not isinstance(x, dict):
        raise TypeError(f"cannot deep copy {type(x).__name__} as a JSON object")
    return deep_copy_json_value(x)