"""Conversion of raw environment strings to configuration field types."""

from __future__ import annotations

import json
import re
from typing import Any

from good_base.config.errors import CoercionError
from good_base.config.schema import FieldType

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})

_INT_RE = re.compile(r"^-?\d+$")
_DECIMAL_RE = re.compile(r"^-?\d*\.\d+$")


def parse_bool(value: str) -> bool:
    """Parse a boolean. Anything outside TRUE_VALUES is False."""
    return value.strip().lower() in TRUE_VALUES


def parse_number(value: str) -> int | float:
    """Parse an integer, or failing that a decimal.

    Raises:
        CoercionError: If the value is neither.
    """
    trimmed = value.strip()
    if _INT_RE.match(trimmed):
        return int(trimmed)
    if _DECIMAL_RE.match(trimmed):
        return float(trimmed)
    raise CoercionError(value, "number")


def _try_json(value: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(value)
    except ValueError:
        return False, None


def parse_list(value: str) -> list[Any]:
    """Parse a JSON array literal, else split on commas.

    Comma-split tokens are trimmed and empty tokens dropped.
    """
    trimmed = value.strip()
    if trimmed.startswith("[") and trimmed.endswith("]"):
        ok, parsed = _try_json(trimmed)
        if ok and isinstance(parsed, list):
            return parsed
    return [item.strip() for item in trimmed.split(",") if item.strip()]


def infer_value(value: str) -> Any:
    """Infer a type for an untyped value: boolean, number, JSON, string."""
    if value.strip().lower() in ("true", "false"):
        return parse_bool(value)
    try:
        return parse_number(value)
    except CoercionError:
        pass
    ok, parsed = _try_json(value)
    if ok and parsed is not None:
        return parsed
    return value


def coerce_value(value: str, target: FieldType | None) -> Any:
    """Convert a raw string to the given field type.

    Args:
        value: Raw environment value.
        target: Registered field type, or None when the target is unknown.

    Returns:
        The converted value.

    Raises:
        CoercionError: If a NUMBER target cannot be parsed.
    """
    if target is None or target is FieldType.ANY:
        return infer_value(value)
    if target is FieldType.BOOLEAN:
        return parse_bool(value)
    if target is FieldType.NUMBER:
        return parse_number(value)
    if target is FieldType.STRING_LIST:
        return parse_list(value)
    if target is FieldType.OBJECT:
        ok, parsed = _try_json(value)
        return parsed if ok else value
    return value


def encode_value(value: Any) -> str:
    """Render a configuration value as an environment string.

    Inverse of coerce_value() for the registered field types.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)
