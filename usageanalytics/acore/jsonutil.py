"""Helpers that mirror JSON field naming for dataclasses.

A dataclass field may carry a JSON tag in its metadata, e.g.
``field(default="", metadata={"json": "name,omitempty"})``.
"""

from __future__ import annotations

import dataclasses
from typing import Any


def parse_json_tag(tag: str, default_name: str) -> tuple[str, bool]:
    """Return the serialised name of a field and whether empty values are omitted."""
    args = tag.split(",")
    name = args[0] or default_name
    omitempty = len(args) > 1 and args[1] == "omitempty"
    return name, omitempty


def is_zero_value(value: Any) -> bool:
    """Report whether a value is empty, checking dataclasses field by field."""
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float, complex)):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(
            is_zero_value(getattr(value, f.name)) for f in dataclasses.fields(value)
        )
    return False


def struct_to_map(obj: Any, into: dict[str, Any] | None = None) -> dict[str, Any]:
    """Map a dataclass instance's fields to their JSON names, shallowly.

    Fields tagged ``-`` are skipped, as are empty ``omitempty`` fields.
    """
    result: dict[str, Any] = {} if into is None else into
    for f in dataclasses.fields(obj):
        value = getattr(obj, f.name)
        name, omitempty = parse_json_tag(f.metadata.get("json", ""), f.name)
        if name != "-" and not (omitempty and is_zero_value(value)):
            result[name] = value
    return result