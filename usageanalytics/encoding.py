"""Turning tagged event dataclasses into analytics properties.

Fields are described through dataclass metadata: ``json`` gives the
property name and options (``"name,omitempty"``, or ``"-"`` to skip), and
``analytics`` gives a prefix under which the value is hashed before it
leaves the process (``"usr"`` turns ``"usr_123"`` into ``"usr_<sha256>"``).
"""

from __future__ import annotations

import base64
import dataclasses
import hashlib
from typing import Any, TypeVar

from .acore.message import _to_json
from .acore.properties import Properties

T = TypeVar("T")


class TagOptions(str):
    """The comma-separated options following the name in a JSON tag."""

    def contains(self, option_name: str) -> bool:
        """Report whether ``option_name`` is one of the options."""
        if not self:
            return False
        return option_name in self.split(",")


def parse_tag(tag: str) -> tuple[str, TagOptions]:
    """Split a JSON tag into its name and its options."""
    name, _, options = tag.partition(",")
    return name, TagOptions(options)


def hash_value(value: Any, prefix: str) -> str | None:
    """Hash the JSON form of ``value`` as ``<prefix>_<base64url sha256>``.

    Returns None when the value cannot be encoded or encodes to an empty string.
    """
    try:
        data = _to_json(value)
    except (TypeError, ValueError):
        return None
    if not data or data == b'""':
        return None
    digest = hashlib.sha256(data).digest()
    encoded = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return f"{prefix}_{encoded}"


def is_empty_value(value: Any) -> bool:
    """Report whether a value counts as empty for ``omitempty``."""
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float, complex)):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def _require_dataclass(obj: Any) -> None:
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"expected a dataclass instance, got {type(obj).__name__}")


def _analytics_prefix(f: dataclasses.Field) -> str | None:
    tag = f.metadata.get("analytics")
    if tag is None:
        return None
    prefix = tag.partition(",")[0]
    return prefix or None


def hash_values(obj: T) -> T:
    """Return a copy whose ``analytics``-tagged string fields are hashed.

    Empty strings and fields that are not strings are left as they are.
    """
    _require_dataclass(obj)
    changes: dict[str, str] = {}
    for f in dataclasses.fields(obj):
        prefix = _analytics_prefix(f)
        if prefix is None:
            continue
        value = getattr(obj, f.name)
        if not isinstance(value, str):
            continue
        hashed = hash_value(value, prefix)
        if hashed is not None:
            changes[f.name] = hashed
    return dataclasses.replace(obj, **changes)


def event_to_properties(event: Any) -> Properties:
    """Build the properties of an event from its JSON-tagged fields."""
    _require_dataclass(event)
    props = Properties()
    for f in dataclasses.fields(event):
        tag = f.metadata.get("json")
        if tag is None:
            continue
        name, options = parse_tag(tag)
        if name in ("", "-"):
            continue
        value = getattr(event, f.name)
        if options.contains("omitempty") and is_empty_value(value):
            continue
        prefix = _analytics_prefix(f)
        if prefix is not None:
            hashed = hash_value(value, prefix)
            if hashed is not None:
                props.set(name, hashed)
                continue
        props.set(name, value)
    return props