"""Free-form property and group mappings attached to messages."""

from __future__ import annotations

from typing import Any


class Properties(dict[str, Any]):
    """Properties of a message, with a chainable setter."""

    def set(self, name: str, value: Any) -> "Properties":
        self[name] = value
        return self


class Groups(dict[str, Any]):
    """Groups a message belongs to, with a chainable setter."""

    def set(self, name: str, value: Any) -> "Groups":
        self[name] = value
        return self