"""Group identify message setting properties on a group."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .errors import FieldError
from .message import LIBRARY_NAME, Message
from .properties import Properties
from .version import get_version


@dataclass
class GroupIdentify(Message):
    """Sets ``properties`` on the group of kind ``type`` identified by ``key``."""

    type: str = ""
    key: str = ""
    distinct_id: str = ""
    timestamp: datetime | None = None
    properties: Properties | None = None

    def validate(self) -> None:
        if not self.type:
            raise FieldError("analytics.GroupIdentify", "Type", self.type)
        if not self.key:
            raise FieldError("analytics.GroupIdentify", "Key", self.key)

    def apify(self) -> dict[str, Any]:
        version = get_version()
        properties = Properties(
            {
                "$lib": LIBRARY_NAME,
                "$lib_version": version,
                "$group_type": self.type,
                "$group_key": self.key,
                "$group_set": self.properties,
            }
        )
        return {
            "library": LIBRARY_NAME,
            "library_version": version,
            "timestamp": self.timestamp,
            "event": "$groupidentify",
            "distinct_id": f"${self.type}_{self.key}",
            "properties": properties,
        }