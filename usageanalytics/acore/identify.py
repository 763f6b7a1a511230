"""Identify message setting properties on a person."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .errors import FieldError
from .message import LIBRARY_NAME, Message
from .properties import Groups, Properties
from .version import get_version


@dataclass
class Identify(Message):
    """Sets ``properties`` on the person ``distinct_id``.

    ``type`` is set by the client when the message is enqueued.
    """

    distinct_id: str = ""
    timestamp: datetime | None = None
    properties: Properties | None = None
    groups: Groups | None = None
    type: str = ""

    def validate(self) -> None:
        if not self.distinct_id:
            raise FieldError("analytics.Identify", "DistinctId", self.distinct_id)

    def apify(self) -> dict[str, Any]:
        version = get_version()
        properties = Properties({"$lib": LIBRARY_NAME, "$lib_version": version})
        if self.groups is not None:
            properties.set("$groups", self.groups)

        return {
            "type": self.type,
            "library": LIBRARY_NAME,
            "library_version": version,
            "timestamp": self.timestamp,
            "event": "$identify",
            "distinct_id": self.distinct_id,
            "properties": properties,
            "$set": self.properties,
        }