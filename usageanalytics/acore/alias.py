"""Alias message linking two distinct identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .errors import FieldError
from .message import LIBRARY_NAME, Message
from .version import get_version


@dataclass
class Alias(Message):
    """Declares ``alias`` as another identifier of ``distinct_id``.

    ``type`` is set by the client when the message is enqueued.
    """

    alias: str = ""
    distinct_id: str = ""
    timestamp: datetime | None = None
    type: str = ""

    def validate(self) -> None:
        if not self.distinct_id:
            raise FieldError("analytics.Alias", "DistinctId", self.distinct_id)
        if not self.alias:
            raise FieldError("analytics.Alias", "Alias", self.alias)

    def apify(self) -> dict[str, Any]:
        version = get_version()
        return {
            "type": self.type,
            "library": LIBRARY_NAME,
            "library_version": version,
            "timestamp": self.timestamp,
            "properties": {
                "distinct_id": self.distinct_id,
                "alias": self.alias,
                "$lib": LIBRARY_NAME,
                "$lib_version": version,
            },
            "event": "$create_alias",
        }