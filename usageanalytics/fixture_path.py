"""Locations of the JSON fixtures of event types."""

from __future__ import annotations

import os
import re

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def fixture_path(event_type: str) -> str:
    """Return the fixture path for an event type.

    Every non-alphanumeric character becomes a dash, so
    ``cf:request.created`` maps to ``fixtures/cf-request-created.json``.
    """
    return os.path.join("fixtures", _UNSAFE.sub("-", event_type) + ".json")