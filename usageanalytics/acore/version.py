"""Version of the analytics library as reported to the backend."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata

_DISTRIBUTION = "usageanalytics"


@lru_cache(maxsize=None)
def get_version() -> str:
    """Return the installed library version, or ``dev`` when not installed."""
    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "dev"