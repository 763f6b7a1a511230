from importlib import metadata
from unittest import mock

from usageanalytics.acore.version import get_version


def test_installed_version_is_reported():
    get_version.cache_clear()
    try:
        with mock.patch.object(metadata, "version", return_value="1.2.3") as version:
            assert get_version() == "1.2.3"
            assert version.call_args.args == ("usageanalytics",)
    finally:
        get_version.cache_clear()


def test_missing_distribution_reports_dev():
    get_version.cache_clear()
    try:
        with mock.patch.object(
            metadata, "version", side_effect=metadata.PackageNotFoundError("x")
        ):
            assert get_version() == "dev"
    finally:
        get_version.cache_clear()


def test_version_is_cached():
    get_version.cache_clear()
    try:
        with mock.patch.object(metadata, "version", return_value="4.5.6") as version:
            first = get_version()
            second = get_version()
        assert first == second == "4.5.6"
        assert version.call_count == 1
    finally:
        get_version.cache_clear()