from datetime import datetime, timezone

import pytest

from usageanalytics.acore.alias import Alias
from usageanalytics.acore.errors import FieldError
from usageanalytics.acore.message import LIBRARY_NAME
from usageanalytics.acore.version import get_version


def test_alias_missing_distinct_id():
    with pytest.raises(FieldError) as excinfo:
        Alias(alias="1").validate()
    assert excinfo.value == FieldError("analytics.Alias", "DistinctId", "")


def test_alias_missing_alias():
    with pytest.raises(FieldError) as excinfo:
        Alias(distinct_id="1").validate()
    assert excinfo.value == FieldError("analytics.Alias", "Alias", "")


def test_alias_valid():
    alias = Alias(alias="1", distinct_id="2")
    assert alias.validate() is None
    assert alias.apify()["properties"]["alias"] == "1"


def test_alias_apify():
    ts = datetime(2009, 11, 10, 23, tzinfo=timezone.utc)
    api = Alias(alias="a", distinct_id="d", timestamp=ts, type="alias").apify()
    assert api == {
        "type": "alias",
        "library": LIBRARY_NAME,
        "library_version": get_version(),
        "timestamp": ts,
        "properties": {
            "distinct_id": "d",
            "alias": "a",
            "$lib": LIBRARY_NAME,
            "$lib_version": get_version(),
        },
        "event": "$create_alias",
    }