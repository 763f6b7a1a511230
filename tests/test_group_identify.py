import pytest

from usageanalytics.acore.errors import FieldError
from usageanalytics.acore.group_identify import GroupIdentify
from usageanalytics.acore.message import LIBRARY_NAME
from usageanalytics.acore.properties import Properties
from usageanalytics.acore.version import get_version


def test_group_identify_missing_type():
    with pytest.raises(FieldError) as excinfo:
        GroupIdentify().validate()
    assert excinfo.value == FieldError("analytics.GroupIdentify", "Type", "")


def test_group_identify_missing_key():
    with pytest.raises(FieldError) as excinfo:
        GroupIdentify(type="organization").validate()
    assert excinfo.value == FieldError("analytics.GroupIdentify", "Key", "")


def test_group_identify_valid_with_type_and_key():
    group = GroupIdentify(type="organization", key="id:5")
    assert group.validate() is None
    assert group.apify()["distinct_id"] == "$organization_id:5"


def test_group_identify_apify():
    props = Properties().set("version", "v1")
    api = GroupIdentify(type="deployment", key="dep_123", properties=props).apify()
    assert api["event"] == "$groupidentify"
    assert "type" not in api
    assert api["distinct_id"] == "$deployment_dep_123"
    assert api["properties"] == {
        "$lib": LIBRARY_NAME,
        "$lib_version": get_version(),
        "$group_type": "deployment",
        "$group_key": "dep_123",
        "$group_set": {"version": "v1"},
    }