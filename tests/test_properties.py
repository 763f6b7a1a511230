import pytest

from usageanalytics.acore.properties import Groups, Properties


@pytest.mark.parametrize(
    "name, value",
    [("revenue", 0.5), ("currency", "ABC")],
)
def test_properties_simple(name, value):
    props = Properties()
    props.set(name, value)
    assert props == {name: value}


def test_properties_multi():
    expected = Properties({"title": "A", "value": 0.5})
    chained = Properties().set("title", "A").set("value", 0.5)
    assert chained == expected


def test_properties_set_returns_same_object():
    props = Properties()
    assert props.set("a", 1) is props


def test_groups_company():
    groups = Groups()
    groups.set("company", 5)
    assert groups == Groups({"company": 5})


def test_groups_chain_overwrites():
    groups = Groups().set("deployment", "dep_1").set("deployment", "dep_2")
    assert groups == {"deployment": "dep_2"}