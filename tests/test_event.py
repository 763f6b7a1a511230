import dataclasses
from dataclasses import dataclass, field

import pytest

from usageanalytics.encoding import event_to_properties
from usageanalytics.event import (
    ALL_EVENTS,
    Event,
    MarshalContext,
    Provider,
    register_event,
)


@dataclass
class _Sample(Event):
    event_type = "test:sample.registered"
    emitted_when = "in the registry test"

    who: str = field(default="", metadata={"json": "who"})

    def user_id(self) -> str:
        return self.who

    @classmethod
    def fixture(cls) -> "_Sample":
        return cls(who="usr_1")


def test_register_event_records_class_by_type():
    try:
        returned = register_event(_Sample)
        assert returned is _Sample
        assert ALL_EVENTS["test:sample.registered"] is _Sample
    finally:
        ALL_EVENTS.pop("test:sample.registered", None)
    assert "test:sample.registered" not in ALL_EVENTS


def test_register_event_overwrites_same_type():
    @dataclass
    class _Other(_Sample):
        pass

    try:
        register_event(_Sample)
        register_event(_Other)
        assert ALL_EVENTS["test:sample.registered"] is _Other
    finally:
        ALL_EVENTS.pop("test:sample.registered", None)


def test_fixture_of_subclass_encodes_to_properties():
    sample = _Sample.fixture()
    assert sample.user_id() == "usr_1"
    assert event_to_properties(sample) == {"who": "usr_1"}


def test_event_is_abstract():
    with pytest.raises(TypeError):
        Event()


def test_marshal_context_defaults_and_is_frozen():
    ctx = MarshalContext()
    assert ctx.deployment_id is None
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.deployment_id = "dep_123"


def test_marshal_context_holds_deployment():
    assert MarshalContext(deployment_id="dep_123").deployment_id == "dep_123"


def test_provider_omits_empty_kind():
    props = event_to_properties(Provider("commonfate", "aws", "v1"))
    assert props == {"publisher": "commonfate", "name": "aws", "version": "v1"}


def test_provider_includes_kind_when_set():
    props = event_to_properties(Provider("commonfate", "aws", "v1", kind="Account"))
    assert props["kind"] == "Account"
    assert len(props) == 4