"""Access request and access rule events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .event import Event, register_event


def _tagged(default: Any = "", *, json: str, analytics: str | None = None, factory: Any = None) -> Any:
    metadata = {"json": json}
    if analytics is not None:
        metadata["analytics"] = analytics
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


class TimingMode(str, Enum):
    """When requested access starts."""

    ASAP = "asap"
    SCHEDULED = "scheduled"


@dataclass
class Timing:
    """Timing of an access request."""

    mode: TimingMode | str = _tagged("", json="mode")
    duration_seconds: float = _tagged(0.0, json="duration_seconds")


@register_event
@dataclass
class RequestCreated(Event):
    """An access request was created."""

    event_type = "cf:request.created"
    emitted_when = "Access Request was created"

    requested_by: str = _tagged(json="requested_by", analytics="usr")
    request_id: str = _tagged(json="request_id")
    has_reason: bool = _tagged(False, json="has_reason")
    # total number of resources selected
    targets_count: int = _tagged(0, json="targets_count")
    # total number of access groups selected
    access_groups_count: int = _tagged(0, json="access_groups_count")

    def user_id(self) -> str:
        return self.requested_by

    @classmethod
    def fixture(cls) -> "RequestCreated":
        return cls(
            requested_by="usr_123",
            targets_count=6,
            access_groups_count=3,
            request_id="req_123",
            has_reason=True,
        )


@register_event
@dataclass
class RequestReviewed(Event):
    """An access request was reviewed."""

    event_type = "cf:request.reviewed"
    emitted_when = "Access Request was reviewed"

    requested_by: str = _tagged(json="requested_by", analytics="usr")
    reviewed_by: str = _tagged(json="reviewed_by", analytics="usr")
    access_group_id: str = _tagged(json="access_group_id")
    request_id: str = _tagged(json="request_id")
    targets_count: int = _tagged(0, json="targets_count")
    timing: Timing = _tagged(json="timing", factory=Timing)
    override_timing: Timing | None = _tagged(None, json="override_timing")
    has_reason: bool = _tagged(False, json="has_reason")
    # how long the request has been waiting for a review
    pending_duration_seconds: float = _tagged(0.0, json="pending_duration_seconds")
    # APPROVE or DENY
    review: str = _tagged(json="review")
    reviewer_is_admin: bool = _tagged(False, json="reviewer_is_admin")

    def user_id(self) -> str:
        return self.reviewed_by

    @classmethod
    def fixture(cls) -> "RequestReviewed":
        return cls(
            requested_by="usr_123",
            reviewed_by="usr_234",
            request_id="req_123",
            access_group_id="group_123",
            targets_count=4,
            override_timing=Timing(mode=TimingMode.SCHEDULED, duration_seconds=50),
            pending_duration_seconds=200,
            review="APPROVE",
            reviewer_is_admin=True,
            timing=Timing(mode=TimingMode.ASAP, duration_seconds=100),
            has_reason=True,
        )


@register_event
@dataclass
class RequestRevoked(Event):
    """An access request was revoked."""

    event_type = "cf:request.revoked"
    emitted_when = "Access Request was revoked"

    requested_by: str = _tagged(json="requested_by", analytics="usr")
    revoked_by: str = _tagged(json="revoked_by", analytics="usr")
    request_id: str = _tagged(json="request_id")
    access_group_count: int = _tagged(0, json="access_group_count")
    has_reason: bool = _tagged(False, json="has_reason")

    def user_id(self) -> str:
        return self.revoked_by

    @classmethod
    def fixture(cls) -> "RequestRevoked":
        return cls(
            requested_by="usr_123",
            revoked_by="usr_234",
            request_id="req_123",
            access_group_count=3,
            has_reason=True,
        )


@register_event
@dataclass
class RuleArchived(Event):
    """An access rule was archived."""

    event_type = "cf:rule.archived"
    emitted_when = "Access Rule was archived"

    rule_id: str = _tagged(json="rule_id", analytics="rul")
    archived_by: str = _tagged(json="archived_by", analytics="usr")

    def user_id(self) -> str:
        return self.archived_by

    @classmethod
    def fixture(cls) -> "RuleArchived":
        return cls(rule_id="rul_123", archived_by="usr_123")


@register_event
@dataclass
class RuleCreated(Event):
    """An access rule was created."""

    event_type = "cf:rule.created"
    emitted_when = "Access Rule was created"

    rule_id: str = _tagged(json="rule_id", analytics="rul")
    created_by: str = _tagged(json="created_by", analytics="usr")
    max_duration_seconds: int = _tagged(0, json="max_duration_seconds")
    requires_approval: bool = _tagged(False, json="requires_approval")
    has_filter_expression: bool = _tagged(False, json="has_filter_expression")
    targets_count: int = _tagged(0, json="targets_count")
    targets: list[str] = _tagged(json="targets", factory=list)

    def user_id(self) -> str:
        return self.created_by

    @classmethod
    def fixture(cls) -> "RuleCreated":
        return cls(
            rule_id="rul_123",
            created_by="usr_123",
            targets=["commonfate/test-provider@v1", "commonfate/test-provider2@v2"],
            has_filter_expression=True,
            targets_count=2,
            max_duration_seconds=100,
            requires_approval=True,
        )


@register_event
@dataclass
class RuleUpdated(Event):
    """An access rule was updated."""

    event_type = "cf:rule.updated"
    emitted_when = "Access Rule was updated"

    rule_id: str = _tagged(json="rule_id", analytics="rul")
    updated_by: str = _tagged(json="updated_by", analytics="usr")
    max_duration_seconds: int = _tagged(0, json="max_duration_seconds")
    requires_approval: bool = _tagged(False, json="requires_approval")
    has_filter_expression: bool = _tagged(False, json="has_filter_expression")
    targets_count: int = _tagged(0, json="targets_count")
    targets: list[str] = _tagged(json="targets", factory=list)

    def user_id(self) -> str:
        return self.updated_by

    @classmethod
    def fixture(cls) -> "RuleUpdated":
        return cls(
            rule_id="rul_123",
            updated_by="usr_123",
            targets=["commonfate/test-provider1@v2", "commonfate/test-provider2@v3"],
            targets_count=2,
            max_duration_seconds=100,
            requires_approval=True,
        )