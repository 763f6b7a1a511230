"""Identify and group-identify events describing users and deployments."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .acore.group_identify import GroupIdentify
from .acore.identify import Identify
from .acore.message import Message
from .acore.properties import Groups
from .encoding import event_to_properties, hash_value
from .event import Event, MarshalContext, register_event


class Role(str, Enum):
    """Role of a user, derived from whether they are an administrator."""

    END_USER = "end_user"
    ADMIN = "admin"


@register_event
@dataclass
class DeploymentInfo(Event):
    """Properties of a deployment, sent as a group identify."""

    event_type = "cf:groupidentify:deployment"
    emitted_when = "Deployment updated"

    id: str = field(default="", metadata={"json": "-"})
    version: str = field(default="", metadata={"json": "version"})
    user_count: int = field(default=0, metadata={"json": "user_count"})
    group_count: int = field(default=0, metadata={"json": "group_count"})
    idp: str = field(default="", metadata={"json": "idp"})
    # dev, prod, uat, etc.
    stage: str = field(default="", metadata={"json": "stage,omitempty"})

    def user_id(self) -> str:
        return ""

    def marshal_event(self, context: MarshalContext) -> list[Message]:
        """Return the group identify message describing the deployment."""
        return [
            GroupIdentify(
                type="deployment",
                key=self.id,
                properties=event_to_properties(self),
            )
        ]

    @classmethod
    def fixture(cls) -> "DeploymentInfo":
        return cls(
            id="dep_123",
            version="v0.9.0",
            user_count=10,
            group_count=5,
            idp="cognito",
            stage="test",
        )


@register_event
@dataclass
class UserInfo(Event):
    """Properties of a user, sent as an identify."""

    event_type = "cf:identify:user_info"
    emitted_when = "Access Request created/updated"

    id: str = field(default="", metadata={"json": "-"})
    group_count: int = field(default=0, metadata={"json": "group_count"})
    is_admin: bool = field(default=False, metadata={"json": "-"})
    available_rules: int = field(
        default=0, metadata={"json": "available_rules,omitempty"}
    )

    def user_id(self) -> str:
        return ""

    def marshal_event(self, context: MarshalContext) -> list[Message]:
        """Return the identify message for the user.

        Raises ValueError if the user ID cannot be hashed.
        """
        role = Role.ADMIN if self.is_admin else Role.END_USER

        distinct_id = hash_value(self.id, "usr")
        if distinct_id is None:
            raise ValueError("could not hash user ID")

        identify = Identify(
            distinct_id=distinct_id,
            properties=event_to_properties(self).set("role", role),
        )
        if context.deployment_id is not None:
            identify.groups = Groups().set("deployment", context.deployment_id)
        return [identify]

    @classmethod
    def fixture(cls) -> "UserInfo":
        return cls(id="usr_123", is_admin=True, group_count=2, available_rules=1)