"""Domain model: entities, load states and request descriptors."""

from __future__ import annotations

from .entities import Group, LinkedSideTable, Person, ResponseEnvelope, Role
from .enums import LoadState, Relation
from .requests import (
    FetchGroup,
    FetchGroupMembers,
    FetchPerson,
    RequestDescriptor,
    validate_identifier,
)

__all__ = [
    "FetchGroup",
    "FetchGroupMembers",
    "FetchPerson",
    "Group",
    "LinkedSideTable",
    "LoadState",
    "Person",
    "Relation",
    "RequestDescriptor",
    "ResponseEnvelope",
    "Role",
    "validate_identifier",
]
