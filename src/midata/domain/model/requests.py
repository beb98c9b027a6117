"""Request descriptors: immutable keys for one fetchable remote resource.

Descriptors never carry credentials, so a cache keyed on them must be scoped to a
single connection.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar, TypeAlias

from midata.domain.errors import AddressConstructionError

_IDENTIFIER = re.compile(r"[A-Za-z0-9_-]+")


def validate_identifier(value: object, *, field_name: str) -> str:
    """Return ``value`` if it can be placed in a path segment, else raise."""

    if not isinstance(value, str):
        raise AddressConstructionError(
            f"{field_name} must be a string, got {type(value).__name__}"
        )
    if not _IDENTIFIER.fullmatch(value):
        raise AddressConstructionError(f"Malformed {field_name}: {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class FetchGroup:
    group_id: str

    yields_full_entities: ClassVar[bool] = True

    def __post_init__(self) -> None:
        validate_identifier(self.group_id, field_name="group_id")

    @property
    def path(self) -> str:
        return f"/groups/{self.group_id}"


@dataclass(frozen=True, slots=True)
class FetchGroupMembers:
    group_id: str

    yields_full_entities: ClassVar[bool] = False

    def __post_init__(self) -> None:
        validate_identifier(self.group_id, field_name="group_id")

    @property
    def path(self) -> str:
        return f"/groups/{self.group_id}/people"


@dataclass(frozen=True, slots=True)
class FetchPerson:
    group_id: str
    person_id: str

    yields_full_entities: ClassVar[bool] = True

    def __post_init__(self) -> None:
        validate_identifier(self.group_id, field_name="group_id")
        validate_identifier(self.person_id, field_name="person_id")

    @property
    def path(self) -> str:
        return f"/groups/{self.group_id}/people/{self.person_id}"


RequestDescriptor: TypeAlias = FetchGroup | FetchGroupMembers | FetchPerson
