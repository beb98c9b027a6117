"""Directory entities: groups, the people in them and their roles.

Entities are plain records keyed by the service's stable identifier. Reference
fields (``*_id`` / ``*_ids``) hold what the service sent; the resolved fields
(``parent``, ``children``, ``roles`` ...) are filled by the link resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import LoadState

if TYPE_CHECKING:
    from datetime import date, datetime


@dataclass(eq=False, kw_only=True)
class Role:
    id: str
    role_type: str
    label: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    group_id: str | None = None
    layer_group_id: str | None = None
    group: Group | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.role_type.rsplit("::", 1)[-1]


@dataclass(eq=False, kw_only=True)
class Group:
    id: str
    name: str | None = None
    group_type: str | None = None
    href: str | None = None
    layer: bool | None = None
    short_name: str | None = None
    email: str | None = None
    address: str | None = None
    zip_code: str | None = None
    town: str | None = None
    country: str | None = None
    pbs_shortname: str | None = None
    website: str | None = None
    bank_account: str | None = None
    description: str | None = None

    parent_id: str | None = None
    layer_group_id: str | None = None
    hierarchy_ids: tuple[str, ...] = ()
    child_ids: tuple[str, ...] = ()

    parent: Group | None = None
    layer_group: Group | None = None
    hierarchy: list[Group] = field(default_factory=list)
    children: list[Group] = field(default_factory=list)
    members: list[Person] | None = None

    load_state: LoadState = LoadState.STUB

    @property
    def fully_loaded(self) -> bool:
        return self.load_state is LoadState.FULL

    def __repr__(self) -> str:
        return f"Group(id={self.id!r}, name={self.name!r}, load_state={self.load_state.name})"


@dataclass(eq=False, kw_only=True)
class Person:
    id: str
    href: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None
    company_name: str | None = None
    company: bool = False
    email: str | None = None
    address: str | None = None
    zip_code: str | None = None
    town: str | None = None
    country: str | None = None
    household_key: str | None = None
    picture: str | None = None
    gender: str | None = None
    birthday: date | None = None

    role_ids: tuple[str, ...] = ()
    roles: list[Role] = field(default_factory=list)
    is_leader: bool | None = None
    requested_by_group: str | None = None

    load_state: LoadState = LoadState.PARTIAL

    @property
    def fully_loaded(self) -> bool:
        return self.load_state is LoadState.FULL

    @property
    def display_name(self) -> str:
        if self.company and self.company_name:
            return self.company_name
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        if self.nickname:
            return f"{full_name} / {self.nickname}" if full_name else self.nickname
        return full_name or self.id

    def __repr__(self) -> str:
        return (
            f"Person(id={self.id!r}, name={self.display_name!r}, "
            f"load_state={self.load_state.name})"
        )


@dataclass(frozen=True, slots=True)
class LinkedSideTable:
    """Auxiliary entities a response references by identifier only."""

    groups: tuple[Group, ...] = ()
    roles: tuple[Role, ...] = ()


@dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    """Decoded result of one network call. Treated as read-only once built."""

    people: tuple[Person, ...] | None = None
    groups: tuple[Group, ...] | None = None
    linked: LinkedSideTable | None = None
