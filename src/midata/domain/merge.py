"""Reconcile several partial views of the same person into one."""

from __future__ import annotations

from itertools import groupby
from operator import attrgetter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from midata.domain.model import Person

PERSON_SCALAR_FIELDS: tuple[str, ...] = (
    "href",
    "first_name",
    "last_name",
    "nickname",
    "company_name",
    "email",
    "address",
    "zip_code",
    "town",
    "country",
    "household_key",
    "picture",
    "gender",
    "birthday",
    "requested_by_group",
)


def merge_person(base: Person, incoming: Person) -> Person:
    """Fold ``incoming`` into ``base`` and return ``base``.

    Optional scalars are filled only where ``base`` has none, roles are
    appended without deduplication and the completeness flags are OR'ed.
    """

    if base.id != incoming.id:
        raise ValueError(f"Cannot merge person {incoming.id!r} into {base.id!r}")

    _merge_scalar_attributes(base, incoming, PERSON_SCALAR_FIELDS)
    base.roles = [*base.roles, *incoming.roles]
    base.role_ids = base.role_ids + incoming.role_ids
    base.load_state = max(base.load_state, incoming.load_state)
    base.is_leader = _merge_flag(base.is_leader, incoming.is_leader)
    return base


def fill_missing_scalars(base: Person, incoming: Person) -> Person:
    """Copy optional scalars from ``incoming`` where ``base`` has none; roles stay as they are."""

    _merge_scalar_attributes(base, incoming, PERSON_SCALAR_FIELDS)
    return base


def merge_duplicates(people: Iterable[Person]) -> list[Person]:
    """Sort by identifier and collapse entries sharing one into a single record."""

    merged: list[Person] = []
    for _person_id, same_id in groupby(sorted(people, key=attrgetter("id")), key=attrgetter("id")):
        base, *rest = same_id
        for duplicate in rest:
            merge_person(base, duplicate)
        merged.append(base)
    return merged


def _merge_scalar_attributes(base: object, incoming: object, attributes: tuple[str, ...]) -> None:
    for attribute in attributes:
        if getattr(base, attribute) is None:
            value = getattr(incoming, attribute)
            if value is not None:
                setattr(base, attribute, value)


def _merge_flag(left: bool | None, right: bool | None) -> bool | None:
    if left is None:
        return right
    if right is None:
        return left
    return left or right
