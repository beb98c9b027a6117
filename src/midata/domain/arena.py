"""Per-connection registry of entity records keyed by stable identifier."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from midata.domain.model import LoadState

if TYPE_CHECKING:
    from midata.domain.model import Group, Person

log = getLogger(__name__)


class EntityArena:
    """Holds the most complete record seen for every group and person.

    Admitting a record replaces the slot unless that would regress a fully
    loaded record. Replacements inherit what the previous record knew and
    the new one lacks: a person's first-observed group, a group's members.
    """

    def __init__(self) -> None:
        self.groups: dict[str, Group] = {}
        self.people: dict[str, Person] = {}

    def __len__(self) -> int:
        return len(self.groups) + len(self.people)

    def group(self, group_id: str) -> Group | None:
        return self.groups.get(group_id)

    def person(self, person_id: str) -> Person | None:
        return self.people.get(person_id)

    def admit_group(self, group: Group) -> Group:
        existing = self.groups.get(group.id)
        if existing is None or existing is group:
            self.groups[group.id] = group
            return group
        if _would_regress(existing.load_state, group.load_state):
            return existing
        if group.members is None:
            group.members = existing.members
        self.groups[group.id] = group
        return group

    def admit_person(self, person: Person) -> Person:
        existing = self.people.get(person.id)
        if existing is None or existing is person:
            self.people[person.id] = person
            return person
        if _would_regress(existing.load_state, person.load_state):
            return existing
        if existing.requested_by_group is not None:
            person.requested_by_group = existing.requested_by_group
        self.people[person.id] = person
        return person

    def clear(self) -> None:
        self.groups.clear()
        self.people.clear()


def _would_regress(current: LoadState, incoming: LoadState) -> bool:
    return current is LoadState.FULL and incoming < LoadState.FULL
