"""Attach side-loaded groups and roles to the entities that reference them.

Responses list their primary entities plus a ``linked`` table of groups and
roles referenced by identifier only. Resolution looks every reference up in
that table (first match wins), attaches a copy in reference order and drops
references that have no entry. Dropped references are reported as
``ReferenceResolutionMiss`` records instead of errors, because the service
routinely omits linked entries the caller is not allowed to see.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, TypeVar

from midata.domain.model import Group, LinkedSideTable, LoadState, Person, Relation, Role

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from midata.domain.model import ResponseEnvelope

log = getLogger(__name__)

# Role types held by participants rather than leaders.
PARTICIPANT_ROLE_TYPES: frozenset[str] = frozenset(
    {
        "Group::Biber::Biber",
        "Group::Woelfe::Wolf",
        "Group::Pfadi::Pfadi",
        "Group::Pio::Pio",
        "Group::AbteilungsRover::Rover",
        "Group::Pta::Mitglied",
        "Group::Abteilung::Passivmitglied",
        "Group::Abteilung::Ehrenmitglied",
    }
)


@dataclass(frozen=True, slots=True)
class ReferenceResolutionMiss:
    owner_id: str
    relation: Relation
    reference_id: str


@dataclass(slots=True)
class ResolvedResponse:
    people: list[Person] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)
    misses: list[ReferenceResolutionMiss] = field(default_factory=list)


def classify_leader(
    roles: Sequence[Role],
    participant_role_types: frozenset[str] = PARTICIPANT_ROLE_TYPES,
) -> bool:
    """Return True unless one of ``roles`` is a participant role.

    Undefined for people without roles, so an empty sequence is rejected.
    """
    if not roles:
        raise ValueError("Leader classification needs at least one role")
    return {role.role_type for role in roles}.isdisjoint(participant_role_types)


class LinkResolver:
    def __init__(self, participant_role_types: Iterable[str] = PARTICIPANT_ROLE_TYPES) -> None:
        self.participant_role_types = frozenset(participant_role_types)

    def resolve(self, envelope: ResponseEnvelope) -> ResolvedResponse:
        """Build fresh, linked copies of the envelope's primary entities.

        The envelope itself is left untouched so it can stay in the response cache.
        """
        linked = envelope.linked or LinkedSideTable()
        result = ResolvedResponse()
        for group in envelope.groups or ():
            result.groups.append(self._resolve_group(group, linked, result.misses))
        for person in envelope.people or ():
            result.people.append(self._resolve_person(person, linked, result.misses))
        if result.misses:
            log.debug("%s references had no linked entry", len(result.misses))
        return result

    def _resolve_group(
        self,
        group: Group,
        linked: LinkedSideTable,
        misses: list[ReferenceResolutionMiss],
    ) -> Group:
        resolved = replace(group, hierarchy=[], children=[], parent=None, layer_group=None)
        if group.parent_id is not None:
            resolved.parent = _lookup_group(
                linked, group.id, Relation.PARENT, group.parent_id, misses
            )
        if group.layer_group_id is not None:
            resolved.layer_group = _lookup_group(
                linked, group.id, Relation.LAYER_GROUP, group.layer_group_id, misses
            )
        resolved.hierarchy = _lookup_groups(
            linked, group.id, Relation.HIERARCHY, group.hierarchy_ids, misses
        )
        resolved.children = _lookup_groups(
            linked, group.id, Relation.CHILDREN, group.child_ids, misses
        )
        return resolved

    def _resolve_person(
        self,
        person: Person,
        linked: LinkedSideTable,
        misses: list[ReferenceResolutionMiss],
    ) -> Person:
        roles: list[Role] = []
        for role_id in person.role_ids:
            role = _find_first(linked.roles, role_id)
            if role is None:
                misses.append(ReferenceResolutionMiss(person.id, Relation.ROLES, role_id))
                continue
            roles.append(_resolve_role(role, linked, misses))

        resolved = replace(person, roles=roles, is_leader=None)
        if roles:
            resolved.is_leader = classify_leader(roles, self.participant_role_types)
        return resolved


def _resolve_role(
    role: Role,
    linked: LinkedSideTable,
    misses: list[ReferenceResolutionMiss],
) -> Role:
    resolved = replace(role, group=None)
    if role.group_id is not None:
        resolved.group = _lookup_group(linked, role.id, Relation.ROLE_GROUP, role.group_id, misses)
    return resolved


def _lookup_groups(
    linked: LinkedSideTable,
    owner_id: str,
    relation: Relation,
    reference_ids: Iterable[str],
    misses: list[ReferenceResolutionMiss],
) -> list[Group]:
    stubs: list[Group] = []
    for reference_id in reference_ids:
        stub = _lookup_group(linked, owner_id, relation, reference_id, misses)
        if stub is not None:
            stubs.append(stub)
    return stubs


def _lookup_group(
    linked: LinkedSideTable,
    owner_id: str,
    relation: Relation,
    reference_id: str,
    misses: list[ReferenceResolutionMiss],
) -> Group | None:
    match = _find_first(linked.groups, reference_id)
    if match is None:
        misses.append(ReferenceResolutionMiss(owner_id, relation, reference_id))
        return None
    return _stub(match)


def _stub(group: Group) -> Group:
    # Stubs keep what the side table told us but none of its own links.
    return replace(
        group,
        parent=None,
        layer_group=None,
        hierarchy=[],
        children=[],
        members=None,
        load_state=LoadState.STUB,
    )


T = TypeVar("T", Group, Role)


def _find_first(entries: Iterable[T], entity_id: str) -> T | None:
    for entry in entries:
        if entry.id == entity_id:
            return entry
    return None
