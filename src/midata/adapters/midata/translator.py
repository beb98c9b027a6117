"""Translate MiData payloads into domain entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from midata.domain.model import Group, LinkedSideTable, LoadState, Person, ResponseEnvelope, Role

if TYPE_CHECKING:
    from .schema import GroupPayload, LinkedPayload, PersonPayload, ResponsePayload, RolePayload


def translate_response(payload: ResponsePayload) -> ResponseEnvelope:
    people = payload.people
    groups = payload.groups
    return ResponseEnvelope(
        people=tuple(translate_person(person) for person in people) if people is not None else None,
        groups=tuple(translate_group(group) for group in groups) if groups is not None else None,
        linked=translate_linked(payload.linked) if payload.linked is not None else None,
    )


def translate_linked(payload: LinkedPayload) -> LinkedSideTable:
    return LinkedSideTable(
        groups=tuple(translate_group(group) for group in payload.groups),
        roles=tuple(translate_role(role) for role in payload.roles),
    )


def translate_group(group: GroupPayload) -> Group:
    return Group(
        id=group.id,
        name=group.name,
        group_type=group.group_type,
        href=group.href,
        layer=group.layer,
        short_name=group.short_name,
        email=group.email,
        address=group.address,
        zip_code=group.zip_code,
        town=group.town,
        country=group.country,
        pbs_shortname=group.pbs_shortname,
        website=group.website,
        bank_account=group.bank_account,
        description=group.description,
        parent_id=group.links.parent,
        layer_group_id=group.links.layer_group,
        hierarchy_ids=tuple(group.links.hierarchies),
        child_ids=tuple(group.links.children),
        load_state=LoadState.STUB,
    )


def translate_person(person: PersonPayload) -> Person:
    return Person(
        id=person.id,
        href=person.href,
        first_name=person.first_name,
        last_name=person.last_name,
        nickname=person.nickname,
        company_name=person.company_name,
        company=person.company,
        email=person.email,
        address=person.address,
        zip_code=person.zip_code,
        town=person.town,
        country=person.country,
        household_key=person.household_key,
        picture=person.picture,
        gender=person.gender,
        birthday=person.birthday,
        role_ids=tuple(person.links.roles),
        load_state=LoadState.PARTIAL,
    )


def translate_role(role: RolePayload) -> Role:
    return Role(
        id=role.id,
        role_type=role.role_type,
        label=role.label,
        created_at=role.created_at,
        updated_at=role.updated_at,
        deleted_at=role.deleted_at,
        group_id=role.links.group,
        layer_group_id=role.links.layer_group,
    )
