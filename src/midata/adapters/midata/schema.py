"""Pydantic models describing the MiData (hitobito) JSON API payloads."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _id_to_str(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _ids_to_str(value: object) -> object:
    if isinstance(value, list):
        return [_id_to_str(item) for item in value]
    return value


class MiDataBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class GroupLinks(MiDataBaseModel):
    parent: str | None = None
    layer_group: str | None = None
    hierarchies: list[str] = Field(default_factory=list)
    children: list[str] = Field(default_factory=list)

    _normalize_id = field_validator("parent", "layer_group", mode="before")(_id_to_str)
    _normalize_ids = field_validator("hierarchies", "children", mode="before")(_ids_to_str)


class GroupPayload(MiDataBaseModel):
    id: str
    href: str | None = None
    group_type: str | None = None
    layer: bool | None = None
    name: str | None = None
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
    links: GroupLinks = Field(default_factory=GroupLinks)

    _normalize_id = field_validator("id", "zip_code", mode="before")(_id_to_str)
    _normalize_blanks = field_validator(
        "short_name",
        "email",
        "address",
        "town",
        "country",
        "pbs_shortname",
        "website",
        "bank_account",
        "description",
        mode="before",
    )(_blank_to_none)


class PersonLinks(MiDataBaseModel):
    roles: list[str] = Field(default_factory=list)

    _normalize_ids = field_validator("roles", mode="before")(_ids_to_str)


class PersonPayload(MiDataBaseModel):
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
    links: PersonLinks = Field(default_factory=PersonLinks)

    _normalize_id = field_validator("id", "zip_code", mode="before")(_id_to_str)
    _normalize_blanks = field_validator(
        "first_name",
        "last_name",
        "nickname",
        "company_name",
        "email",
        "address",
        "town",
        "country",
        "household_key",
        "picture",
        "gender",
        "birthday",
        mode="before",
    )(_blank_to_none)

    @field_validator("company", mode="before")
    @classmethod
    def _null_company(cls, value: object) -> object:
        return False if value is None else value


class RoleLinks(MiDataBaseModel):
    group: str | None = None
    layer_group: str | None = None

    _normalize_ids = field_validator("group", "layer_group", mode="before")(_id_to_str)


class RolePayload(MiDataBaseModel):
    id: str
    role_type: str
    label: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    links: RoleLinks = Field(default_factory=RoleLinks)

    _normalize_id = field_validator("id", mode="before")(_id_to_str)
    _normalize_label = field_validator("label", mode="before")(_blank_to_none)


class LinkedPayload(MiDataBaseModel):
    groups: list[GroupPayload] = Field(default_factory=list)
    roles: list[RolePayload] = Field(default_factory=list)


class ResponsePayload(MiDataBaseModel):
    people: list[PersonPayload] | None = None
    groups: list[GroupPayload] | None = None
    linked: LinkedPayload | None = None


class LoginPerson(MiDataBaseModel):
    id: str | None = None
    authentication_token: str | None = None

    _normalize_id = field_validator("id", mode="before")(_id_to_str)
    _normalize_token = field_validator("authentication_token", mode="before")(_blank_to_none)


class LoginResponse(MiDataBaseModel):
    people: list[LoginPerson] = Field(default_factory=list)

    @property
    def token(self) -> str | None:
        for person in self.people:
            if person.authentication_token:
                return person.authentication_token
        return None
