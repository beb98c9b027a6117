from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from midata.adapters.midata import default_login_cache
from midata.connection import DirectoryConnection
from tests.support.directory import FakeDirectory
from tests.support.payloads import envelope, group_payload, person_payload, role_payload

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tests.support.payloads import Payload

LEADER_ROLE = "Group::Abteilung::Abteilungsleitung"
PARTICIPANT_ROLE = "Group::Pfadi::Pfadi"


@pytest.fixture(autouse=True)
def _reset_login_cache() -> Iterator[None]:
    default_login_cache().clear()
    yield
    default_login_cache().clear()


@pytest.fixture
def service_routes() -> dict[str, Payload]:
    abteilung = group_payload(
        "6497",
        "Pfadi Beispiel",
        parent="2",
        layer_group="6497",
        hierarchies=["1", "2"],
        children=["100", "200"],
        email="info@beispiel.ch",
        zip_code=3000,
    )
    linked_groups = [
        group_payload("1", "Pfadibewegung Schweiz", group_type="Bund"),
        group_payload("2", "Kantonalverband", group_type="Kantonalverband"),
        group_payload("100", "Woelfe", group_type="Woelfe", parent="6497"),
        group_payload("300", "Elsewhere", group_type="Pfadi"),
    ]
    leader = role_payload("r1", LEADER_ROLE, group="6497", label="AL")
    participant = role_payload("r2", PARTICIPANT_ROLE, group="100")
    second_leader = role_payload("r3", LEADER_ROLE, group="100")
    return {
        "/groups/6497": envelope(groups=[abteilung], linked_groups=linked_groups),
        "/groups/100": envelope(
            groups=[group_payload("100", "Woelfe", group_type="Woelfe", parent="6497")],
            linked_groups=[group_payload("6497", "Pfadi Beispiel")],
        ),
        "/groups/6497/people": envelope(
            people=[
                person_payload("5", roles=["r1"]),
                person_payload("7", roles=["r2"]),
                person_payload("9", roles=["r9"]),
            ],
            linked_roles=[leader, participant],
            linked_groups=[group_payload("6497", "Pfadi Beispiel")],
        ),
        "/groups/100/people": envelope(
            people=[person_payload("5", roles=["r3"]), person_payload("7", roles=["r2"])],
            linked_roles=[participant, second_leader],
        ),
        "/groups/6497/people/5": envelope(
            people=[
                person_payload(
                    "5",
                    roles=["r1"],
                    nickname="Falke",
                    address="Hauptgasse 1",
                    zip_code="3000",
                    town="Bern",
                    household_key="hh-5",
                )
            ],
            linked_roles=[leader],
            linked_groups=[group_payload("6497", "Pfadi Beispiel")],
        ),
        "/groups/100/people/5": envelope(
            people=[person_payload("5", roles=["r3"], email="five@example.com")],
            linked_roles=[second_leader],
        ),
        "/groups/6497/people/7": envelope(
            people=[person_payload("7", roles=["r2"], email="seven@example.com", gender="w")],
            linked_roles=[participant],
        ),
        "/groups/6497/people/9": envelope(people=[person_payload("9")]),
    }


@pytest.fixture
def directory(service_routes: dict[str, Payload]) -> FakeDirectory:
    return FakeDirectory(service_routes)


@pytest.fixture
def connection(directory: FakeDirectory) -> DirectoryConnection:
    return DirectoryConnection.with_app_token("app-token", transport=directory)
