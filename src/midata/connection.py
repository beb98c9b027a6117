"""Connection facade: load groups and people from a MiData instance.

A connection owns its credential, its response cache and its entity arena.
Every load goes the same way: descriptors are dispatched in chunks through the
cache, each response is resolved against its side-loaded table, and the
resulting records are admitted to the arena.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Self, TypeAlias, TypeVar, cast, overload

from midata.adapters.http_transport import HttpTransport
from midata.adapters.midata import JsonCodec, LoginService
from midata.config import MiDataConfig, get_midata_config
from midata.domain.arena import EntityArena
from midata.domain.auth import AuthContext
from midata.domain.dedup_cache import DedupCache
from midata.domain.dispatch import BatchDispatcher
from midata.domain.errors import AddressConstructionError, DecodeError
from midata.domain.linking import LinkResolver
from midata.domain.merge import fill_missing_scalars, merge_duplicates
from midata.domain.model import (
    FetchGroup,
    FetchGroupMembers,
    FetchPerson,
    Group,
    LoadState,
    Person,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType

    from midata.domain.linking import ResolvedResponse
    from midata.domain.model import RequestDescriptor, ResponseEnvelope
    from midata.domain.ports import Codec, Transport

log = getLogger(__name__)

Identifier: TypeAlias = str | int


class DirectoryConnection:
    def __init__(
        self,
        auth: AuthContext,
        *,
        transport: Transport | None = None,
        codec: Codec | None = None,
        config: MiDataConfig | None = None,
        resolver: LinkResolver | None = None,
    ) -> None:
        self.auth = auth
        self.config = config or MiDataConfig()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpTransport(self.config.http)
        self._codec: Codec = codec or JsonCodec()
        self._resolver = resolver or LinkResolver()
        self.cache: DedupCache[RequestDescriptor, ResponseEnvelope] = DedupCache(
            self.config.cache_size
        )
        self.dispatcher = BatchDispatcher(
            cache=self.cache,
            fetch=self._fetch,
            width=self.config.batch_width,
        )
        self.arena = EntityArena()

    # --- construction ---------------------------------------------------------

    @classmethod
    def with_app_token(
        cls,
        token: str,
        *,
        transport: Transport | None = None,
        codec: Codec | None = None,
        config: MiDataConfig | None = None,
    ) -> Self:
        return cls(
            AuthContext.for_app_token(token),
            transport=transport,
            codec=codec,
            config=config,
        )

    @classmethod
    def from_environment(cls, *, transport: Transport | None = None) -> Self:
        """Build a token-authenticated connection from ``MIDATA_*`` variables."""
        config = get_midata_config(require_token=True)
        # require_token guarantees a token
        token = cast("str", config.api_token)
        return cls.with_app_token(token, transport=transport, config=config)

    @classmethod
    async def login(
        cls,
        email: str,
        password: str,
        *,
        transport: Transport | None = None,
        codec: Codec | None = None,
        config: MiDataConfig | None = None,
        login_cache: DedupCache[str, str] | None = None,
    ) -> Self:
        """Sign in with email and password and return a user-authenticated connection."""
        connection = cls(
            AuthContext.for_user(email),
            transport=transport,
            codec=codec,
            config=config,
        )
        service = LoginService(
            transport=connection._transport,
            codec=connection._codec,
            cache=login_cache,
        )
        try:
            token = await service.login(email, password)
        except BaseException:
            await connection.aclose()
            raise
        connection.auth.populate_session_token(token)
        return connection

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            await self._transport.aclose()

    # --- bulk loads -----------------------------------------------------------

    async def load_groups(self, ids: Iterable[Identifier]) -> list[Group]:
        descriptors = [FetchGroup(_identifier(group_id)) for group_id in ids]
        groups: list[Group] = []
        for resolved in await self._load(descriptors):
            groups.extend(resolved.groups)
        return groups

    async def load_people_of_groups(self, ids: Iterable[Identifier]) -> list[list[Person]]:
        """Return the member listing of every group, one list per requested id."""
        descriptors = [FetchGroupMembers(_identifier(group_id)) for group_id in ids]
        listings = [resolved.people for resolved in await self._load(descriptors)]
        for descriptor, people in zip(descriptors, listings, strict=True):
            group = self.arena.group(descriptor.group_id)
            if group is not None:
                group.members = people
        return listings

    async def load_people(self, ids: Iterable[tuple[Identifier, Identifier]]) -> list[Person]:
        descriptors = [
            FetchPerson(_identifier(group_id), _identifier(person_id))
            for group_id, person_id in ids
        ]
        people: list[Person] = []
        for resolved in await self._load(descriptors):
            people.extend(resolved.people)
        return people

    # --- single-entity transitions --------------------------------------------

    @overload
    async def load(self, entity: Group) -> Group: ...

    @overload
    async def load(self, entity: Person) -> Person: ...

    async def load(self, entity: Group | Person) -> Group | Person:
        """Return the fully loaded record for ``entity``.

        Fully loaded entities come back unchanged. Otherwise the entity is
        fetched on its own and the replacement record is returned and stored in
        the arena; ``entity`` itself is not modified.
        """
        (loaded,) = await self._upgrade([entity])
        return loaded

    async def get_members(self, group: Group) -> list[Person]:
        """Return the group's members, fetching the listing only once."""
        if group.members is not None:
            return group.members
        (members,) = await self.load_people_of_groups([group.id])
        group.members = members
        return members

    async def load_details(self, people: Iterable[Person]) -> list[Person]:
        """Fully load ``people`` and collapse duplicates into one record per id.

        Values the caller already held survive where the fetched record lacks
        them. The result is sorted by identifier.
        """
        originals = list(people)
        upgraded = await self._upgrade(originals)
        copies: list[Person] = []
        for original, loaded in zip(originals, upgraded, strict=True):
            copy = replace(loaded)
            if original is not loaded:
                fill_missing_scalars(copy, original)
            copies.append(copy)
        merged = merge_duplicates(copies)
        return [self.arena.admit_person(person) for person in merged]

    def get_group(self, group_id: Identifier) -> Group | None:
        return self.arena.group(str(group_id))

    def get_person(self, person_id: Identifier) -> Person | None:
        return self.arena.person(str(person_id))

    # --- internals ------------------------------------------------------------

    @overload
    async def _upgrade(self, entities: Sequence[Group]) -> list[Group]: ...

    @overload
    async def _upgrade(self, entities: Sequence[Person]) -> list[Person]: ...

    @overload
    async def _upgrade(self, entities: Sequence[Group | Person]) -> list[Group | Person]: ...

    async def _upgrade(self, entities: Sequence[Group | Person]) -> list[Group | Person]:
        results: list[Group | Person | None] = []
        pending: list[tuple[int, Group | Person, RequestDescriptor]] = []
        for index, entity in enumerate(entities):
            known = self._known_full(entity)
            results.append(known)
            if known is None:
                pending.append((index, entity, _descriptor_for(entity)))

        if pending:
            log.debug("Upgrading %s of %s entities", len(pending), len(entities))
            responses = await self._load([descriptor for _, _, descriptor in pending])
            for (index, entity, _descriptor), resolved in zip(pending, responses, strict=True):
                results[index] = self._replacement(entity, resolved)

        return [result for result in results if result is not None]

    def _known_full(self, entity: Group | Person) -> Group | Person | None:
        if entity.fully_loaded:
            return entity
        current = (
            self.arena.group(entity.id)
            if isinstance(entity, Group)
            else self.arena.person(entity.id)
        )
        if current is not None and current.fully_loaded:
            return current
        return None

    def _replacement(self, entity: Group | Person, resolved: ResolvedResponse) -> Group | Person:
        if isinstance(entity, Group):
            group = _pick(resolved.groups, entity.id)
            if group.members is None:
                group.members = entity.members
            return self.arena.admit_group(group)
        person = _pick(resolved.people, entity.id)
        if person.requested_by_group is None:
            person.requested_by_group = entity.requested_by_group
        return self.arena.admit_person(person)

    async def _load(self, descriptors: Sequence[RequestDescriptor]) -> list[ResolvedResponse]:
        envelopes = await self.dispatcher.dispatch(descriptors)
        resolved_responses: list[ResolvedResponse] = []
        for descriptor, envelope in zip(descriptors, envelopes, strict=True):
            resolved = self._resolver.resolve(envelope)
            self._admit(descriptor, resolved)
            resolved_responses.append(resolved)
        return resolved_responses

    def _admit(self, descriptor: RequestDescriptor, resolved: ResolvedResponse) -> None:
        state = LoadState.FULL if descriptor.yields_full_entities else LoadState.PARTIAL
        resolved.groups[:] = [
            self.arena.admit_group(_promote(group, state)) for group in resolved.groups
        ]
        people: list[Person] = []
        for person in resolved.people:
            _promote(person, state)
            if person.requested_by_group is None:
                person.requested_by_group = descriptor.group_id
            people.append(self.arena.admit_person(person))
        resolved.people[:] = people

    async def _fetch(self, descriptor: RequestDescriptor) -> ResponseEnvelope:
        log.debug("Fetching %s", descriptor.path)
        body = await self._transport.get(descriptor.path, headers=self.auth.headers())
        return self._codec.decode_envelope(body)


T = TypeVar("T", Group, Person)


def _promote(entity: T, state: LoadState) -> T:
    entity.load_state = max(entity.load_state, state)
    return entity


def _identifier(value: Identifier) -> str:
    if isinstance(value, bool):
        raise AddressConstructionError(f"Not an identifier: {value!r}")
    return str(value) if isinstance(value, int) else value


def _descriptor_for(entity: Group | Person) -> RequestDescriptor:
    if isinstance(entity, Group):
        return FetchGroup(entity.id)
    if entity.requested_by_group is None:
        raise AddressConstructionError(
            f"Person {entity.id} was not observed through a group and cannot be addressed"
        )
    return FetchPerson(entity.requested_by_group, entity.id)


def _pick(entities: Sequence[T], entity_id: str) -> T:
    for entity in entities:
        if entity.id == entity_id:
            return entity
    raise DecodeError(f"Response did not contain the requested entity {entity_id}")
