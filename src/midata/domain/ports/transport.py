"""Ports for talking to the directory service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from midata.domain.model import ResponseEnvelope


@runtime_checkable
class Transport(Protocol):
    """Performs the raw network calls. Raises ``TransportError`` on failure."""

    async def get(self, path: str, *, headers: Mapping[str, str]) -> bytes: ...

    async def post_form(
        self,
        path: str,
        *,
        data: Mapping[str, str],
        headers: Mapping[str, str],
    ) -> bytes: ...


@runtime_checkable
class Codec(Protocol):
    """Turns response bodies into domain envelopes. Raises ``DecodeError``."""

    def decode_envelope(self, body: bytes) -> ResponseEnvelope: ...

    def decode_login(self, body: bytes) -> str | None: ...

    def encode_login_form(self, email: str, password: str) -> dict[str, str]: ...
