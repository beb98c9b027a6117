"""httpx-backed transport for the directory service."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict

import httpx

from midata.domain.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from httpx._types import HeaderTypes, TimeoutTypes

    from midata.config.http import HttpConfig
    from midata.domain.ports import Transport

log = getLogger(__name__)


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


class HttpTransport:
    """Performs GET and form POST calls and hands back raw bodies.

    Connection reuse and TLS are left to ``httpx``. Every failure, including a
    non-2xx status, surfaces as ``TransportError``; nothing is retried here.
    """

    def __init__(
        self,
        config: HttpConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config

        client_kwargs: AsyncClientOptions = {"timeout": config.timeout_seconds}
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, *, headers: Mapping[str, str]) -> bytes:
        return await self._send("GET", path, headers=headers)

    async def post_form(
        self,
        path: str,
        *,
        data: Mapping[str, str],
        headers: Mapping[str, str],
    ) -> bytes:
        return await self._send("POST", path, headers=headers, data=data)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str],
        data: Mapping[str, str] | None = None,
    ) -> bytes:
        log.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, headers=dict(headers), data=data)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("%s %s answered %s", method, path, status)
            raise TransportError(
                f"{self.config.name}: {method} {path} answered {status}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(f"{self.config.name}: {method} {path} failed: {exc}") from exc
        return response.content


if TYPE_CHECKING:
    _transport_check: Transport = HttpTransport.__new__(HttpTransport)
