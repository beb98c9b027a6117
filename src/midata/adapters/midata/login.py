"""Exchange an email and password for a MiData session token."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from midata.domain.auth import ACCEPT_HEADER
from midata.domain.dedup_cache import DedupCache
from midata.domain.errors import AuthenticationError

from .codec import JsonCodec

if TYPE_CHECKING:
    from midata.domain.ports import Codec, Transport

log = getLogger(__name__)

SIGN_IN_PATH = "/users/sign_in.json"

# One process-wide slot keyed by email only: a second sign-in for the same
# email is answered from here whatever password it carries.
_LOGIN_TOKENS: DedupCache[str, str] = DedupCache(capacity=1)


def default_login_cache() -> DedupCache[str, str]:
    return _LOGIN_TOKENS


class LoginService:
    def __init__(
        self,
        *,
        transport: Transport,
        codec: Codec | None = None,
        cache: DedupCache[str, str] | None = None,
    ) -> None:
        self._transport = transport
        self._codec = codec or JsonCodec()
        self._cache = cache if cache is not None else default_login_cache()

    async def login(self, email: str, password: str) -> str:
        async def sign_in() -> str:
            body = await self._transport.post_form(
                SIGN_IN_PATH,
                data=self._codec.encode_login_form(email, password),
                headers=ACCEPT_HEADER,
            )
            token = self._codec.decode_login(body)
            if token is None:
                raise AuthenticationError(f"Sign-in for {email} returned no session token")
            log.info("Signed in to MiData as %s", email)
            return token

        return await self._cache.get_or_fetch(email, sign_in)
