"""Credentials and the request headers derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from midata.domain.errors import AuthenticationError

ACCEPT_HEADER = {"Accept": "application/json"}
APP_TOKEN_HEADER = "X-Token"
USER_EMAIL_HEADER = "X-User-Email"
USER_TOKEN_HEADER = "X-User-Token"


@dataclass(frozen=True, slots=True)
class AppToken:
    """Service-issued application token."""

    token: str

    def __repr__(self) -> str:
        return "AppToken(token='***')"


@dataclass(frozen=True, slots=True)
class UserLogin:
    """A user who still has to sign in."""

    email: str


@dataclass(frozen=True, slots=True)
class UserSession:
    """A signed-in user: email plus the session token from the sign-in call."""

    email: str
    token: str

    def __repr__(self) -> str:
        return f"UserSession(email={self.email!r}, token='***')"


Credential: TypeAlias = AppToken | UserLogin | UserSession


class AuthContext:
    """Holds the active credential of one connection.

    The credential is fixed at construction; the only permitted change is
    turning a pending ``UserLogin`` into a ``UserSession`` once, at sign-in.
    """

    def __init__(self, credential: Credential) -> None:
        self._credential = credential

    @classmethod
    def for_app_token(cls, token: str) -> AuthContext:
        if not token.strip():
            raise AuthenticationError("Application token must not be blank")
        return cls(AppToken(token))

    @classmethod
    def for_user(cls, email: str, token: str | None = None) -> AuthContext:
        if token is None:
            return cls(UserLogin(email))
        return cls(UserSession(email, token))

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def email(self) -> str | None:
        if isinstance(self._credential, AppToken):
            return None
        return self._credential.email

    @property
    def is_authenticated(self) -> bool:
        return not isinstance(self._credential, UserLogin)

    def populate_session_token(self, token: str) -> None:
        credential = self._credential
        if not isinstance(credential, UserLogin):
            raise AuthenticationError("Session token can only be set once, on a pending login")
        self._credential = UserSession(credential.email, token)

    def headers(self) -> dict[str, str]:
        credential = self._credential
        headers = dict(ACCEPT_HEADER)
        match credential:
            case AppToken(token=token):
                headers[APP_TOKEN_HEADER] = token
            case UserSession(email=email, token=token):
                headers[USER_EMAIL_HEADER] = email
                headers[USER_TOKEN_HEADER] = token
            case UserLogin(email=email):
                raise AuthenticationError(f"{email} has not signed in yet")
        return headers

    def __repr__(self) -> str:
        return f"AuthContext({self._credential!r})"
