"""Public interface for the MiData adapter."""

from __future__ import annotations

from .codec import JsonCodec
from .login import SIGN_IN_PATH, LoginService, default_login_cache
from .schema import GroupPayload, LoginResponse, PersonPayload, ResponsePayload, RolePayload
from .translator import translate_group, translate_person, translate_response, translate_role

__all__ = [
    "SIGN_IN_PATH",
    "GroupPayload",
    "JsonCodec",
    "LoginResponse",
    "LoginService",
    "PersonPayload",
    "ResponsePayload",
    "RolePayload",
    "default_login_cache",
    "translate_group",
    "translate_person",
    "translate_response",
    "translate_role",
]
