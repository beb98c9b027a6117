"""JSON codec between MiData response bodies and domain envelopes."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from midata.domain.errors import DecodeError

from .schema import LoginResponse, ResponsePayload
from .translator import translate_response

if TYPE_CHECKING:
    from midata.domain.model import ResponseEnvelope
    from midata.domain.ports import Codec

log = getLogger(__name__)

LOGIN_EMAIL_FIELD = "person[email]"
LOGIN_PASSWORD_FIELD = "person[password]"


class JsonCodec:
    def decode_envelope(self, body: bytes) -> ResponseEnvelope:
        try:
            payload = ResponsePayload.model_validate_json(body)
        except ValidationError as exc:
            log.warning("Undecodable MiData response: %s", exc.errors(include_url=False))
            raise DecodeError(f"Unexpected MiData response payload: {exc}") from exc
        return translate_response(payload)

    def decode_login(self, body: bytes) -> str | None:
        try:
            payload = LoginResponse.model_validate_json(body)
        except ValidationError as exc:
            raise DecodeError(f"Unexpected MiData sign-in payload: {exc}") from exc
        return payload.token

    def encode_login_form(self, email: str, password: str) -> dict[str, str]:
        return {LOGIN_EMAIL_FIELD: email, LOGIN_PASSWORD_FIELD: password}


if TYPE_CHECKING:
    _codec_check: Codec = JsonCodec()
