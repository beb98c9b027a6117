"""MiData configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from dotenv import load_dotenv

from .env import env_float, env_int, optional_env_var, require_env_vars
from .http import HttpConfig

DEFAULT_MIDATA_BASE_URL = "https://db.scout.ch/de"
MIDATA_TIMEOUT_SECONDS = 30.0
DEFAULT_CACHE_SIZE = 1000
DEFAULT_BATCH_WIDTH = 100


def _default_http_config() -> HttpConfig:
    return HttpConfig(
        name="midata",
        base_url=DEFAULT_MIDATA_BASE_URL,
        timeout_seconds=MIDATA_TIMEOUT_SECONDS,
    )


@dataclass(frozen=True, slots=True)
class MiDataConfig:
    """Holds MiData connection settings.

    ``api_token`` is the service-issued application token. It is optional here
    because connections obtained through a user login do not need one.
    """

    http: HttpConfig = field(default_factory=_default_http_config)
    api_token: str | None = None
    cache_size: int = DEFAULT_CACHE_SIZE
    batch_width: int = DEFAULT_BATCH_WIDTH

    @property
    def base_url(self) -> str:
        return self.http.base_url or DEFAULT_MIDATA_BASE_URL


def get_midata_config(*, require_token: bool = False, load_env_file: bool = True) -> MiDataConfig:
    """Read the MiData settings from the environment (and a ``.env`` file)."""

    if load_env_file:
        load_dotenv()
    if require_token:
        api_token: str | None = require_env_vars(("MIDATA_API_TOKEN",))["MIDATA_API_TOKEN"]
    else:
        api_token = optional_env_var("MIDATA_API_TOKEN")

    http = HttpConfig(
        name="midata",
        base_url=(optional_env_var("MIDATA_BASE_URL") or DEFAULT_MIDATA_BASE_URL).rstrip("/"),
        timeout_seconds=env_float("MIDATA_TIMEOUT_SECONDS", MIDATA_TIMEOUT_SECONDS),
    )
    return MiDataConfig(
        http=http,
        api_token=api_token,
        cache_size=env_int("MIDATA_CACHE_SIZE", DEFAULT_CACHE_SIZE),
        batch_width=env_int("MIDATA_BATCH_WIDTH", DEFAULT_BATCH_WIDTH),
    )
