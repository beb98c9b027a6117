"""Errors raised along the fetch path."""

from __future__ import annotations


class MiDataError(RuntimeError):
    """Base class for everything the directory client raises."""


class AddressConstructionError(MiDataError, ValueError):
    """Raised when an identifier cannot be turned into a resource path."""


class TransportError(MiDataError):
    """Raised when a network call fails or returns a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(MiDataError):
    """Raised when a response body does not match the expected schema."""


class AuthenticationError(MiDataError):
    """Raised when no usable credential is available for a request."""
