"""Domain port definitions for adapters."""

from __future__ import annotations

from .transport import Codec, Transport

__all__ = ["Codec", "Transport"]
