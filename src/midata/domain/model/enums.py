"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class LoadState(IntEnum):
    """How much of an entity has been fetched. Ordered: states only move up."""

    STUB = 0
    PARTIAL = 1
    FULL = 2


class Relation(StrEnum):
    """Reference kinds a response can carry towards its side-loaded table."""

    PARENT = "parent"
    LAYER_GROUP = "layer_group"
    HIERARCHY = "hierarchies"
    CHILDREN = "children"
    ROLES = "roles"
    ROLE_GROUP = "group"
