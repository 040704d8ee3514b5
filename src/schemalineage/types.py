"""
Shared enums for schemalineage.

Kept in one module so that the config layer, the mapping store and the
plan models agree on the same string values.
"""

from __future__ import annotations

from enum import Enum


class EmptyCommitPolicy(str, Enum):
    """What a commit does when every live track was dropped in one round."""

    EMPTY = "empty"  # commit an empty schema
    RETAIN = "retain"  # keep the previously committed schema


class EditKind(str, Enum):
    """Kind of edit registered against the mapping store."""

    DERIVE = "derive"
    DROP = "drop"
