"""
Pydantic v2 value objects for attribute lineage.

``Attribute`` and ``Schema`` are immutable (``frozen=True``) so they can be
used as dict keys and set members by the mapping store.  ``EditRecord``
describes one edit registered against the store and is kept in its history.

All models use ``extra="forbid"`` to reject unknown keys at parse time.

Usage::

    from schemalineage.mapping.schema import Attribute, Schema

    schema = Schema.of(
        Attribute(name="id", data_type="integer"),
        Attribute(name="name"),
    )
    schema.get("id")        # Attribute(name='id', data_type='integer')
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemalineage.types import EditKind


# ---------------------------------------------------------------------------
# Attribute
# ---------------------------------------------------------------------------


class Attribute(BaseModel):
    """A named, typed column.  Equal when name and data type are equal."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Column name")
    data_type: str = Field(
        "string", min_length=1, description="Semantic data type of the column"
    )

    def __str__(self) -> str:
        return f"{self.name}:{self.data_type}"


AttributeRef = Union[Attribute, str]


def attribute_matches(attribute: Attribute, ref: AttributeRef) -> bool:
    """True if *attribute* is *ref*, or carries the name *ref*."""
    if isinstance(ref, str):
        return attribute.name == ref
    return attribute == ref


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class Schema(BaseModel):
    """An ordered set of attributes with unique names."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    attributes: tuple[Attribute, ...] = Field(default_factory=tuple)

    @field_validator("attributes")
    @classmethod
    def _check_unique_names(
        cls, v: tuple[Attribute, ...]
    ) -> tuple[Attribute, ...]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for attribute in v:
            if attribute.name in seen:
                duplicates.append(attribute.name)
            seen.add(attribute.name)
        if duplicates:
            raise ValueError(
                f"Duplicate attribute names in schema: {sorted(set(duplicates))}"
            )
        return v

    @classmethod
    def of(cls, *attributes: Attribute) -> "Schema":
        return cls(attributes=tuple(attributes))

    @property
    def names(self) -> list[str]:
        return [a.name for a in self.attributes]

    def get(self, name: str) -> Optional[Attribute]:
        """Return the attribute called *name*, or ``None``."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def has_attribute(self, ref: AttributeRef) -> bool:
        return any(attribute_matches(a, ref) for a in self.attributes)

    def matches(self, other: Optional["Schema"]) -> bool:
        """Set-wise comparison, ignoring attribute order."""
        if other is None:
            return False
        return set(self.attributes) == set(other.attributes)

    def __len__(self) -> int:
        return len(self.attributes)

    def __str__(self) -> str:
        return "[" + ", ".join(str(a) for a in self.attributes) + "]"


# ---------------------------------------------------------------------------
# Edit records
# ---------------------------------------------------------------------------


class EditRecord(BaseModel):
    """One edit registered against the mapping store."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    step: int = Field(..., ge=0, description="Round the edit belongs to")
    kind: EditKind
    source: Attribute
    target: Optional[Attribute] = None
    layer: int = Field(
        ...,
        ge=0,
        description="Layer of the derived node, or of the dropped node",
    )
