"""
Attribute lineage mapping.

Tracks how every column of a source schema evolves, step by step, into
the columns of the current schema, and answers provenance queries in
both directions.

Public API::

    from schemalineage.mapping import (
        # Value objects
        Attribute,
        Schema,
        EditRecord,
        # Forest
        LineageNode,
        MappingStore,
        # Facade
        SchemaMapping,
        # Errors
        LineageError,
        AttributeNotInFrontierError,
        InvariantViolation,
        # Plans
        MappingPlan,
        PlanLoader,
        replay_plan,
    )
"""

from schemalineage.mapping.facade import SchemaMapping
from schemalineage.mapping.loader import PlanLoader
from schemalineage.mapping.node import LineageNode
from schemalineage.mapping.plan import EditSpec, MappingPlan, StepSpec, replay_plan
from schemalineage.mapping.schema import Attribute, EditRecord, Schema
from schemalineage.mapping.store import (
    AttributeNotInFrontierError,
    InvariantViolation,
    LineageError,
    MappingStore,
)

__all__ = [
    # Value objects
    "Attribute",
    "Schema",
    "EditRecord",
    # Forest
    "LineageNode",
    "MappingStore",
    # Facade
    "SchemaMapping",
    # Errors
    "LineageError",
    "AttributeNotInFrontierError",
    "InvariantViolation",
    # Plans
    "EditSpec",
    "StepSpec",
    "MappingPlan",
    "PlanLoader",
    "replay_plan",
]
