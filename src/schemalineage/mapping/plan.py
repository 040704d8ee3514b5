"""
Pydantic v2 models for declarative transformation plans.

A plan lists a source schema, an optional target schema and the ordered
transformation steps whose attribute edits should be replayed against a
fresh ``SchemaMapping``.  Plans are how recorded pipelines and test
fixtures describe lineage without executing any transformation.

Usage::

    from schemalineage.mapping.loader import PlanLoader
    from schemalineage.mapping.plan import replay_plan

    plan = PlanLoader().load(Path("cleanup.plan.yaml"))
    mapping = replay_plan(plan)
    mapping.current_schema
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemalineage.config import LineageConfig
from schemalineage.mapping.facade import SchemaMapping
from schemalineage.mapping.schema import Attribute, Schema

logger = logging.getLogger(__name__)


class EditSpec(BaseModel):
    """One attribute edit; an omitted target means the column is dropped."""

    model_config = ConfigDict(extra="forbid")

    source: str = Field(..., min_length=1, description="Name of the source column")
    target: Optional[Attribute] = Field(
        None, description="Derived column, or omitted for a deletion"
    )


class StepSpec(BaseModel):
    """A transformation step and the edits it makes to the schema."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Transformation name")
    edits: list[EditSpec] = Field(
        ..., min_length=1, description="Attribute edits made by this step"
    )
    description: Optional[str] = Field(None)


class MappingPlan(BaseModel):
    """Root model for a transformation plan YAML file."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(
        ...,
        pattern=r"^0\.1\.\d+$",
        description="Plan schema version; only 0.1.x is understood",
    )
    plan_id: str = Field(..., min_length=1)
    source: Schema
    target: Optional[Schema] = None
    steps: list[StepSpec] = Field(default_factory=list)
    description: Optional[str] = Field(None)

    @model_validator(mode="after")
    def _check_unique_step_names(self) -> "MappingPlan":
        names = [s.name for s in self.steps]
        if len(names) != len(set(names)):
            raise ValueError("Step names must be unique within a plan")
        return self


def replay_plan(
    plan: MappingPlan,
    config: Optional[LineageConfig] = None,
) -> SchemaMapping:
    """Build a mapping from *plan* and apply every step in order.

    Raises:
        AttributeNotInFrontierError: a step names a column that is not live.
        InvariantViolation: a step would merge two lineage tracks.
    """
    mapping = SchemaMapping(plan.source, plan.target, config=config)
    for step in plan.steps:
        schema = mapping.apply_step((e.source, e.target) for e in step.edits)
        logger.info(
            "Plan %s step '%s' applied: %s", plan.plan_id, step.name, schema
        )
    return mapping
