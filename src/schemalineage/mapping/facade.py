"""
Schema mapping facade: source, current and target schema in one object.

``SchemaMapping`` is what the pipeline threads through its step loop and
what the decision engine queries when it scores a candidate
transformation.  All lineage bookkeeping is delegated to a
``MappingStore``; snapshots share that store, so they are views of the
same forest rather than copies.

Usage::

    from schemalineage.mapping import Attribute, Schema, SchemaMapping

    mapping = SchemaMapping(source, target)
    mapping.apply_step([(Attribute(name="id"), Attribute(name="id", data_type="integer"))])
    mapping.has_mapped()
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from schemalineage.config import LineageConfig
from schemalineage.mapping.node import LineageNode
from schemalineage.mapping.schema import (
    Attribute,
    AttributeRef,
    EditRecord,
    Schema,
)
from schemalineage.mapping.store import MappingStore

logger = logging.getLogger(__name__)


class SchemaMapping:
    """Maps the source schema, through the current schema, to a target.

    Args:
        source_schema: Schema the mapping starts from.
        target_schema: Schema the pipeline is working towards, if known.
        config: Engine settings, used only when a new store is built.
        store: Existing store to share instead of building a new one.
    """

    def __init__(
        self,
        source_schema: Schema,
        target_schema: Optional[Schema] = None,
        config: Optional[LineageConfig] = None,
        store: Optional[MappingStore] = None,
    ) -> None:
        self._source_schema = source_schema
        self._target_schema = target_schema
        self._store = store if store is not None else MappingStore(
            source_schema, config=config
        )

    @property
    def source_schema(self) -> Schema:
        return self._source_schema

    @property
    def current_schema(self) -> Schema:
        return self._store.current_schema

    @property
    def target_schema(self) -> Optional[Schema]:
        return self._target_schema

    @property
    def store(self) -> MappingStore:
        return self._store

    @property
    def history(self) -> tuple[EditRecord, ...]:
        return self._store.history

    def has_mapped(self) -> bool:
        """True once the current schema matches the target schema."""
        return self.current_schema.matches(self._target_schema)

    # -- lineage updates -----------------------------------------------------

    def register_edit(
        self,
        source: AttributeRef,
        target: Optional[Attribute] = None,
    ) -> Optional[LineageNode]:
        return self._store.register_edit(source, target)

    def run_update_pass(self) -> int:
        return self._store.run_update_pass()

    def commit_current_schema(self) -> Schema:
        return self._store.commit_current_schema()

    def replace_current_schema(self, schema: Schema) -> None:
        self._store.replace_current_schema(schema)

    def apply_step(
        self,
        edits: Iterable[tuple[AttributeRef, Optional[Attribute]]],
    ) -> Schema:
        """Register every edit of one transformation, then update and commit.

        If an edit is rejected, the edits already registered for this step
        are rolled back and the error propagates.  The mapping is left as it
        was before the call.
        """
        self._store.register_edits(edits)
        self._store.run_update_pass()
        return self._store.commit_current_schema()

    # -- provenance ----------------------------------------------------------

    def targets_of(self, source: AttributeRef) -> Optional[set[Attribute]]:
        return self._store.targets_of(source)

    def sources_of(self, target: AttributeRef) -> Optional[set[Attribute]]:
        return self._store.sources_of(target)

    def origins_of(self, attribute: AttributeRef) -> Optional[set[Attribute]]:
        return self._store.origins_of(attribute)

    def descendants_of(self, source: AttributeRef) -> Optional[set[Attribute]]:
        return self._store.descendants_of(source)

    # -- snapshots -----------------------------------------------------------

    def snapshot(self) -> "SchemaMapping":
        """A new mapping whose source is this mapping's current schema.

        The store is shared, so edits made through either mapping are
        visible through both.
        """
        logger.debug(
            "Snapshot taken at step %d: source=%s",
            self._store.step,
            self.current_schema,
        )
        return SchemaMapping(
            self.current_schema,
            self._target_schema,
            store=self._store,
        )

    def __repr__(self) -> str:
        return (
            f"SchemaMapping(source={self._source_schema}, "
            f"current={self.current_schema}, target={self._target_schema})"
        )
