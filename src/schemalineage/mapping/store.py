"""
Mapping store: the versioned forest of attribute lineage nodes.

One root per source-schema attribute.  Every registered edit appends a
derived node one layer below the frontier tail it came from; a dropped
attribute simply gets no child.  After each transformation the caller runs
the update pass and commits, which recomputes the current schema from the
frontier tails at the highest layer.

Nodes live in an arena (``list[LineageNode]``) and point at each other by
index.  Nothing is re-parented, and only the nodes of a rejected
``register_edits`` batch are ever removed.

Usage::

    from schemalineage.mapping.schema import Attribute, Schema
    from schemalineage.mapping.store import MappingStore

    a, b = Attribute(name="a"), Attribute(name="b")
    store = MappingStore(Schema.of(a, b))

    store.register_edit(a, Attribute(name="a1"))
    store.register_edit(b, Attribute(name="b1"))
    store.run_update_pass()
    store.commit_current_schema()   # [a1:string, b1:string]
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterable, Optional

from schemalineage.config import LineageConfig, get_config
from schemalineage.mapping.node import LineageNode
from schemalineage.mapping.otel import (
    emit_edit_registered,
    emit_edit_rejected,
    emit_schema_committed,
)
from schemalineage.mapping.schema import (
    Attribute,
    AttributeRef,
    EditRecord,
    Schema,
    attribute_matches,
)
from schemalineage.types import EditKind, EmptyCommitPolicy

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LineageError(Exception):
    """Base class for mapping store errors."""


class AttributeNotInFrontierError(LineageError, LookupError):
    """Raised when an edit names a source that is not a live frontier tail."""

    def __init__(self, attribute: AttributeRef) -> None:
        self.attribute = attribute
        super().__init__(
            f"source attribute not present in current mapping frontier: "
            f"{attribute}"
        )


class InvariantViolation(LineageError):
    """Raised when an edit would break the tree or layer ordering."""

    def __init__(self, attribute: Attribute, layer: int, detail: str) -> None:
        self.attribute = attribute
        self.layer = layer
        super().__init__(
            f"Lineage invariant violated for {attribute} at layer {layer}: "
            f"{detail}"
        )


# ---------------------------------------------------------------------------
# Traversal predicates
# ---------------------------------------------------------------------------


def _follow_all(node: LineageNode) -> bool:
    return True


def _follow_updated(node: LineageNode) -> bool:
    return node.updated


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class MappingStore:
    """Owns the lineage forest and the committed current schema.

    Args:
        source_schema: The original schema; one root is built per attribute.
        config: Engine settings.  Defaults to ``get_config()``.
    """

    def __init__(
        self,
        source_schema: Schema,
        config: Optional[LineageConfig] = None,
    ) -> None:
        self._config = config or get_config()
        self._nodes: list[LineageNode] = []
        self._roots: list[int] = []
        self._by_key: dict[tuple[Attribute, int], int] = {}
        self._dropped: set[int] = set()
        self._history: list[EditRecord] = []
        self._provenance: dict[Attribute, set[Attribute]] = {}
        self._origins: dict[Attribute, set[Attribute]] = {}
        self._descendants: dict[Attribute, set[Attribute]] = {}
        self._current_schema = source_schema
        self._committed_layer = 0
        self._step = 0

        for attribute in source_schema.attributes:
            root = self._new_node(attribute, 0, parent=None)
            root.update()
            self._roots.append(root.index)

        self._rebuild_provenance()
        logger.debug(
            "Mapping store created with %d roots", len(self._roots)
        )

    # -- state ---------------------------------------------------------------

    @property
    def config(self) -> LineageConfig:
        return self._config

    @property
    def current_schema(self) -> Schema:
        return self._current_schema

    @property
    def committed_layer(self) -> int:
        """Highest frontier layer seen by the last commit."""
        return self._committed_layer

    @property
    def step(self) -> int:
        """Number of commits performed so far."""
        return self._step

    @property
    def history(self) -> tuple[EditRecord, ...]:
        return tuple(self._history)

    @property
    def nodes(self) -> tuple[LineageNode, ...]:
        return tuple(self._nodes)

    @property
    def roots(self) -> tuple[LineageNode, ...]:
        return tuple(self._nodes[i] for i in self._roots)

    def node(self, index: int) -> LineageNode:
        return self._nodes[index]

    def is_dropped(self, node: LineageNode) -> bool:
        return node.index in self._dropped

    def replace_current_schema(self, schema: Schema) -> None:
        """Overwrite the current schema with one computed elsewhere."""
        logger.info(
            "Current schema replaced externally: %s -> %s",
            self._current_schema,
            schema,
        )
        self._current_schema = schema

    # -- traversal -----------------------------------------------------------

    def _tails(
        self, root: int, follow: Callable[[LineageNode], bool]
    ) -> list[LineageNode]:
        """Breadth-first walk from *root* through children passing *follow*.

        A node is a tail when none of its children pass the predicate.
        """
        tails: list[LineageNode] = []
        queue = deque([root])
        while queue:
            node = self._nodes[queue.popleft()]
            nexts = [c for c in node.children if follow(self._nodes[c])]
            if nexts:
                queue.extend(nexts)
            else:
                tails.append(node)
        return tails

    def frontier(self) -> list[LineageNode]:
        """Tails reachable through updated edges, in root order."""
        tails: list[LineageNode] = []
        seen: set[int] = set()
        for root in self._roots:
            for node in self._tails(root, _follow_updated):
                if node.index not in seen:
                    seen.add(node.index)
                    tails.append(node)
        return tails

    def live_frontier(self) -> list[LineageNode]:
        """Frontier tails that have not been dropped."""
        return [n for n in self.frontier() if n.index not in self._dropped]

    # -- mutation ------------------------------------------------------------

    def _new_node(
        self, attribute: Attribute, layer: int, parent: Optional[int]
    ) -> LineageNode:
        if parent is not None:
            parent_layer = self._nodes[parent].layer
            if layer != parent_layer + 1:
                raise InvariantViolation(
                    attribute,
                    layer,
                    f"child layer must be parent layer + 1 ({parent_layer + 1})",
                )
        node = LineageNode(
            attribute=attribute,
            layer=layer,
            index=len(self._nodes),
            parent=parent,
        )
        self._nodes.append(node)
        self._by_key[node.key] = node.index
        if parent is not None:
            self._nodes[parent].children.append(node.index)
        return node

    def _find_source(self, source: AttributeRef) -> LineageNode:
        candidates = [
            n for n in self.live_frontier()
            if attribute_matches(n.attribute, source)
        ]
        if not candidates:
            raise AttributeNotInFrontierError(source)
        # max() keeps the first of equal layers, i.e. root order
        return max(candidates, key=lambda n: n.layer)

    def register_edit(
        self,
        source: AttributeRef,
        target: Optional[Attribute] = None,
    ) -> Optional[LineageNode]:
        """Record that *source* became *target* in the current transformation.

        A ``None`` target records a deletion: the source tail gets no child
        and is excluded from every later commit.  Calling this several times
        with one source and different targets records a split.

        Args:
            source: Attribute (or attribute name) on the live frontier.
            target: The derived attribute, or ``None`` for a deletion.

        Returns:
            The derived node, or ``None`` for a deletion.

        Raises:
            AttributeNotInFrontierError: *source* is not a live frontier tail.
            InvariantViolation: *target* already exists at the derived layer
                under a different parent, or another column of that name
                would be committed alongside it.
        """
        try:
            parent = self._find_source(source)
        except AttributeNotInFrontierError as exc:
            logger.warning("Edit rejected: %s", exc)
            if self._config.emit_span_events:
                emit_edit_rejected(source, str(exc))
            raise

        if target is None:
            self._dropped.add(parent.index)
            record = EditRecord(
                step=self._step,
                kind=EditKind.DROP,
                source=parent.attribute,
                layer=parent.layer,
            )
            self._record(record)
            logger.debug(
                "Dropped %s at layer %d", parent.attribute, parent.layer
            )
            return None

        layer = parent.layer + 1
        existing = self._by_key.get((target, layer))
        if existing is not None:
            node = self._nodes[existing]
            if node.parent == parent.index:
                logger.debug(
                    "Duplicate edit ignored: %s -> %s", parent.attribute, target
                )
                return node
            owner = self._nodes[node.parent].attribute  # type: ignore[index]
            raise InvariantViolation(
                target, layer, f"already derived from {owner}"
            )

        # Pending nodes and live tails at this layer share the next schema.
        live = {n.index for n in self.live_frontier()}
        clashing = [
            n for n in self._nodes
            if n.layer == layer
            and n.attribute.name == target.name
            and n.attribute != target
            and (not n.updated or n.index in live)
        ]
        if clashing:
            raise InvariantViolation(
                target,
                layer,
                f"column name already taken by {clashing[0].attribute}",
            )

        node = self._new_node(target, layer, parent=parent.index)
        self._record(
            EditRecord(
                step=self._step,
                kind=EditKind.DERIVE,
                source=parent.attribute,
                target=target,
                layer=layer,
            )
        )
        logger.debug(
            "Derived %s -> %s at layer %d", parent.attribute, target, layer
        )
        return node

    def _record(self, record: EditRecord) -> None:
        self._history.append(record)
        if self._config.emit_span_events:
            emit_edit_registered(record)

    def register_edits(
        self,
        edits: Iterable[tuple[AttributeRef, Optional[Attribute]]],
    ) -> list[Optional[LineageNode]]:
        """Register all edits of one transformation, or none of them.

        If any edit is rejected, the nodes, drops and history entries added
        by the earlier edits of the batch are removed before the error
        propagates.  None of them has been through an update pass yet.
        """
        node_mark = len(self._nodes)
        history_mark = len(self._history)
        dropped_before = set(self._dropped)
        try:
            return [self.register_edit(source, target) for source, target in edits]
        except LineageError:
            self._rollback(node_mark, history_mark, dropped_before)
            raise

    def _rollback(
        self, node_mark: int, history_mark: int, dropped: set[int]
    ) -> None:
        for node in self._nodes[node_mark:]:
            del self._by_key[node.key]
            if node.parent is not None and node.parent < node_mark:
                self._nodes[node.parent].children.remove(node.index)
        discarded = len(self._nodes) - node_mark
        del self._nodes[node_mark:]
        del self._history[history_mark:]
        self._dropped = dropped
        logger.warning(
            "Rejected step rolled back: %d node(s) discarded", discarded
        )

    def run_update_pass(self) -> int:
        """Mark every unupdated leaf of the forest as updated.

        Returns:
            Number of nodes newly marked.
        """
        marked = 0
        for root in self._roots:
            for leaf in self._tails(root, _follow_all):
                if not leaf.updated:
                    leaf.update()
                    marked += 1
        logger.debug("Update pass marked %d node(s)", marked)
        return marked

    def commit_current_schema(self) -> Schema:
        """Rebuild the current schema from the highest-layer frontier tails.

        Tails below the highest layer are lagging tracks and are left out.
        Dropped tails are left out as well, even at the highest layer.

        Raises:
            InvariantViolation: two live tails would put the same column name
                into the schema.
        """
        tails = self.frontier()
        max_layer = max((n.layer for n in tails), default=0)
        live = [
            n for n in tails
            if n.layer == max_layer and n.index not in self._dropped
        ]

        if live or not tails:
            names: set[str] = set()
            for node in live:
                if node.attribute.name in names:
                    raise InvariantViolation(
                        node.attribute,
                        node.layer,
                        "duplicate column name in committed schema",
                    )
                names.add(node.attribute.name)
            schema = Schema(attributes=tuple(n.attribute for n in live))
        elif self._config.empty_commit_policy == EmptyCommitPolicy.RETAIN:
            logger.warning(
                "Every live attribute was dropped at layer %d; "
                "keeping the previous schema",
                max_layer,
            )
            schema = self._current_schema
        else:
            logger.warning(
                "Every live attribute was dropped at layer %d; "
                "committing an empty schema",
                max_layer,
            )
            schema = Schema()

        self._current_schema = schema
        self._committed_layer = max_layer
        self._rebuild_provenance()
        self._step += 1

        logger.info(
            "Committed step %d at layer %d: %s", self._step, max_layer, schema
        )
        if self._config.emit_span_events:
            emit_schema_committed(
                self._step, max_layer, schema, len(self._dropped)
            )
        return schema

    def _rebuild_provenance(self) -> None:
        """Snapshot the query maps from the updated part of the forest."""
        provenance: dict[Attribute, set[Attribute]] = {}
        origins: dict[Attribute, set[Attribute]] = {}
        for node in self._nodes:
            if not node.updated:
                continue
            targets = provenance.setdefault(node.attribute, set())
            for child in node.children:
                if self._nodes[child].updated:
                    targets.add(self._nodes[child].attribute)
            root = node
            while root.parent is not None:
                root = self._nodes[root.parent]
            origins.setdefault(node.attribute, set()).add(root.attribute)

        descendants: dict[Attribute, set[Attribute]] = {}
        for index in self._roots:
            descendants.setdefault(self._nodes[index].attribute, set()).update(
                n.attribute
                for n in self._tails(index, _follow_updated)
                if n.index not in self._dropped
            )

        self._provenance = provenance
        self._origins = origins
        self._descendants = descendants

    # -- queries -------------------------------------------------------------

    def targets_of(self, source: AttributeRef) -> Optional[set[Attribute]]:
        """Attributes directly derived from *source* as of the last commit.

        Returns ``None`` if *source* never appeared in the forest, and an
        empty set if it did but produced nothing.
        """
        found = False
        result: set[Attribute] = set()
        for attribute, targets in self._provenance.items():
            if attribute_matches(attribute, source):
                found = True
                result |= targets
        return result if found else None

    def sources_of(self, target: AttributeRef) -> Optional[set[Attribute]]:
        """Attributes that *target* was directly derived from, or ``None``."""
        result = {
            attribute
            for attribute, targets in self._provenance.items()
            if any(attribute_matches(t, target) for t in targets)
        }
        return result or None

    def origins_of(self, attribute: AttributeRef) -> Optional[set[Attribute]]:
        """Source-schema attributes that *attribute* descends from."""
        result: set[Attribute] = set()
        for candidate, roots in self._origins.items():
            if attribute_matches(candidate, attribute):
                result |= roots
        return result or None

    def descendants_of(
        self, source: AttributeRef
    ) -> Optional[set[Attribute]]:
        """Current-schema attributes that descend from a source attribute.

        Returns ``None`` if *source* is not a source-schema attribute.
        """
        found = False
        current = set(self._current_schema.attributes)
        result: set[Attribute] = set()
        for root, tails in self._descendants.items():
            if attribute_matches(root, source):
                found = True
                result |= tails & current
        return result if found else None
