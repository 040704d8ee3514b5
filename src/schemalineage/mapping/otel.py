"""
OTel span event emission helpers for the mapping store.

Usage::

    from schemalineage.mapping.otel import (
        emit_edit_registered,
        emit_edit_rejected,
        emit_schema_committed,
    )

    emit_edit_registered(record)
    emit_schema_committed(step=1, layer=1, schema=schema, dropped=0)
"""

from __future__ import annotations

import logging

from schemalineage._otel_helpers import add_span_event
from schemalineage.mapping.schema import AttributeRef, EditRecord, Schema

logger = logging.getLogger(__name__)


def emit_edit_registered(record: EditRecord) -> None:
    """Emit a span event when an edit is attached to the forest.

    Event name: ``lineage.edit.registered``
    """
    attrs: dict[str, str | int | float | bool] = {
        "lineage.step": record.step,
        "lineage.kind": record.kind.value,
        "lineage.source": str(record.source),
        "lineage.target": str(record.target) if record.target else "",
        "lineage.layer": record.layer,
    }
    add_span_event("lineage.edit.registered", attrs)


def emit_edit_rejected(source: AttributeRef, reason: str) -> None:
    """Emit a span event when an edit names a source outside the frontier.

    Event name: ``lineage.edit.rejected``
    """
    add_span_event(
        "lineage.edit.rejected",
        {"lineage.source": str(source), "lineage.reason": reason},
    )


def emit_schema_committed(
    step: int, layer: int, schema: Schema, dropped: int
) -> None:
    """Emit a span event for a committed current schema.

    Event name: ``lineage.schema.committed``
    """
    attrs: dict[str, str | int | float | bool] = {
        "lineage.step": step,
        "lineage.layer": layer,
        "lineage.attribute_count": len(schema),
        "lineage.attributes": ",".join(schema.names),
        "lineage.dropped_count": dropped,
    }

    logger.debug(
        "Schema committed: step=%d layer=%d attributes=%d",
        step,
        layer,
        len(schema),
    )

    add_span_event("lineage.schema.committed", attrs)
