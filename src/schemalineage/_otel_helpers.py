"""
Shared OTel span event emission helper.

Provides ``add_span_event()``, the single-source implementation used by
the ``otel.py`` emitters.  Centralises the span recording check so each
emitter does not duplicate it.

Usage::

    from schemalineage._otel_helpers import add_span_event

    add_span_event("lineage.schema.committed", {"lineage.layer": 2})
"""

from __future__ import annotations

from opentelemetry import trace as otel_trace


def add_span_event(
    name: str, attributes: dict[str, str | int | float | bool]
) -> None:
    """Add an event to the current OTel span if it is recording.

    Args:
        name: Event name (e.g. ``"lineage.edit.registered"``).
        attributes: Flat dict of span event attributes.
    """
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)
