"""Tests for the top-level package exports."""

from __future__ import annotations

import pytest

import schemalineage
from schemalineage.mapping.facade import SchemaMapping
from schemalineage.mapping.schema import Attribute


def test_lazy_exports():
    assert schemalineage.Attribute is Attribute
    assert schemalineage.SchemaMapping is SchemaMapping
    assert callable(schemalineage.get_config)


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        schemalineage.nope  # noqa: B018


def test_docstring_example():
    mapping = schemalineage.SchemaMapping(
        schemalineage.Schema.of(Attribute(name="a"), Attribute(name="b"))
    )
    mapping.register_edit("a", Attribute(name="a1"))
    mapping.register_edit("b", None)
    mapping.run_update_pass()
    assert mapping.commit_current_schema().names == ["a1"]
    assert mapping.sources_of("a1") == {Attribute(name="a")}
