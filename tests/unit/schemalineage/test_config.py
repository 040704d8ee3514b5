"""Tests for schemalineage configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from schemalineage.config import LineageConfig, get_config, reset_config
from schemalineage.mapping.schema import Attribute, Schema
from schemalineage.mapping.store import MappingStore
from schemalineage.types import EmptyCommitPolicy


class TestLineageConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SCHEMALINEAGE_EMPTY_COMMIT_POLICY", raising=False)
        monkeypatch.delenv("SCHEMALINEAGE_EMIT_SPAN_EVENTS", raising=False)
        config = LineageConfig()
        assert config.empty_commit_policy == EmptyCommitPolicy.EMPTY
        assert config.emit_span_events is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SCHEMALINEAGE_EMPTY_COMMIT_POLICY", "retain")
        monkeypatch.setenv("SCHEMALINEAGE_EMIT_SPAN_EVENTS", "false")
        config = LineageConfig()
        assert config.empty_commit_policy == EmptyCommitPolicy.RETAIN
        assert config.emit_span_events is False

    def test_invalid_policy(self):
        with pytest.raises(ValidationError):
            LineageConfig(empty_commit_policy="discard")


class TestGetConfig:
    def test_singleton(self):
        assert get_config() is get_config()

    def test_overrides_replace_singleton(self):
        config = get_config(empty_commit_policy="retain")
        assert config.empty_commit_policy == EmptyCommitPolicy.RETAIN
        assert get_config() is config

    def test_reset(self):
        first = get_config()
        reset_config()
        assert get_config() is not first

    def test_store_uses_global_config(self, monkeypatch):
        monkeypatch.setenv("SCHEMALINEAGE_EMPTY_COMMIT_POLICY", "retain")
        reset_config()
        a = Attribute(name="a")
        store = MappingStore(Schema.of(a))
        assert store.config.empty_commit_policy == EmptyCommitPolicy.RETAIN
        store.register_edit(a, None)
        store.run_update_pass()
        assert store.commit_current_schema() == Schema.of(a)
