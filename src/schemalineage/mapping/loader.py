"""
Reads transformation plans from YAML.

Parsed plans are cached per file.  The cache key includes the file's
modification time, so editing a plan on disk makes the next ``load`` read
it again.

Usage::

    from schemalineage.mapping.loader import PlanLoader

    loader = PlanLoader()
    plan = loader.load(Path("cleanup.plan.yaml"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, ClassVar

import yaml

from schemalineage.mapping.plan import MappingPlan

logger = logging.getLogger(__name__)


def _as_mapping(raw: Any, origin: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise TypeError(
            f"Plan root must be a mapping in {origin}, got {type(raw).__name__}"
        )
    return raw


class PlanLoader:
    """Parses plan files into ``MappingPlan`` models."""

    _cache: ClassVar[dict[tuple[str, int], MappingPlan]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        cls._cache.clear()

    def load(self, path: Path) -> MappingPlan:
        """Parse and validate the plan stored at *path*.

        Raises:
            FileNotFoundError: *path* does not exist.
            TypeError: the document root is not a mapping.
            yaml.YAMLError: the file is not valid YAML.
            pydantic.ValidationError: the document is not a valid plan.
        """
        if not path.is_file():
            raise FileNotFoundError(f"Plan file not found: {path}")

        resolved = path.resolve()
        key = (str(resolved), resolved.stat().st_mtime_ns)
        plan = self._cache.get(key)
        if plan is not None:
            logger.debug("Plan cache hit: %s", resolved)
            return plan

        raw = yaml.safe_load(resolved.read_text(encoding="utf-8"))
        plan = MappingPlan.model_validate(_as_mapping(raw, str(path)))

        # Entries for older versions of the same file are dropped.
        for stale in [k for k in self._cache if k[0] == key[0]]:
            del self._cache[stale]
        self._cache[key] = plan

        logger.debug(
            "Loaded plan %s from %s: %d source attribute(s), %d step(s)",
            plan.plan_id,
            resolved,
            len(plan.source),
            len(plan.steps),
        )
        return plan

    def load_from_string(self, yaml_str: str) -> MappingPlan:
        """Parse and validate a plan given as YAML text.  Never cached."""
        raw = yaml.safe_load(yaml_str)
        return MappingPlan.model_validate(_as_mapping(raw, "<string>"))
