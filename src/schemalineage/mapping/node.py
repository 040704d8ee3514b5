"""
Lineage node: one version of one attribute at one transformation layer.

Nodes live in the mapping store's arena and refer to each other by arena
index, so ``parent`` and ``children`` hold integers rather than nodes.
Two nodes are equal when they carry the same attribute at the same layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from schemalineage.mapping.schema import Attribute


@dataclass(eq=False)
class LineageNode:
    """A vertex of the lineage forest.

    ``updated`` only ever goes from ``False`` to ``True``.  Roots are
    created updated; derived nodes wait for the next update pass.
    """

    attribute: Attribute
    layer: int
    index: int
    parent: Optional[int] = None
    children: list[int] = field(default_factory=list)
    updated: bool = False

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def key(self) -> tuple[Attribute, int]:
        return (self.attribute, self.layer)

    def update(self) -> None:
        self.updated = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineageNode):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return {
            "attribute": self.attribute.model_dump(),
            "layer": self.layer,
            "parent": self.parent,
            "children": list(self.children),
            "updated": self.updated,
        }
