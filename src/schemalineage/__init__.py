"""
schemalineage - Column lineage across a sequence of schema transformations.

Records, for every step of a data preparation pipeline, which columns are
live, which original column each one came from, and what the current
schema looks like.  A decision engine can then ask which columns a source
column turned into, or which columns a target column came from.

Example usage:
    from schemalineage import Attribute, Schema, SchemaMapping

    mapping = SchemaMapping(Schema.of(Attribute(name="a"), Attribute(name="b")))
    mapping.register_edit("a", Attribute(name="a1"))
    mapping.register_edit("b", None)          # b is dropped
    mapping.run_update_pass()
    mapping.commit_current_schema()           # [a1:string]
    mapping.sources_of("a1")                  # {Attribute(name='a', ...)}
"""

__version__ = "0.1.0"
__all__ = [
    "Attribute",
    "Schema",
    "SchemaMapping",
    "MappingStore",
    "get_config",
    "__version__",
]


# Lazy imports to avoid loading pydantic models at import time
def __getattr__(name: str):
    if name == "Attribute":
        from schemalineage.mapping.schema import Attribute
        return Attribute
    if name == "Schema":
        from schemalineage.mapping.schema import Schema
        return Schema
    if name == "SchemaMapping":
        from schemalineage.mapping.facade import SchemaMapping
        return SchemaMapping
    if name == "MappingStore":
        from schemalineage.mapping.store import MappingStore
        return MappingStore
    if name == "get_config":
        from schemalineage.config import get_config
        return get_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
