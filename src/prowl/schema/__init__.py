"""Model introspection — field metadata trees for request/response types."""

from prowl.schema.introspect import (
    TAG_KEYS,
    Field,
    FieldInfo,
    Tag,
    describe,
    introspect,
    tags,
    type_name,
    unwrap,
)

__all__ = [
    "TAG_KEYS",
    "Field",
    "FieldInfo",
    "Tag",
    "describe",
    "introspect",
    "tags",
    "type_name",
    "unwrap",
]
