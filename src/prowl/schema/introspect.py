"""Structural introspection of request/response models.

Walks a dataclass (optionally wrapped in ``X | None`` or a sequence such as
``list[X]``) and describes every field: declared type name, field name,
recognised metadata tags, child type, and the nested description of that
child.  The result drives path-parameter extraction and documentation
export.

Tags are declared through dataclass field metadata::

    @dataclass
    class WidgetDetailReq:
        id: int = field(metadata=tags(path="id", description="Widget ID"))

Recursive model graphs are cut at the first repeated type: the repeated
field is emitted with ``recursive=True`` and no nested info.
"""

import dataclasses
import types
import typing
from collections.abc import Iterable, Mapping, MutableSequence, MutableSet, Sequence
from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

# Recognised metadata keys, in scan order
TAG_KEYS: tuple[str, ...] = ("query", "path", "json", "title", "format", "description")

_SEQUENCE_ORIGINS: frozenset[object] = frozenset({
    list,
    tuple,
    set,
    frozenset,
    Sequence,
    MutableSequence,
    AbstractSet,
    MutableSet,
    Iterable,
})


@dataclass(frozen=True, slots=True)
class Tag:
    """Recognised annotations of one field.

    Attributes:
        query_key: Query-string parameter name.
        path_key: Path parameter name (``-`` disables it).
        json_key: JSON body key.
        title: Display title; defaults to the field name.
        format: Format hint for documentation (e.g. ``date-time``).
        description: Free-form description.

    """

    query_key: str = ""
    path_key: str = ""
    json_key: str = ""
    title: str = ""
    format: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class FieldInfo:
    """Structural description of one model field.

    Attributes:
        type: Declared type name (e.g. ``list[Item] | None``).
        name: Field name.
        tags: Recognised annotations.
        child_type: Name of the type left after unwrapping optional and
            sequence wrappers.
        info: Nested field descriptions of the child type.
        sequence: True if the declared type is a sequence.
        recursive: True if the child type repeats an enclosing type and
            was not descended into.

    """

    type: str
    name: str
    tags: Tag
    child_type: str
    info: tuple[FieldInfo, ...] = ()
    sequence: bool = False
    recursive: bool = False


@dataclass(frozen=True, slots=True)
class Field:
    """A top-level model: its type name and field descriptions."""

    name: str
    info: tuple[FieldInfo, ...] = ()


def tags(**values: str) -> dict[str, str]:
    """Build dataclass field metadata from recognised tag keys.

    Raises:
        TypeError: On a key outside ``TAG_KEYS``.

    """
    unknown = sorted(set(values) - set(TAG_KEYS))
    if unknown:
        msg = f"Unknown tag key(s): {', '.join(unknown)} (expected one of {TAG_KEYS})"
        raise TypeError(msg)
    return dict(values)


def strip_optional(tp: Any) -> Any:
    """Remove ``X | None``, ``Optional[X]`` and ``Annotated[X, ...]`` wrappers."""
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = get_args(tp)[0]
            continue
        if origin is Union or origin is types.UnionType:
            members = [arg for arg in get_args(tp) if arg is not type(None)]
            if len(members) == 1:
                tp = members[0]
                continue
        return tp


def is_sequence(tp: Any) -> bool:
    """Return True if *tp* (after optional stripping) is a sequence type."""
    tp = strip_optional(tp)
    return get_origin(tp) in _SEQUENCE_ORIGINS and bool(get_args(tp))


def unwrap(tp: Any) -> Any:
    """Strip optional wrapping, then a sequence layer and its element's wrapping.

    ``Item | None``         -> ``Item``
    ``list[Item | None]``   -> ``Item``
    ``tuple[Item, ...]``    -> ``Item``

    """
    tp = strip_optional(tp)
    if is_sequence(tp):
        tp = strip_optional(get_args(tp)[0])
    return tp


def is_model(tp: Any) -> bool:
    """Return True if *tp* is a dataclass type."""
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def type_name(tp: Any) -> str:
    """Return a stable display name for a type annotation."""
    if tp is type(None) or tp is None:
        return "None"
    if tp is Ellipsis:
        return "..."
    if tp is Any:
        return "Any"
    if isinstance(tp, typing.TypeAliasType):
        return tp.__name__
    origin = get_origin(tp)
    if origin is Annotated:
        return type_name(get_args(tp)[0])
    if origin is Union or origin is types.UnionType:
        return " | ".join(type_name(arg) for arg in get_args(tp))
    if origin is not None:
        args = ", ".join(type_name(arg) for arg in get_args(tp))
        base = getattr(origin, "__name__", None) or repr(origin).removeprefix("typing.")
        return f"{base}[{args}]" if args else base
    if isinstance(tp, type):
        return tp.__name__
    if isinstance(tp, str):
        return tp
    return repr(tp).removeprefix("typing.")


def introspect(tp: Any) -> tuple[FieldInfo, ...]:
    """Describe every field of the model behind *tp*.

    Returns an empty tuple when *tp* does not unwrap to a dataclass.

    """
    return _introspect(unwrap(tp), ())


def describe(tp: Any) -> Field:
    """Return the top-level ``Field`` for a request or response model."""
    return Field(name=type_name(unwrap(tp)), info=introspect(tp))


def _introspect(model: Any, stack: tuple[type, ...]) -> tuple[FieldInfo, ...]:
    if not is_model(model):
        return ()

    hints = get_type_hints(model, include_extras=True)
    stack = (*stack, model)
    infos: list[FieldInfo] = []

    for model_field in dataclasses.fields(model):
        declared = hints.get(model_field.name, model_field.type)
        child = unwrap(declared)
        recursive = is_model(child) and child in stack
        infos.append(FieldInfo(
            type=type_name(declared),
            name=model_field.name,
            tags=_read_tags(model_field.name, model_field.metadata),
            child_type=type_name(child),
            info=() if recursive else _introspect(child, stack),
            sequence=is_sequence(declared),
            recursive=recursive,
        ))

    return tuple(infos)


def _read_tags(field_name: str, metadata: Mapping[str, Any]) -> Tag:
    values = {"title": field_name}
    for key in TAG_KEYS:
        if key in metadata:
            values[key] = str(metadata[key])
    return Tag(
        query_key=values.get("query", ""),
        path_key=values.get("path", ""),
        json_key=values.get("json", ""),
        title=values["title"],
        format=values.get("format", ""),
        description=values.get("description", ""),
    )
