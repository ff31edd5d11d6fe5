"""Request binding for convention callbacks.

The generated terminal handler of a callback route binds incoming values
into the request model, calls the controller method and encodes the
response model::

    @dataclass
    class ItemUpdateReq:
        id: int = field(metadata=tags(path="id"))
        page: int = field(default=1, metadata=tags(query="page"))
        name: str = field(default="", metadata=tags(json="name"))

Each field is looked up in the path parameters (``path`` tag), then the
query string (``query`` tag), then the JSON body (``json`` tag, falling
back to the field name).  Scalars are coerced to the declared type.

The request object only needs to look like this (chirp's does)::

    request.path_params  # Mapping[str, str]
    request.query        # Mapping[str, str]
    await request.json() # decoded body (or a ``body`` bytes attribute)
"""

import dataclasses
import inspect
import json
from collections.abc import Callable, Mapping
from typing import Any, get_args, get_origin, get_type_hints

from prowl._errors import BindError
from prowl._types import HandlerFunc
from prowl.schema.introspect import is_model, is_sequence, strip_optional

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def make_callback_handler(
    method: Callable[..., Any],
    request_type: Any,
) -> HandlerFunc:
    """Build the terminal handler for a bound callback *method*.

    The request object is forwarded untouched as the method's context
    argument.  Exceptions raised by the method propagate unchanged.

    """
    model = strip_optional(request_type)

    async def handler(request: Any) -> Any:
        bound = await bind_request(request, model)
        result = method(request, bound)
        if inspect.isawaitable(result):
            result = await result
        return encode(result)

    handler.__name__ = getattr(method, "__name__", "handler")
    handler.__qualname__ = getattr(method, "__qualname__", handler.__name__)
    return handler


async def bind_request(request: Any, model: Any) -> Any:
    """Build an instance of *model* from *request*.

    Raises:
        BindError: A required value is missing or cannot be coerced.

    """
    if not is_model(model):
        if model is None or model is type(None):
            return None
        body = await read_body(request)
        return coerce(body, model, "body")

    path_params = getattr(request, "path_params", None) or {}
    query = getattr(request, "query", None) or {}
    body: Mapping[str, Any] | None = None
    hints = get_type_hints(model)

    values: dict[str, Any] = {}
    for model_field in dataclasses.fields(model):
        if not model_field.init:
            continue
        metadata = model_field.metadata
        path_key = str(metadata.get("path", ""))
        query_key = str(metadata.get("query", ""))
        json_key = str(metadata.get("json", "")) or model_field.name

        if path_key and path_key != "-" and path_key in path_params:
            raw, source = path_params[path_key], f"path parameter {path_key!r}"
        elif query_key and query_key != "-" and query_key in query:
            raw, source = query[query_key], f"query parameter {query_key!r}"
        else:
            if body is None:
                body = await read_body(request)
            if json_key == "-" or not isinstance(body, Mapping) or json_key not in body:
                if not _has_default(model_field):
                    msg = f"Missing required value for {model.__name__}.{model_field.name}"
                    raise BindError(msg)
                continue
            raw, source = body[json_key], f"body key {json_key!r}"

        declared = hints.get(model_field.name, model_field.type)
        values[model_field.name] = coerce(raw, declared, source)

    return model(**values)


async def read_body(request: Any) -> Any:
    """Return the decoded JSON body of *request*, or ``{}`` when empty."""
    reader = getattr(request, "json", None)
    if callable(reader):
        try:
            data = reader()
            if inspect.isawaitable(data):
                data = await data
        except ValueError as exc:
            msg = f"Request body is not valid JSON: {exc}"
            raise BindError(msg) from exc
        return {} if data is None else data

    raw = getattr(request, "body", None)
    if inspect.isawaitable(raw):
        raw = await raw
    if not raw:
        return {}
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Request body is not valid JSON: {exc}"
        raise BindError(msg) from exc


def coerce(value: Any, tp: Any, source: str = "value") -> Any:
    """Convert a raw request *value* to the annotated type *tp*.

    Raises:
        BindError: If the value cannot be converted.

    """
    optional = _is_optional(tp)
    tp = strip_optional(tp)

    if value is None:
        if optional or tp is Any:
            return None
        msg = f"Null is not allowed for {source}"
        raise BindError(msg)

    try:
        if tp is bool:
            return _to_bool(value)
        if tp in (int, float):
            if isinstance(value, bool):
                raise ValueError(value)
            if tp is int and isinstance(value, float) and not value.is_integer():
                raise ValueError(value)
            return tp(value)
        if tp is str:
            return value if isinstance(value, str) else str(value)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid {tp.__name__} for {source}: {value!r}"
        raise BindError(msg) from exc

    if is_model(tp):
        if not isinstance(value, Mapping):
            msg = f"Expected an object for {source}, got {type(value).__name__}"
            raise BindError(msg)
        return _build_nested(tp, value, source)

    if is_sequence(tp):
        element = get_args(tp)[0]
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            value = [value]
        items = [coerce(item, element, source) for item in value]
        origin = get_origin(tp)
        if origin in (tuple, set, frozenset):
            return origin(items)
        return items

    return value


def encode(value: Any) -> Any:
    """Turn a response model into plain JSON-ready data.

    Dataclass fields are keyed by their ``json`` tag (field name when
    absent) and dropped when tagged ``-``.

    """
    if is_model(type(value)):
        encoded: dict[str, Any] = {}
        for model_field in dataclasses.fields(value):
            key = str(model_field.metadata.get("json", "")) or model_field.name
            if key == "-":
                continue
            encoded[key] = encode(getattr(value, model_field.name))
        return encoded
    if isinstance(value, Mapping):
        return {str(k): encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [encode(item) for item in value]
    return value


def _build_nested(model: Any, data: Mapping[str, Any], source: str) -> Any:
    values: dict[str, Any] = {}
    hints = get_type_hints(model)
    for model_field in dataclasses.fields(model):
        if not model_field.init:
            continue
        key = str(model_field.metadata.get("json", "")) or model_field.name
        if key == "-" or key not in data:
            if not _has_default(model_field):
                msg = f"Missing {model.__name__}.{model_field.name} in {source}"
                raise BindError(msg)
            continue
        values[model_field.name] = coerce(
            data[key], hints.get(model_field.name, model_field.type), f"{source}.{key}",
        )
    return model(**values)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(value)


def _has_default(model_field: dataclasses.Field[Any]) -> bool:
    return (
        model_field.default is not dataclasses.MISSING
        or model_field.default_factory is not dataclasses.MISSING
    )


def _is_optional(tp: Any) -> bool:
    return type(None) in get_args(tp)

