"""OpenAPI export — turn the route metadata table into an OpenAPI document.

Each ``ApiRoute`` becomes one operation:

- fields tagged ``path`` become path parameters (``:id`` -> ``{id}``);
- fields tagged ``query`` become query parameters;
- for POST, PUT and PATCH the remaining fields form the JSON request body;
- the response model becomes the ``200`` response schema.

Field schemas follow the introspected ``FieldInfo`` tree: sequences map
to arrays, nested models to objects, and recursive references stop with
an ``x-recursive`` marker.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from prowl._errors import ExportError
from prowl.router import to_chirp_path

if TYPE_CHECKING:
    from prowl.routes.metadata import ApiRoute, MetadataTable
    from prowl.schema.introspect import Field, FieldInfo

OPENAPI_VERSION = "3.0.3"

_BODY_METHODS = frozenset({"post", "put", "patch"})

_SCALARS: dict[str, dict[str, str]] = {
    "int": {"type": "integer"},
    "float": {"type": "number"},
    "bool": {"type": "boolean"},
    "str": {"type": "string"},
    "bytes": {"type": "string", "format": "byte"},
    "datetime": {"type": "string", "format": "date-time"},
    "date": {"type": "string", "format": "date"},
    "Decimal": {"type": "number"},
    "UUID": {"type": "string", "format": "uuid"},
}


def build_openapi(
    table: MetadataTable,
    *,
    title: str = "API",
    version: str = "1.0.0",
) -> dict[str, Any]:
    """Build an OpenAPI document (as plain dicts) from *table*."""
    paths: dict[str, dict[str, Any]] = {}
    for route in table.routes():
        operations = paths.setdefault(to_chirp_path(route.path), {})
        operations[route.http_method] = _operation(route)
    return {
        "openapi": OPENAPI_VERSION,
        "info": {"title": title, "version": version},
        "paths": paths,
    }


def write_openapi_yaml(
    table: MetadataTable,
    path: Path,
    *,
    title: str = "API",
    version: str = "1.0.0",
) -> Path:
    """Write the OpenAPI document for *table* to *path* as YAML.

    Raises:
        ExportError: If the file cannot be written.

    """
    import yaml

    document = build_openapi(table, title=title, version=version)
    text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
    except OSError as exc:
        msg = f"Failed to write OpenAPI document to {path}: {exc}"
        raise ExportError(msg) from exc
    return path


def model_schema(model: Field) -> dict[str, Any]:
    """Return the JSON schema of a top-level request/response model."""
    if not model.info:
        return dict(_SCALARS.get(model.name, {"type": "object"}))
    schema = _object_schema(model.info)
    schema["title"] = model.name
    return schema


def field_schema(info: FieldInfo) -> dict[str, Any]:
    """Return the JSON schema of one field."""
    if info.recursive:
        element: dict[str, Any] = {"type": "object", "x-recursive": info.child_type}
    elif info.info:
        element = _object_schema(info.info)
    else:
        element = dict(_SCALARS.get(info.child_type, {"type": "object"}))

    schema = {"type": "array", "items": element} if info.sequence else element
    if info.tags.title and info.tags.title != info.name:
        schema["title"] = info.tags.title
    if info.tags.format:
        schema["format"] = info.tags.format
    if info.tags.description:
        schema["description"] = info.tags.description
    return schema


def _operation(route: ApiRoute) -> dict[str, Any]:
    operation: dict[str, Any] = {"operationId": route.method_name}

    parameters: list[dict[str, Any]] = []
    body_fields: list[FieldInfo] = []
    for info in route.request.info:
        tags = info.tags
        if tags.path_key and tags.path_key != "-":
            parameters.append(_parameter(info, tags.path_key, "path", required=True))
        elif tags.query_key and tags.query_key != "-":
            parameters.append(_parameter(info, tags.query_key, "query", required=False))
        elif tags.json_key != "-":
            body_fields.append(info)

    if parameters:
        operation["parameters"] = parameters
    if body_fields and route.http_method in _BODY_METHODS:
        operation["requestBody"] = {
            "required": True,
            "content": {"application/json": {"schema": _object_schema(tuple(body_fields))}},
        }

    operation["responses"] = {
        "200": {
            "description": "OK",
            "content": {"application/json": {"schema": model_schema(route.response)}},
        },
    }
    return operation


def _parameter(info: FieldInfo, key: str, location: str, *, required: bool) -> dict[str, Any]:
    parameter: dict[str, Any] = {
        "name": key,
        "in": location,
        "required": required,
        "schema": field_schema(info),
    }
    if info.tags.description:
        parameter["description"] = info.tags.description
    return parameter


def _object_schema(infos: tuple[FieldInfo, ...]) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    for info in infos:
        key = info.tags.json_key or info.name
        if key == "-":
            continue
        properties[key] = field_schema(info)
    return {"type": "object", "properties": properties}
