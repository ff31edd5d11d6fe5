"""Export layer — documentation output from route metadata.

Turns the ``MetadataTable`` produced by a build into an OpenAPI
document, as plain dicts or written to YAML.
"""

from prowl.export.openapi import build_openapi, field_schema, model_schema, write_openapi_yaml

__all__ = ["build_openapi", "field_schema", "model_schema", "write_openapi_yaml"]
