"""Route conventions — naming rules, method classification and binding.

Public API::

    from prowl.routes import DEFAULT_PREFIXES, match_prefix, classify

    match_prefix("GetDetail", DEFAULT_PREFIXES)   # (HttpMethod.GET, "Detail")

The resolver itself lives in ``prowl.routes.resolver``; most callers go
through ``prowl.build()`` instead.
"""

from prowl.routes.classifier import MethodDescriptor, MethodShape, classify, describe_methods
from prowl.routes.metadata import ApiRoute, MetadataTable
from prowl.routes.middleware import (
    ControllerCapabilities,
    ProvidesBasePath,
    ProvidesMethodMiddlewares,
    ProvidesMiddlewares,
    compose,
    resolve_capabilities,
)
from prowl.routes.naming import (
    DEFAULT_PREFIXES,
    HttpMethod,
    PrefixRule,
    RouteDescriptor,
    is_exported,
    is_public,
    join_path,
    lower_first,
    match_prefix,
    parse_route,
)

__all__ = [
    "DEFAULT_PREFIXES",
    "ApiRoute",
    "ControllerCapabilities",
    "HttpMethod",
    "MetadataTable",
    "MethodDescriptor",
    "MethodShape",
    "PrefixRule",
    "ProvidesBasePath",
    "ProvidesMethodMiddlewares",
    "ProvidesMiddlewares",
    "RouteDescriptor",
    "classify",
    "compose",
    "describe_methods",
    "is_exported",
    "is_public",
    "join_path",
    "lower_first",
    "match_prefix",
    "parse_route",
    "resolve_capabilities",
]
