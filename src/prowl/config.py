"""Prowl configuration.

ProwlConfig is the central configuration object, frozen after creation.
"""

from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from prowl._types import Context, Middleware
from prowl.routes.naming import DEFAULT_PREFIXES, PrefixRule, is_exported, is_public, lower_first


@dataclass(frozen=True, slots=True)
class ProwlConfig:
    """Configuration for route resolution.

    Attributes:
        prefixes: Ordered method-name prefix table; first match wins.
        naming_rule: Identifier -> path segment (controller names and the
            remainder of method names).
        public_rule: Decides whether a field or class name is public, and
            which methods are looked at at all.
        method_rule: Decides whether a method name may become a route.
            Snake-case controllers pass ``is_public`` here.
        base_path: Root path every controller is mounted under.
        middlewares: Engine-wide chain, outermost on every route.
        context_types: Annotations accepted for a callback's context parameter.
        path_param_format: Format of a path parameter segment; ``{}`` is
            replaced by the path key.
        openapi_path: Write an OpenAPI YAML document here after building.
        openapi_title: ``info.title`` of the OpenAPI document.
        openapi_version: ``info.version`` of the OpenAPI document.

    """

    prefixes: tuple[PrefixRule, ...] = DEFAULT_PREFIXES
    naming_rule: Callable[[str], str] = lower_first
    public_rule: Callable[[str], bool] = is_public
    method_rule: Callable[[str], bool] = is_exported
    base_path: str = "/"
    middlewares: tuple[Middleware, ...] = ()
    context_types: tuple[Any, ...] = (Context,)
    path_param_format: str = ":{}"
    openapi_path: Path | None = None
    openapi_title: str = "API"
    openapi_version: str = "1.0.0"

    def __post_init__(self) -> None:
        # Accept lists from config files and callers
        object.__setattr__(self, "prefixes", tuple(self.prefixes))
        object.__setattr__(self, "middlewares", tuple(self.middlewares))
        object.__setattr__(self, "context_types", tuple(self.context_types))
        if self.openapi_path is not None and not isinstance(self.openapi_path, Path):
            object.__setattr__(self, "openapi_path", Path(str(self.openapi_path)))

    def with_prefixes(self, *rules: PrefixRule) -> ProwlConfig:
        """Return a copy with *rules* appended after the current table."""
        return replace(self, prefixes=(*self.prefixes, *rules))

    def path_param(self, key: str) -> str:
        """Render the path segment for parameter *key* (e.g. ``:id``)."""
        return self.path_param_format.format(key)


DEFAULT_CONFIG = ProwlConfig()

# Snake-case controllers: ``def get_detail(...)`` -> GET /detail
# (use together with ``method_rule=is_public``)
SNAKE_CASE_PREFIXES: tuple[PrefixRule, ...] = tuple(
    PrefixRule(rule.prefix.lower() + "_", rule.method) for rule in DEFAULT_PREFIXES
)

