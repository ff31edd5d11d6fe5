"""Route metadata table — the payload for documentation exporters.

One ``ApiRoute`` is recorded per resolved callback route, keyed by its
final path (path parameters included).  Several verbs may share a path,
so each key holds an ordered list::

    /widget/detail/:id  ->  [ApiRoute(get ...), ApiRoute(delete ...)]

Records are frozen and never mutated after insertion.
"""

from collections.abc import Iterator
from dataclasses import asdict, dataclass
from typing import Any

from prowl.schema.introspect import Field


@dataclass(frozen=True, slots=True)
class ApiRoute:
    """Metadata for one callback route.

    Attributes:
        path: Final route path (e.g. ``/widget/detail/:id``).
        http_method: Lower-case verb (e.g. ``get``).
        method_name: Controller method name (e.g. ``GetDetail``).
        request: Request model description.
        response: Response model description.

    """

    path: str
    http_method: str
    method_name: str
    request: Field
    response: Field


class MetadataTable:
    """Insertion-ordered ``path -> [ApiRoute, ...]`` table."""

    __slots__ = ("_routes",)

    def __init__(self) -> None:
        self._routes: dict[str, list[ApiRoute]] = {}

    def add(self, route: ApiRoute) -> None:
        """Append *route* under its path."""
        self._routes.setdefault(route.path, []).append(route)

    def get(self, path: str) -> tuple[ApiRoute, ...]:
        """Return the records for *path* (empty if unknown)."""
        return tuple(self._routes.get(path, ()))

    def paths(self) -> tuple[str, ...]:
        return tuple(self._routes)

    def routes(self) -> tuple[ApiRoute, ...]:
        """Return every record, path by path in insertion order."""
        return tuple(route for routes in self._routes.values() for route in routes)

    def as_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Return plain nested dicts, ready for YAML/JSON serialization."""
        return {
            path: [asdict(route) for route in routes]
            for path, routes in self._routes.items()
        }

    def __iter__(self) -> Iterator[ApiRoute]:
        return iter(self.routes())

    def __len__(self) -> int:
        return sum(len(routes) for routes in self._routes.values())

    def __contains__(self, path: object) -> bool:
        return path in self._routes
