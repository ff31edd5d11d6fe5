"""Router abstraction — where resolved routes end up.

The resolver only needs a hierarchical group interface::

    group = router.group("/", middlewares)
    sub = group.group("widget", controller_middlewares)
    sub.handle(HttpMethod.GET, "/detail/:id", [method_mw, handler])

``GroupedRouter`` implements the group bookkeeping (path prefixes and
middleware scopes) and records every ``Registration`` in order.
Subclasses decide what a registration means:

- ``RouteTable``: keeps routes in memory (tests, the CLI, exporters).
- ``ChirpRouter``: mounts each route on a chirp ``App``.

A second registration of the same verb and path is a startup error.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from prowl._errors import BindError, ConfigError
from prowl.routes.middleware import compose
from prowl.routes.naming import HttpMethod, join_path

if TYPE_CHECKING:
    from chirp import App, Request

    from prowl._types import HandlerFunc, Middleware

_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


class RouterGroup(Protocol):
    """A path prefix plus the middlewares attached at that scope."""

    @property
    def prefix(self) -> str: ...

    def group(self, path: str, middlewares: Sequence[Middleware] = ()) -> RouterGroup: ...

    def handle(
        self,
        verb: HttpMethod,
        path: str,
        handlers: Sequence[HandlerFunc],
        *,
        name: str = "",
    ) -> None: ...


@dataclass(frozen=True, slots=True)
class Registration:
    """One route handed to the router.

    Attributes:
        verb: HTTP verb.
        path: Full path from the root (e.g. ``/widget/detail/:id``).
        handlers: Complete chain; group middlewares first, terminal last.
        name: Route name (``Controller.Method``).

    """

    verb: HttpMethod
    path: str
    handlers: tuple[Any, ...]
    name: str = ""

    @property
    def handler(self) -> Any:
        """The terminal handler."""
        return self.handlers[-1]

    @property
    def middlewares(self) -> tuple[Any, ...]:
        return self.handlers[:-1]


class Group:
    """Concrete ``RouterGroup`` bound to a ``GroupedRouter``."""

    __slots__ = ("_middlewares", "_prefix", "_router")

    def __init__(
        self,
        router: GroupedRouter,
        prefix: str,
        middlewares: tuple[Middleware, ...] = (),
    ) -> None:
        self._router = router
        self._prefix = prefix
        self._middlewares = middlewares

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def middlewares(self) -> tuple[Middleware, ...]:
        return self._middlewares

    def group(self, path: str, middlewares: Sequence[Middleware] = ()) -> Group:
        return Group(
            self._router,
            join_path(self._prefix, path),
            (*self._middlewares, *middlewares),
        )

    def handle(
        self,
        verb: HttpMethod,
        path: str,
        handlers: Sequence[HandlerFunc],
        *,
        name: str = "",
    ) -> None:
        self._router.register(Registration(
            verb=verb,
            path=join_path(self._prefix, path),
            handlers=(*self._middlewares, *handlers),
            name=name,
        ))


class GroupedRouter:
    """Base router: group scopes plus an ordered registration list."""

    def __init__(self) -> None:
        self._registrations: list[Registration] = []
        self._seen: dict[tuple[HttpMethod, str], Registration] = {}

    @property
    def registrations(self) -> tuple[Registration, ...]:
        return tuple(self._registrations)

    def group(self, path: str = "/", middlewares: Sequence[Middleware] = ()) -> Group:
        """Open a root scope at *path*."""
        return Group(self, join_path(path), tuple(middlewares))

    def register(self, registration: Registration) -> None:
        """Record *registration*.

        Raises:
            ConfigError: If the verb and path are already registered.

        """
        key = (registration.verb, registration.path)
        existing = self._seen.get(key)
        if existing is not None:
            msg = (
                f"Duplicate route {registration.verb} {registration.path}: "
                f"{existing.name or 'unnamed'} and {registration.name or 'unnamed'}"
            )
            raise ConfigError(msg)
        self._seen[key] = registration
        self._registrations.append(registration)
        self._on_register(registration)

    def _on_register(self, registration: Registration) -> None:
        """Hook for subclasses; called once per accepted registration."""

    def __len__(self) -> int:
        return len(self._registrations)


class RouteTable(GroupedRouter):
    """In-memory router.  Lookups only; dispatch belongs to a real server."""

    def lookup(self, verb: HttpMethod | str, path: str) -> Registration | None:
        """Return the registration for an exact *verb* and registered *path*."""
        return self._seen.get((HttpMethod(str(verb).upper()), path))

    def match(self, verb: HttpMethod | str, url: str) -> tuple[Registration, dict[str, str]] | None:
        """Match a concrete *url* against registered patterns.

        ``/widget/detail/7`` matches ``/widget/detail/:id`` with
        ``{"id": "7"}``.  Exact paths win over parameterized ones.

        """
        method = HttpMethod(str(verb).upper())
        exact = self._seen.get((method, url))
        if exact is not None:
            return exact, {}
        for registration in self._registrations:
            if registration.verb is not method:
                continue
            params = match_path(registration.path, url)
            if params is not None:
                return registration, params
        return None


class ChirpRouter(GroupedRouter):
    """Mount resolved routes on a chirp ``App``.

    ``:name`` placeholders become chirp's ``{name}`` syntax.  Handler
    results are returned as JSON responses; ``BindError`` becomes a 400.

    """

    def __init__(self, app: App) -> None:
        super().__init__()
        self._app = app

    def _on_register(self, registration: Registration) -> None:
        chain = compose(registration.handlers)

        async def endpoint(request: Request) -> Any:
            from chirp.http.response import Response

            try:
                payload = await chain(request)
            except BindError as exc:
                return Response(
                    body=json.dumps({"error": str(exc)}),
                    status=400,
                    content_type="application/json",
                )
            if isinstance(payload, Response):
                return payload
            return Response(
                body=json.dumps(payload),
                status=200,
                content_type="application/json",
            )

        endpoint.__name__ = getattr(registration.handler, "__name__", "endpoint")
        endpoint.__qualname__ = registration.name or endpoint.__name__

        self._app.route(
            to_chirp_path(registration.path),
            methods=[str(registration.verb)],
            name=registration.name or None,
        )(endpoint)


def to_chirp_path(path: str) -> str:
    """Rewrite ``/items/:id`` to ``/items/{id}``."""
    return _PARAM_RE.sub(r"{\1}", path)


def match_path(pattern: str, url: str) -> dict[str, str] | None:
    """Match *url* against a ``:param`` *pattern*; return the captured params."""
    pattern_parts = pattern.strip("/").split("/")
    url_parts = url.strip("/").split("/")
    if len(pattern_parts) != len(url_parts):
        return None
    params: dict[str, str] = {}
    for expected, actual in zip(pattern_parts, url_parts, strict=True):
        if expected.startswith(":"):
            if not actual:
                return None
            params[expected[1:]] = actual
        elif expected != actual:
            return None
    return params
