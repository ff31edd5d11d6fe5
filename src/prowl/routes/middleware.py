"""Middleware composition for controller routes.

Controllers opt into cross-cutting handlers through three optional
capabilities, each a single method::

    class Admin:
        def base_path(self) -> str:
            return "v1/admin"

        def middlewares(self) -> list[Middleware]:
            return [require_login]

        def method_middlewares(self) -> dict[str, list[Middleware]]:
            return {"DeleteUser": [audit]}

Capabilities are probed once per controller and frozen into a
``ControllerCapabilities`` record.  Controller chains attach at group
level; per-method chains sit between the group chain and the terminal
handler::

    [engine] -> [outer controller] -> [inner controller] -> [method] -> handler

A middleware is ``async def mw(request, next)``; it calls
``await next(request)`` to continue down the chain.
"""

import inspect
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from prowl._errors import ConfigError
from prowl._types import HandlerFunc, Middleware


@runtime_checkable
class ProvidesMiddlewares(Protocol):
    """Controller-wide middleware chain."""

    def middlewares(self) -> Sequence[Middleware]: ...


@runtime_checkable
class ProvidesMethodMiddlewares(Protocol):
    """Per-method middleware chains keyed by exact method name."""

    def method_middlewares(self) -> Mapping[str, Sequence[Middleware]]: ...


@runtime_checkable
class ProvidesBasePath(Protocol):
    """Literal base path overriding the name-derived default."""

    def base_path(self) -> str: ...


@dataclass(frozen=True, slots=True)
class ControllerCapabilities:
    """Capabilities of one controller, resolved once.

    Attributes:
        middlewares: Controller-wide chain (attached at group level).
        method_middlewares: Method name -> chain.
        base_path: Explicit base path, or *None* to derive one.

    """

    middlewares: tuple[Middleware, ...] = ()
    method_middlewares: Mapping[str, tuple[Middleware, ...]] = field(default_factory=dict)
    base_path: str | None = None

    def chain_for(self, method_name: str) -> tuple[Middleware, ...]:
        """Return the private chain for *method_name* (empty if none)."""
        return self.method_middlewares.get(method_name, ())


def resolve_capabilities(controller: object) -> ControllerCapabilities:
    """Probe *controller* for its optional capabilities.

    Raises:
        ConfigError: If a capability returns the wrong kind of value.

    """
    middlewares: tuple[Middleware, ...] = ()
    if isinstance(controller, ProvidesMiddlewares):
        middlewares = _as_chain(controller.middlewares(), controller, "middlewares()")

    method_middlewares: dict[str, tuple[Middleware, ...]] = {}
    if isinstance(controller, ProvidesMethodMiddlewares):
        mapping = controller.method_middlewares()
        if not isinstance(mapping, Mapping):
            msg = (
                f"{type(controller).__name__}.method_middlewares() must return a "
                f"mapping, got {type(mapping).__name__}"
            )
            raise ConfigError(msg)
        for name, chain in mapping.items():
            method_middlewares[str(name)] = _as_chain(
                chain, controller, f"method_middlewares()[{name!r}]",
            )

    base_path: str | None = None
    if isinstance(controller, ProvidesBasePath):
        value = controller.base_path()
        if not isinstance(value, str):
            msg = (
                f"{type(controller).__name__}.base_path() must return a str, "
                f"got {type(value).__name__}"
            )
            raise ConfigError(msg)
        base_path = value

    return ControllerCapabilities(
        middlewares=middlewares,
        method_middlewares=method_middlewares,
        base_path=base_path,
    )


def compose(chain: Sequence[Any]) -> HandlerFunc:
    """Fold a handler chain into a single ``async handler(request)``.

    The last element is the terminal handler ``(request) -> result``; every
    element before it is a middleware ``(request, next) -> result``.  Both
    may be sync or async.

    Raises:
        ValueError: On an empty chain.

    """
    if not chain:
        msg = "Cannot compose an empty handler chain"
        raise ValueError(msg)

    *middlewares, terminal = chain

    async def call_terminal(request: Any) -> Any:
        return await _resolve(terminal(request))

    handler = call_terminal
    for middleware in reversed(middlewares):
        handler = _wrap(middleware, handler)
    return handler


def _wrap(middleware: Middleware, next_handler: HandlerFunc) -> HandlerFunc:
    async def call(request: Any) -> Any:
        return await _resolve(middleware(request, next_handler))

    return call


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _as_chain(value: object, controller: object, source: str) -> tuple[Middleware, ...]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        msg = (
            f"{type(controller).__name__}.{source} must return a sequence of "
            f"middlewares, got {type(value).__name__}"
        )
        raise ConfigError(msg)
    for item in value:
        if not callable(item):
            msg = f"{type(controller).__name__}.{source} contains non-callable {item!r}"
            raise ConfigError(msg)
    return tuple(value)
