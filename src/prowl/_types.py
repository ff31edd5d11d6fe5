"""Shared type definitions for prowl."""

from collections.abc import Awaitable, Callable
from typing import Any

# Route URL path (e.g., "/widget/detail/:id")
type RoutePath = str

# Terminal request handler; pass-through factories are annotated with it
type HandlerFunc = Callable[..., Any]

# Continuation passed to a middleware
type Next = Callable[[Any], Awaitable[Any]]

# Cross-cutting handler wrapped around a route: ``async def mw(request, next)``
type Middleware = Callable[[Any, Next], Any]

# Opaque per-request context forwarded to convention callbacks
type Context = Any
