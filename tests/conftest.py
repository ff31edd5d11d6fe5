"""Shared test fixtures for prowl."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest


@dataclass
class FakeRequest:
    """Minimal request object accepted by generated callback handlers."""

    path_params: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    body: Any = None
    seen: list[str] = field(default_factory=list)


@pytest.fixture
def make_request():
    """Factory for ``FakeRequest`` objects."""

    def factory(
        *,
        path_params: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        body: Any = None,
    ) -> FakeRequest:
        return FakeRequest(
            path_params=path_params or {},
            query=query or {},
            body=body,
        )

    return factory


@pytest.fixture
def tracing_middleware():
    """Factory for middlewares that append a label to ``request.seen``."""

    def factory(label: str) -> Any:
        async def middleware(request: Any, next: Any) -> Any:
            request.seen.append(label)
            return await next(request)

        middleware.__name__ = f"mw_{label}"
        return middleware

    return factory
