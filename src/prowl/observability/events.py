"""Resolution events — what the resolver did and why.

The resolver never raises for a method or field it cannot use; it skips
it.  Every decision is recorded here instead, so ``prowl routes`` can
show why a method never became a route.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

"""

import time
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class ControllerResolved:
    """A controller was walked and a router group opened for it.

    Attributes:
        controller: Controller class name.
        path: Full group path (e.g. ``/v1/widget``).
        embedded: True if reached as a base class (methods not enumerated).
        middlewares: Number of controller-wide middlewares attached.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    controller: str
    path: str
    embedded: bool
    middlewares: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RouteRegistered:
    """A route was handed to the router.

    Attributes:
        controller: Controller class name.
        method_name: Controller method name.
        verb: HTTP verb.
        path: Full route path.
        shape: ``pass_through`` or ``callback``.
        handlers: Length of the registered chain, terminal included.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    controller: str
    method_name: str
    verb: str
    path: str
    shape: str
    handlers: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class MethodSkipped:
    """A method, field or base class was not turned into routes.

    Attributes:
        controller: Controller class name.
        name: Method, field or class name that was skipped.
        reason: Why it was skipped.
        detail: Human-readable explanation.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    controller: str
    name: str
    reason: Literal[
        "not_public",
        "not_routable",
        "no_prefix",
        "not_instantiable",
        "recursive",
        "unresolved",
    ]
    detail: str
    timestamp_ns: int


type ResolutionEvent = ControllerResolved | RouteRegistered | MethodSkipped


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
