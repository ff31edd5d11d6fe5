"""Resolution collector — records what the resolver decided.

The resolver calls one method per decision; the collector stamps each
event and stores it in an ``EventLog``.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prowl.observability.events import (
    ControllerResolved,
    MethodSkipped,
    RouteRegistered,
    now_ns,
)
from prowl.observability.log import EventLog

if TYPE_CHECKING:
    from prowl.observability.events import ResolutionEvent


class ResolutionCollector:
    """Event collector for controller resolution.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record(self, event: ResolutionEvent) -> None:
        """Record a pre-built event."""
        self._log.append(event)

    def record_controller(
        self,
        controller: str,
        path: str,
        *,
        embedded: bool = False,
        middlewares: int = 0,
    ) -> None:
        """Record that a controller group was opened."""
        self._log.append(
            ControllerResolved(
                controller=controller,
                path=path,
                embedded=embedded,
                middlewares=middlewares,
                timestamp_ns=now_ns(),
            )
        )

    def record_route(
        self,
        controller: str,
        method_name: str,
        verb: str,
        path: str,
        *,
        shape: str,
        handlers: int = 1,
    ) -> None:
        """Record a registered route."""
        self._log.append(
            RouteRegistered(
                controller=controller,
                method_name=method_name,
                verb=verb,
                path=path,
                shape=shape,
                handlers=handlers,
                timestamp_ns=now_ns(),
            )
        )

    def record_skip(
        self,
        controller: str,
        name: str,
        reason: str,
        detail: str = "",
    ) -> None:
        """Record a method, field or base class that produced no routes."""
        self._log.append(
            MethodSkipped(
                controller=controller,
                name=name,
                reason=reason,  # type: ignore[arg-type]
                detail=detail,
                timestamp_ns=now_ns(),
            )
        )

    def skipped(self) -> list[MethodSkipped]:
        """Return skip events, oldest first."""
        return [e for e in self._log.events() if isinstance(e, MethodSkipped)]

    def routes(self) -> list[RouteRegistered]:
        """Return route events, oldest first."""
        return [e for e in self._log.events() if isinstance(e, RouteRegistered)]
