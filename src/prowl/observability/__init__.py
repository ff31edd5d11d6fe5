"""Resolution diagnostics — why a method did or did not become a route.

The resolver never fails on a method it cannot use; it records a
``MethodSkipped`` event instead.  Events are frozen dataclasses with
monotonic nanosecond timestamps, kept in a bounded ``EventLog``.

Quick Start:
    >>> from prowl.observability import EventLog, ResolutionCollector
    >>> collector = ResolutionCollector(EventLog())
    >>> # Pass collector to prowl.build(...)
    >>> # collector.skipped() lists everything that produced no route

"""

from prowl.observability.collector import ResolutionCollector
from prowl.observability.events import (
    ControllerResolved,
    MethodSkipped,
    ResolutionEvent,
    RouteRegistered,
    now_ns,
)
from prowl.observability.log import EventLog

__all__ = [
    "ControllerResolved",
    "EventLog",
    "MethodSkipped",
    "ResolutionCollector",
    "ResolutionEvent",
    "RouteRegistered",
    "now_ns",
]
