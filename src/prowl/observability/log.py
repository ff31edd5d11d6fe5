"""Event log — queryable, thread-safe event store.

Stores a bounded ring buffer of ``ResolutionEvent`` objects for
inspection.  Supports querying by event type, controller and path.

Thread Safety:
    All methods are protected by a ``threading.Lock``.  Safe for
    concurrent reads and writes from multiple threads.

"""

import threading
from collections import deque
from collections.abc import Sequence
from typing import Any

from prowl.observability.events import ResolutionEvent


class EventLog:
    """Bounded event store with query support.

    Events are stored in a ring buffer (deque with maxlen).  When the
    buffer is full, the oldest events are discarded automatically.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[ResolutionEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: ResolutionEvent) -> None:
        """Record an event in the log."""
        with self._lock:
            self._events.append(event)

    def append_many(self, events: Sequence[ResolutionEvent]) -> None:
        """Record multiple events at once."""
        with self._lock:
            self._events.extend(events)

    def query(
        self,
        *,
        event_type: type | None = None,
        controller: str | None = None,
        path: str | None = None,
        limit: int = 100,
    ) -> list[ResolutionEvent]:
        """Query events with optional filters.

        Args:
            event_type: Only return events of this type.
            controller: Only return events for this controller class name.
            path: Only return events whose path contains this substring.
            limit: Maximum number of events to return.

        Returns:
            List of matching events, most recent first.

        """
        with self._lock:
            results: list[ResolutionEvent] = []
            for event in reversed(self._events):
                if len(results) >= limit:
                    break

                if event_type is not None and not isinstance(event, event_type):
                    continue

                if controller is not None and event.controller != controller:
                    continue

                if path is not None and path not in getattr(event, "path", ""):
                    continue

                results.append(event)

            return results

    def events(self) -> list[ResolutionEvent]:
        """Return every stored event, oldest first."""
        with self._lock:
            return list(self._events)

    def recent(self, n: int = 20) -> list[ResolutionEvent]:
        """Return the N most recent events."""
        with self._lock:
            items = list(self._events)
        return items[-n:]

    def clear(self) -> int:
        """Clear all events and return the count that was cleared."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Return summary statistics about stored events."""
        with self._lock:
            events = list(self._events)

        type_counts: dict[str, int] = {}
        for event in events:
            name = type(event).__name__
            type_counts[name] = type_counts.get(name, 0) + 1

        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": type_counts,
        }
