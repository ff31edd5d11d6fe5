"""Tests for prowl.observability — events, log and collector."""

from __future__ import annotations

import threading

import pytest

from prowl.observability import (
    ControllerResolved,
    EventLog,
    MethodSkipped,
    ResolutionCollector,
    RouteRegistered,
    now_ns,
)


def _route(controller: str = "Widget", path: str = "/widget/detail") -> RouteRegistered:
    return RouteRegistered(
        controller=controller,
        method_name="GetDetail",
        verb="GET",
        path=path,
        shape="callback",
        handlers=1,
        timestamp_ns=now_ns(),
    )


class TestEvents:
    """Events are frozen and timestamped."""

    def test_frozen(self) -> None:
        event = _route()
        with pytest.raises(AttributeError):
            event.path = "/x"  # type: ignore[misc]

    def test_monotonic(self) -> None:
        first = now_ns()
        assert now_ns() >= first


class TestEventLog:
    """EventLog — bounded, queryable store."""

    def test_append_and_len(self) -> None:
        log = EventLog()
        log.append(_route())
        log.append_many([_route(), _route()])
        assert len(log) == 3

    def test_ring_buffer(self) -> None:
        log = EventLog(max_events=2)
        for path in ("/a", "/b", "/c"):
            log.append(_route(path=path))
        assert [e.path for e in log.events()] == ["/b", "/c"]

    def test_query_filters(self) -> None:
        log = EventLog()
        log.append(_route("Widget", "/widget/detail"))
        log.append(_route("Admin", "/admin/stats"))
        log.append(ControllerResolved("Admin", "/admin", False, 0, now_ns()))

        assert [e.path for e in log.query(controller="Admin")] == ["/admin", "/admin/stats"]
        assert len(log.query(event_type=RouteRegistered)) == 2
        assert [e.controller for e in log.query(path="widget")] == ["Widget"]
        assert len(log.query(limit=1)) == 1

    def test_query_skip_without_path(self) -> None:
        log = EventLog()
        log.append(MethodSkipped("Widget", "helper", "no_prefix", "", now_ns()))
        assert log.query(path="/widget") == []

    def test_recent_and_clear(self) -> None:
        log = EventLog()
        for path in ("/a", "/b", "/c"):
            log.append(_route(path=path))
        assert [e.path for e in log.recent(2)] == ["/b", "/c"]
        assert log.clear() == 3
        assert len(log) == 0

    def test_stats(self) -> None:
        log = EventLog(max_events=50)
        log.append(_route())
        log.append(MethodSkipped("Widget", "helper", "no_prefix", "", now_ns()))
        stats = log.stats()
        assert stats["total"] == 2
        assert stats["max_events"] == 50
        assert stats["by_type"] == {"RouteRegistered": 1, "MethodSkipped": 1}

    def test_concurrent_appends(self) -> None:
        log = EventLog()

        def worker() -> None:
            for _ in range(200):
                log.append(_route())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(log) == 800


class TestResolutionCollector:
    """ResolutionCollector — typed recording helpers."""

    def test_record_helpers(self) -> None:
        collector = ResolutionCollector()
        collector.record_controller("Widget", "/widget", middlewares=2)
        collector.record_route("Widget", "GetDetail", "GET", "/widget/detail", shape="callback")
        collector.record_skip("Widget", "helper", "no_prefix", "no prefix rule matches")

        events = collector.log.events()
        assert isinstance(events[0], ControllerResolved)
        assert events[0].middlewares == 2
        assert not events[0].embedded
        assert [e.method_name for e in collector.routes()] == ["GetDetail"]
        assert [(e.name, e.reason) for e in collector.skipped()] == [("helper", "no_prefix")]

    def test_record_prebuilt(self) -> None:
        collector = ResolutionCollector()
        collector.record(_route())
        assert len(collector.routes()) == 1

    def test_shared_log(self) -> None:
        log = EventLog()
        collector = ResolutionCollector(log)
        collector.record(_route())
        assert collector.log is log
        assert len(log) == 1
