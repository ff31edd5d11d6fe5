"""Engine — build a route table from controller instances.

One synchronous pass at startup::

    result = prowl.build(Widget(), Admin(), config=ProwlConfig(base_path="/api"))
    result.registrations   # (verb, path, handler chain) in registration order
    result.metadata        # ApiRoute records for documentation export

or straight onto a chirp app::

    app = App()
    prowl.mount(app, Widget(), Admin())

The resulting registrations and metadata are never touched again and
are safe to read from any thread.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from prowl.config import DEFAULT_CONFIG, ProwlConfig
from prowl.observability.collector import ResolutionCollector
from prowl.router import ChirpRouter, GroupedRouter, Registration, RouteTable
from prowl.routes.metadata import MetadataTable
from prowl.routes.resolver import ControllerResolver

if TYPE_CHECKING:
    from chirp import App

    from prowl.observability.log import EventLog


@dataclass(frozen=True, slots=True)
class RouteBuild:
    """Everything one build produced.

    Attributes:
        registrations: Routes in registration order.
        metadata: Callback route metadata keyed by path.
        events: Resolution events (skips included).
        router: The router the routes were registered on.
        build_ms: Time spent resolving, in milliseconds.

    """

    registrations: tuple[Registration, ...]
    metadata: MetadataTable
    events: EventLog
    router: GroupedRouter
    build_ms: float = 0.0


def build(
    *controllers: object,
    config: ProwlConfig | None = None,
    router: GroupedRouter | None = None,
    collector: ResolutionCollector | None = None,
) -> RouteBuild:
    """Resolve *controllers* into *router* (a fresh ``RouteTable`` by default).

    Writes the OpenAPI document when ``config.openapi_path`` is set.

    Raises:
        ConfigError: On duplicate routes or a malformed capability.
        ExportError: If the OpenAPI document cannot be written.

    """
    config = config if config is not None else DEFAULT_CONFIG
    router = router if router is not None else RouteTable()
    collector = collector if collector is not None else ResolutionCollector()
    metadata = MetadataTable()

    start = time.perf_counter()
    resolver = ControllerResolver(config, metadata=metadata, collector=collector)
    root = router.group(config.base_path, config.middlewares)
    for controller in controllers:
        resolver.resolve(controller, root)
    build_ms = (time.perf_counter() - start) * 1000

    if config.openapi_path is not None:
        from prowl.export.openapi import write_openapi_yaml

        write_openapi_yaml(
            metadata,
            config.openapi_path,
            title=config.openapi_title,
            version=config.openapi_version,
        )

    return RouteBuild(
        registrations=router.registrations,
        metadata=metadata,
        events=collector.log,
        router=router,
        build_ms=build_ms,
    )


def mount(
    app: App,
    *controllers: object,
    config: ProwlConfig | None = None,
    collector: ResolutionCollector | None = None,
) -> RouteBuild:
    """Resolve *controllers* and register every route on a chirp *app*."""
    return build(
        *controllers,
        config=config,
        router=ChirpRouter(app),
        collector=collector,
    )
