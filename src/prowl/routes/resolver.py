"""Controller resolver — walks controllers into router registrations.

Given a controller instance and a parent router group, the resolver:

1. Opens a group at the controller's base path (``base_path()`` if the
   controller provides one, else the naming rule applied to the class
   name) with the controller-wide middlewares attached once.
2. Turns every public method into a route, using the descriptor table
   built once per class (see ``prowl.routes.classifier``):

   - pass-through factories are called and their handler registered;
   - callbacks get a generated handler, one ``:key`` segment per
     request field tagged with a path key, and an ``ApiRoute`` in the
     metadata table.

3. Recurses into sub-controllers:

   - base classes are *embedded* controllers.  Their methods were already
     routed through inheritance, so they only open a nested group and
     recurse further (``skip_methods=True``);
   - class annotations naming another class are *named* controllers,
     resolved from a fresh no-argument instance as a nested scope.

Nothing here raises for a method or field that does not fit the
conventions.  It is skipped, and the decision is recorded on the
``ResolutionCollector``.
"""

import annotationlib
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, ClassVar, get_origin

from prowl._errors import ConfigError
from prowl.config import DEFAULT_CONFIG, ProwlConfig
from prowl.observability.collector import ResolutionCollector
from prowl.routes.binding import make_callback_handler
from prowl.routes.classifier import MethodDescriptor, MethodShape, describe_methods
from prowl.routes.metadata import ApiRoute, MetadataTable
from prowl.routes.middleware import ControllerCapabilities, resolve_capabilities
from prowl.routes.naming import RouteDescriptor, join_path, parse_route
from prowl.schema.introspect import describe, strip_optional

if TYPE_CHECKING:
    from prowl.router import RouterGroup

# Modules whose classes are never sub-controllers
_FOUNDATION_MODULES: frozenset[str] = frozenset({"abc", "builtins", "typing"})


class ControllerResolver:
    """Resolve controller graphs against a router.

    Args:
        config: Naming, prefix and path-parameter settings.
        metadata: Table receiving one ``ApiRoute`` per callback route.
        collector: Receives resolution events.

    """

    __slots__ = ("_collector", "_config", "_descriptors", "_metadata")

    def __init__(
        self,
        config: ProwlConfig = DEFAULT_CONFIG,
        metadata: MetadataTable | None = None,
        collector: ResolutionCollector | None = None,
    ) -> None:
        self._config = config
        self._metadata = metadata if metadata is not None else MetadataTable()
        self._collector = collector if collector is not None else ResolutionCollector()
        self._descriptors: dict[type, tuple[MethodDescriptor, ...]] = {}

    @property
    def metadata(self) -> MetadataTable:
        return self._metadata

    @property
    def collector(self) -> ResolutionCollector:
        return self._collector

    def describe(self, cls: type) -> tuple[MethodDescriptor, ...]:
        """Return the cached descriptor table for *cls*."""
        descriptors = self._descriptors.get(cls)
        if descriptors is None:
            descriptors = describe_methods(
                cls,
                public_rule=self._config.public_rule,
                context_types=self._config.context_types,
            )
            self._descriptors[cls] = descriptors
        return descriptors

    def resolve(
        self,
        controller: object,
        parent: RouterGroup,
        *,
        skip_methods: bool = False,
    ) -> None:
        """Register every route of *controller* under *parent*."""
        self._resolve(controller, parent, skip_methods=skip_methods, stack=())

    def _resolve(
        self,
        controller: object,
        parent: RouterGroup,
        *,
        skip_methods: bool,
        stack: tuple[type, ...],
    ) -> None:
        cls = type(controller)
        name = cls.__name__
        config = self._config

        if not config.public_rule(name):
            self._collector.record_skip(name, name, "not_public", "controller class is not public")
            return

        capabilities = resolve_capabilities(controller)
        base_path = capabilities.base_path
        if base_path is None:
            base_path = config.naming_rule(name)

        group = parent.group(base_path, capabilities.middlewares)
        self._collector.record_controller(
            name,
            group.prefix,
            embedded=skip_methods,
            middlewares=len(capabilities.middlewares),
        )

        if not skip_methods:
            for descriptor in self.describe(cls):
                self._resolve_method(controller, descriptor, group, capabilities)

        stack = (*stack, cls)
        for base in embedded_controllers(cls):
            self._resolve_child(base, group, name, skip_methods=True, stack=stack)

        def unresolved(field_name: str, exc: Exception) -> None:
            self._collector.record_skip(name, field_name, "unresolved", str(exc))

        for field_name, field_type in named_controllers(cls, unresolved):
            if not config.public_rule(field_name):
                self._collector.record_skip(
                    name, field_name, "not_public", "sub-controller field is not public",
                )
                continue
            self._resolve_child(field_type, group, name, skip_methods=False, stack=stack)

    def _resolve_child(
        self,
        cls: type,
        group: RouterGroup,
        owner: str,
        *,
        skip_methods: bool,
        stack: tuple[type, ...],
    ) -> None:
        if cls in stack:
            self._collector.record_skip(
                owner, cls.__name__, "recursive", "controller already on the resolution path",
            )
            return
        try:
            child = cls()
        except TypeError as exc:
            self._collector.record_skip(owner, cls.__name__, "not_instantiable", str(exc))
            return
        self._resolve(child, group, skip_methods=skip_methods, stack=stack)

    def _resolve_method(
        self,
        controller: object,
        descriptor: MethodDescriptor,
        group: RouterGroup,
        capabilities: ControllerCapabilities,
    ) -> None:
        config = self._config
        owner = type(controller).__name__
        name = descriptor.name

        if not config.method_rule(name):
            self._collector.record_skip(
                owner, name, "not_public", "method name is not exported",
            )
            return

        if not descriptor.routable:
            self._collector.record_skip(
                owner, name, "not_routable", "signature is neither a handler factory nor a callback",
            )
            return

        route = parse_route(name, config.prefixes, config.naming_rule)
        if route is None:
            self._collector.record_skip(
                owner, name, "no_prefix", "no prefix rule matches or nothing follows the prefix",
            )
            return

        method = getattr(controller, name)
        path = route.path

        if descriptor.shape is MethodShape.PASS_THROUGH:
            handler = method()
            if not callable(handler):
                msg = f"{owner}.{name}() must return a handler, got {type(handler).__name__}"
                raise ConfigError(msg)
        else:
            request = describe(descriptor.request_type)
            response = describe(descriptor.response_type)
            for info in request.info:
                key = info.tags.path_key
                if key and key != "-":
                    path = join_path(path, config.path_param(key))
            handler = make_callback_handler(method, descriptor.request_type)

        resolved = RouteDescriptor(
            path=path,
            verb=route.verb,
            handlers=(*capabilities.chain_for(name), handler),
        )
        group.handle(resolved.verb, resolved.path, resolved.handlers, name=f"{owner}.{name}")

        full_path = join_path(group.prefix, resolved.path)
        if descriptor.shape is MethodShape.CALLBACK:
            self._metadata.add(ApiRoute(
                path=full_path,
                http_method=resolved.verb.lower(),
                method_name=name,
                request=request,
                response=response,
            ))

        self._collector.record_route(
            owner,
            name,
            str(resolved.verb),
            full_path,
            shape=descriptor.shape.value,
            handlers=len(resolved.handlers),
        )


def embedded_controllers(cls: type) -> Iterator[type]:
    """Yield the direct base classes of *cls* that can be controllers."""
    for base in cls.__bases__:
        if not is_foundation(base):
            yield base


def named_controllers(
    cls: type,
    on_unresolved: Callable[[str, Exception], None] | None = None,
) -> Iterator[tuple[str, type]]:
    """Yield ``(name, class)`` for each own annotation naming a controller class.

    Only annotations declared on *cls* itself are considered; inherited
    ones are reached through the embedded base class.  Each annotation is
    evaluated on its own, so one that cannot be resolved (a name imported
    only under ``TYPE_CHECKING``, say) is reported to *on_unresolved* and
    does not hide its siblings.

    """
    own = annotationlib.get_annotations(cls, format=annotationlib.Format.FORWARDREF)
    for field_name, raw in own.items():
        try:
            declared = _evaluate(raw, cls)
        except (NameError, AttributeError, TypeError, SyntaxError) as exc:
            if on_unresolved is not None:
                on_unresolved(field_name, exc)
            continue
        if get_origin(declared) is ClassVar or declared is ClassVar:
            continue
        field_type = strip_optional(declared)
        if isinstance(field_type, type) and not is_foundation(field_type):
            yield field_name, field_type


def _evaluate(annotation: Any, owner: type) -> Any:
    if isinstance(annotation, str):
        annotation = annotationlib.ForwardRef(annotation, owner=owner)
    if isinstance(annotation, annotationlib.ForwardRef):
        return annotation.evaluate(owner=owner)
    return annotation


def is_foundation(cls: type) -> bool:
    """Return True for classes that are never controllers (object, protocols, ...)."""
    if cls is object or cls.__module__ in _FOUNDATION_MODULES:
        return True
    if cls.__module__ == "prowl" or cls.__module__.startswith("prowl."):
        return True
    return bool(getattr(cls, "_is_protocol", False))
