"""Method classifier — decides which controller methods become routes.

Every public method of a controller class is described once, at
registration time, as one of three shapes::

    def Detail(self) -> HandlerFunc: ...                  # PASS_THROUGH
    async def GetDetail(self, ctx: Context,
                        req: DetailReq) -> DetailResp: ... # CALLBACK
    def helper(self, x): ...                               # NOT_ROUTABLE

A pass-through method is a factory: it is called once, with no request
context, and returns the handler that actually serves requests.  A
callback receives the opaque per-request context and a bound request
model, and returns the response model.  Failures are raised.

Classification is total and never raises: anything whose annotations
cannot be resolved is simply not routable.
"""

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, get_type_hints

from prowl._types import Context, HandlerFunc
from prowl.routes.naming import is_public

# Capability hooks looked up by the resolver; never routes themselves
CAPABILITY_METHODS: frozenset[str] = frozenset({
    "base_path",
    "middlewares",
    "method_middlewares",
})

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class MethodShape(Enum):
    """The three shapes a controller method can have."""

    PASS_THROUGH = "pass_through"
    CALLBACK = "callback"
    NOT_ROUTABLE = "not_routable"


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    """Registration-time description of one controller method.

    Attributes:
        name: Method name as declared on the class.
        shape: Classified shape.
        request_type: Request model annotation (callbacks only).
        response_type: Response model annotation (callbacks only).

    """

    name: str
    shape: MethodShape
    request_type: Any = None
    response_type: Any = None

    @property
    def routable(self) -> bool:
        return self.shape is not MethodShape.NOT_ROUTABLE


def classify(
    func: Callable[..., Any],
    *,
    name: str | None = None,
    context_types: Sequence[Any] = (Context,),
) -> MethodDescriptor:
    """Classify an unbound controller method.

    The first parameter (``self``) is ignored.  *name* defaults to the
    function's ``__name__``.

    """
    if name is None:
        name = getattr(func, "__name__", "")
    not_routable = MethodDescriptor(name=name, shape=MethodShape.NOT_ROUTABLE)

    try:
        signature = inspect.signature(func)
        hints = get_type_hints(func)
    except (AttributeError, NameError, TypeError, ValueError):
        return not_routable

    params = list(signature.parameters.values())[1:]
    returns = hints.get("return", inspect.Signature.empty)

    if not params:
        # An async factory would hand back a coroutine, not a handler
        if returns is HandlerFunc and not inspect.iscoroutinefunction(func):
            return MethodDescriptor(name=name, shape=MethodShape.PASS_THROUGH)
        return not_routable

    if len(params) != 2 or any(p.kind not in _POSITIONAL for p in params):
        return not_routable

    ctx_param, req_param = params
    if hints.get(ctx_param.name) not in tuple(context_types):
        return not_routable

    request_type = hints.get(req_param.name)
    if request_type is None:
        return not_routable

    if returns is inspect.Signature.empty or returns is None or returns is type(None):
        return not_routable
    if returns is HandlerFunc:
        return not_routable

    return MethodDescriptor(
        name=name,
        shape=MethodShape.CALLBACK,
        request_type=request_type,
        response_type=returns,
    )


def iter_methods(cls: type) -> dict[str, Callable[..., Any]]:
    """Return every plain function reachable on *cls*, inherited ones included.

    Later classes in the MRO never shadow earlier ones, matching normal
    attribute lookup.

    """
    found: dict[str, Callable[..., Any]] = {}
    seen: set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name in seen:
                continue
            # A non-function attribute still shadows the name
            seen.add(name)
            if inspect.isfunction(value):
                found[name] = value
    return found


def describe_methods(
    cls: type,
    *,
    public_rule: Callable[[str], bool] = is_public,
    context_types: Sequence[Any] = (Context,),
) -> tuple[MethodDescriptor, ...]:
    """Build the descriptor table for *cls*, sorted by method name.

    Non-public names and capability hooks are left out entirely.

    """
    descriptors: list[MethodDescriptor] = []
    for name, func in sorted(iter_methods(cls).items()):
        if not public_rule(name) or name in CAPABILITY_METHODS:
            continue
        descriptors.append(classify(func, name=name, context_types=context_types))
    return tuple(descriptors)
