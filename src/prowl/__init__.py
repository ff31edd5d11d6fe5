"""Prowl — route tables from plain controller objects.

Method names, class structure and dataclass field metadata decide the
routes.  Nothing is registered route by route.

Quick start::

    from dataclasses import dataclass, field

    import prowl
    from prowl import Context, tags

    @dataclass
    class WidgetDetailReq:
        id: int = field(metadata=tags(path="id"))

    @dataclass
    class WidgetDetailResp:
        id: int
        name: str

    class Widget:
        async def GetDetail(self, ctx: Context, req: WidgetDetailReq) -> WidgetDetailResp:
            return WidgetDetailResp(id=req.id, name="demo")

    result = prowl.build(Widget())     # GET /widget/detail/:id

Mount on a chirp app instead::

    prowl.mount(app, Widget())

"""

from prowl._types import Context, HandlerFunc, Middleware
from prowl.schema.introspect import tags

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "Context",
    "HandlerFunc",
    "Middleware",
    "ProwlConfig",
    "__version__",
    "build",
    "mount",
    "tags",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import prowl`` fast while providing a clean top-level API.
    """
    if name == "ProwlConfig":
        from prowl.config import ProwlConfig

        return ProwlConfig

    if name == "build":
        from prowl.engine import build

        return build

    if name == "mount":
        from prowl.engine import mount

        return mount

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
