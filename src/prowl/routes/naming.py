"""Naming rules — method names to HTTP verbs and path segments.

A controller method name is parsed against an ordered prefix table::

    GetDetail     -> GET    /detail
    PostComment   -> POST   /comment
    DeleteInfo    -> DELETE /info

The first prefix that literally starts the method name wins.  The rest of
the name goes through the naming rule (``lower_first`` by default) and
becomes the route's path segment.
"""

import posixpath
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from prowl._types import HandlerFunc


class HttpMethod(StrEnum):
    """HTTP verbs a prefix rule can map to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True, slots=True)
class PrefixRule:
    """One method-name prefix and the verb it selects.

    Attributes:
        prefix: Literal, case-sensitive start of a method name.
        method: HTTP verb for matching methods.

    """

    prefix: str
    method: HttpMethod


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """A resolved route before it is handed to the router.

    Attributes:
        path: Route path relative to the controller group (e.g. ``/detail``).
        verb: HTTP verb.
        handlers: Ordered handler chain; the terminal handler is last.

    """

    path: str
    verb: HttpMethod
    handlers: tuple[HandlerFunc, ...] = ()


DEFAULT_PREFIXES: tuple[PrefixRule, ...] = (
    PrefixRule("Get", HttpMethod.GET),
    PrefixRule("Post", HttpMethod.POST),
    PrefixRule("Put", HttpMethod.PUT),
    PrefixRule("Delete", HttpMethod.DELETE),
    PrefixRule("Patch", HttpMethod.PATCH),
    PrefixRule("Head", HttpMethod.HEAD),
    PrefixRule("Option", HttpMethod.OPTIONS),
)


def lower_first(identifier: str) -> str:
    """Lower-case the first character of *identifier* if it is A-Z.

    ``Widget``   -> ``widget``
    ``UserInfo`` -> ``userInfo``

    """
    if not identifier:
        return ""
    first = identifier[0]
    if "A" <= first <= "Z":
        return first.lower() + identifier[1:]
    return identifier


def is_public(identifier: str) -> bool:
    """Return True for a non-empty identifier without a leading underscore."""
    return bool(identifier) and not identifier.startswith("_")


def is_exported(identifier: str) -> bool:
    """Return True if *identifier* starts with an ASCII upper-case letter.

    The default rule for controller method names: ``GetDetail`` routes,
    ``internalHelper`` never does, whatever its signature.

    """
    return bool(identifier) and "A" <= identifier[0] <= "Z"


def match_prefix(
    method_name: str,
    prefixes: Sequence[PrefixRule],
) -> tuple[HttpMethod, str] | None:
    """Match *method_name* against *prefixes* in declared order.

    Returns the verb of the first rule whose prefix starts the name, with
    the prefix stripped.  Later rules are never consulted once one
    matches, so an empty remainder after the first match yields *None*
    even if a later rule would have left something over.

    """
    for rule in prefixes:
        if method_name.startswith(rule.prefix):
            remainder = method_name[len(rule.prefix):]
            if not remainder:
                return None
            return rule.method, remainder
    return None


def parse_route(
    method_name: str,
    prefixes: Sequence[PrefixRule],
    naming_rule: Callable[[str], str] = lower_first,
) -> RouteDescriptor | None:
    """Derive verb and path segment from a method name.

    Returns *None* when no prefix matches or nothing follows the prefix.

    """
    matched = match_prefix(method_name, prefixes)
    if matched is None:
        return None
    verb, remainder = matched
    segment = naming_rule(remainder)
    if not segment:
        return None
    return RouteDescriptor(path=join_path(segment), verb=verb)


def join_path(*parts: str) -> str:
    """Join URL path pieces into a clean path rooted at ``/``.

    ``join_path("/", "v1/items")``        -> ``/v1/items``
    ``join_path("/widget/", "/detail/")`` -> ``/widget/detail``

    """
    joined = "/".join(part for part in parts if part)
    cleaned = posixpath.normpath("/" + joined)
    # normpath keeps a leading "//" (POSIX allows it)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned
