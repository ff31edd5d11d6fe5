"""Route listing — human-readable build output on stderr.

Prints every registered route with its handler name, followed by the
methods the resolver skipped and why.  Detects ``NO_COLOR`` / ``TERM``
for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

from prowl.observability.events import MethodSkipped

if TYPE_CHECKING:
    from prowl.engine import RouteBuild


# ---------------------------------------------------------------------------
# ANSI helpers — respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""
_MAGENTA = "\033[35m" if _COLOR else ""


# ---------------------------------------------------------------------------
# Verb badges
# ---------------------------------------------------------------------------

_VERB_COLORS: dict[str, str] = {
    "GET": _GREEN,
    "POST": _CYAN,
    "PUT": _YELLOW,
    "PATCH": _YELLOW,
    "DELETE": _RED,
}


def _verb_badge(verb: str) -> str:
    """Return a fixed-width, colored verb."""
    color = _VERB_COLORS.get(verb, _MAGENTA)
    return f"{color}{verb:<7}{_RESET}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def format_routes(result: RouteBuild, *, show_skipped: bool = True) -> str:
    """Return the route listing for *result* as text."""
    from prowl import __version__

    count = len(result.registrations)
    routes_label = "route" if count == 1 else "routes"
    timing = f" {_DIM}in {result.build_ms:.1f}ms{_RESET}" if result.build_ms > 0 else ""

    lines: list[str] = [
        "",
        f"  {_BOLD}prowl{_RESET} {_DIM}v{__version__}{_RESET}  {count} {routes_label}{timing}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    for registration in result.registrations:
        extra = len(registration.middlewares)
        chain = f" {_DIM}(+{extra} middleware){_RESET}" if extra else ""
        lines.append(
            f"  {_verb_badge(str(registration.verb))} {registration.path}"
            f"  {_DIM}{registration.name}{_RESET}{chain}"
        )

    if show_skipped:
        skipped = [e for e in result.events.events() if isinstance(e, MethodSkipped)]
        if skipped:
            lines.append("")
            lines.append(f"  {_DIM}skipped:{_RESET}")
            lines.extend(
                f"  {_YELLOW}!{_RESET} {event.controller}.{event.name} "
                f"{_DIM}[{event.reason}] {event.detail}{_RESET}"
                for event in skipped
            )

    lines.append("")
    return "\n".join(lines)


def print_routes(
    result: RouteBuild,
    *,
    show_skipped: bool = True,
    file: TextIO | None = None,
) -> None:
    """Print the route listing for *result* to stderr (or *file*)."""
    print(format_routes(result, show_skipped=show_skipped), file=file or sys.stderr)
