"""Console output: startup banner, build summaries, and errors.

Everything goes to stderr so build output piped from stdout stays clean.
Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from burrow.config import BurrowConfig
    from burrow.site import BuildResult


# ---------------------------------------------------------------------------
# ANSI helpers, respecting NO_COLOR (https://no-color.org)
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
_BROWN = "\033[38;5;137m" if _COLOR else ""


# ---------------------------------------------------------------------------
# Mode badges
# ---------------------------------------------------------------------------

_MODE_STYLES: dict[str, tuple[str, str]] = {
    "dev": (_GREEN, "dev"),
    "build": (_YELLOW, "build"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: BurrowConfig,
    route_count: int,
    mode: str,
    *,
    document_count: int = 0,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the Burrow startup banner to stderr.

    Args:
        config: Resolved BurrowConfig.
        route_count: Number of routes collected.
        mode: ``"dev"`` or ``"build"``.
        document_count: How many of the routes are documents.
        load_ms: Time spent collecting routes in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from burrow import __version__

    header = f"  {_BROWN}{_BOLD}(\\_/){_RESET}  Burrow {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}"

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {_plural(route_count, 'route')} collected{timing}")
    if document_count:
        lines.append(f"  {_DIM}├─{_RESET} {_plural(document_count, 'document')}")
    lines.append(f"  {_DIM}├─{_RESET} routes: {_DIM}{config.routes_path}{_RESET}")

    if mode == "build":
        lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.build_path}{_RESET}")
    else:
        lines.append(
            f"  {_DIM}└─{_RESET} {_GREEN}live reload{_RESET} "
            f"on {_DIM}/__burrow/broadcast{_RESET}"
        )
        url = f"http://{config.host}:{config.port}"
        lines.append("")
        lines.append(f"  {_clickable_url(url)}")
        lines.append("")
        lines.append(f"  {_DIM}Building pages on request...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)


def print_step(message: str) -> None:
    """Print a single dimmed progress line."""
    print(f"  {_DIM}·{_RESET} {message}", file=sys.stderr)


def print_built(result: BuildResult) -> None:
    """Print the summary line of a finished build."""
    print(
        f"  {_GREEN}✓{_RESET} built {_plural(result.documents, 'document')} "
        f"and {_plural(result.assets, 'asset')} "
        f"{_DIM}in {result.duration_ms:.0f}ms -> {result.output_dir}{_RESET}",
        file=sys.stderr,
    )


def print_error(message: str) -> None:
    """Print an error line in red."""
    print(f"  {_RED}✗{_RESET} {message}", file=sys.stderr)
