"""Event model for build and dev-server observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Resolution events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RoutesCollected:
    """The route directory was resolved into routes.

    Attributes:
        route_dir: Route directory that was scanned.
        route_count: Total routes produced.
        document_count: How many of them are documents.
        duration_ms: Time spent collecting in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    route_dir: str
    route_count: int
    document_count: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Build events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RouteBuilt:
    """One route was compiled and written, or copied.

    Attributes:
        route_path: Output route path.
        kind: ``"document"`` when compiled, ``"static"`` when copied.
        source: Source file path.
        target: Output file path.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    route_path: str
    kind: Literal["document", "static"]
    source: str
    target: str
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Dev-server events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RequestServed:
    """The dev server answered a page request.

    Attributes:
        route_path: Normalized request path.
        status: HTTP status code sent.
        duration_ms: Time spent building and serving.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    route_path: str
    status: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ReloadPushed:
    """A live-reload notification was sent to one browser.

    Attributes:
        client_id: Reload connection that was notified.
        trigger_path: Newest file that triggered the reload.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    client_id: str
    trigger_path: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type BurrowEvent = RoutesCollected | RouteBuilt | RequestServed | ReloadPushed


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
