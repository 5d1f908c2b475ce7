"""Bounded, thread-safe store for build and dev-server events.

``Site`` appends ``RoutesCollected`` and ``RouteBuilt``; ``DevServer``
appends ``RequestServed`` and ``ReloadPushed`` and reports :meth:`EventLog.stats`
on ``/__burrow/stats``.
"""

import threading
from collections import Counter, deque
from typing import Any

from burrow.observability.events import BurrowEvent

# Fields naming the file or route an event is about
_PATH_FIELDS: tuple[str, ...] = ("route_path", "trigger_path", "route_dir")


class EventLog:
    """Keeps the newest *max_events* events; older ones fall off."""

    __slots__ = ("_events", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[BurrowEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: BurrowEvent) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        path: str | None = None,
    ) -> list[BurrowEvent]:
        """Events matching *event_type* and containing *path*, newest first."""
        with self._lock:
            events = list(self._events)
        return [
            event for event in reversed(events)
            if (event_type is None or isinstance(event, event_type))
            and (path is None or any(path in getattr(event, name, "") for name in _PATH_FIELDS))
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Event totals for the stats endpoint."""
        with self._lock:
            counts = Counter(type(event).__name__ for event in self._events)
            capacity = self._events.maxlen
        return {
            "total": counts.total(),
            "max_events": capacity,
            "by_type": dict(counts),
        }
