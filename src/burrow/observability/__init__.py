"""Observability: build and dev-server events in a bounded log.

Quick Start:
    >>> from burrow.observability import EventLog, RouteBuilt, now_ns
    >>> log = EventLog()
    >>> log.append(RouteBuilt("/index.html", "document", "a", "b", 1.0, now_ns()))
    >>> log.stats()["by_type"]
    {'RouteBuilt': 1}

"""

from burrow.observability.events import (
    BurrowEvent,
    ReloadPushed,
    RequestServed,
    RouteBuilt,
    RoutesCollected,
    now_ns,
)
from burrow.observability.log import EventLog

__all__ = [
    "BurrowEvent",
    "EventLog",
    "ReloadPushed",
    "RequestServed",
    "RouteBuilt",
    "RoutesCollected",
    "now_ns",
]
