"""Route resolution: route directory -> flat list of output routes.

Public API::

    from burrow.routing import Route, RouteCollector

    routes = collector.collect(Path("my-site/routes"))
"""

from burrow.routing.collector import ResolutionSession, RouteCollector
from burrow.routing.route import Route

__all__ = ["ResolutionSession", "Route", "RouteCollector"]
