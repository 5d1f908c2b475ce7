"""Dev server loop: build on request, reload on change.

Nothing is built up front.  Each request resolves to a route and builds
exactly that route:

    static file   copied into the build dir only when missing or stale
    document      compiled and written on every request, served with the
                  live reload script injected
    unknown path  routes are collected again once, then 404

Browsers keep a reload stream open.  Each stream polls the project tree
for the newest modification time and, once it passes the watermark the
connection started from, advances the shared watermark, sends a single
``reload`` and ends.

Output goes to a temporary directory outside the project, so serving a
page never looks like a change to the reload stream.
"""

from __future__ import annotations

import asyncio
import hashlib
import html
import mimetypes
import os
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote

from burrow.banner import print_error
from burrow.observability.events import ReloadPushed, RequestServed, now_ns
from burrow.server.hmr import inject_reload_script

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from burrow.observability.log import EventLog
    from burrow.routing.route import Route
    from burrow.site import Site

# Directory names never scanned for changes
_IGNORED_DIRS: frozenset[str] = frozenset({"__pycache__", "node_modules"})


def dev_build_path(root: Path) -> Path:
    """Per-project scratch build directory under the system temp dir."""
    digest = hashlib.sha1(str(root).encode("utf-8"), usedforsecurity=False).hexdigest()
    return Path(tempfile.gettempdir()) / "burrow" / "serve" / digest


@dataclass(frozen=True, slots=True)
class DevResponse:
    """A fully built response body.

    Attributes:
        status: HTTP status code.
        body: Response bytes.
        content_type: ``Content-Type`` header value.

    """

    status: int
    body: bytes
    content_type: str


@dataclass(frozen=True, slots=True)
class ReloadConnection:
    """One browser's reload stream.

    Attributes:
        client_id: Unique identifier for this connection.
        baseline: Watermark the connection started from; changes newer
            than this trigger the reload.
        cancelled: Set when the stream must stop.

    """

    client_id: str
    baseline: float
    cancelled: threading.Event = field(default_factory=threading.Event, compare=False, hash=False)

    def cancel(self) -> None:
        self.cancelled.set()


class DevServer:
    """On-demand builder and reload notifier for one site.

    Thread-safe: the route cache, watermark and connection map are
    protected by a lock.  Builds run on whichever thread serves the
    request.

    Args:
        site: The site to serve.  Its writer's build path receives output.
        interval: Seconds between change checks per reload connection.
        log: Event log for served requests and reloads (the site's by default).

    """

    def __init__(
        self,
        site: Site,
        *,
        interval: float = 0.5,
        log: EventLog | None = None,
    ) -> None:
        self.site = site
        self.interval = interval
        self.log = log if log is not None else site.log
        self._routes: dict[str, Route] = {}
        self._connections: dict[str, ReloadConnection] = {}
        # Where each static route was last copied to, after BEFORE_COPY listeners
        self._copied: dict[str, Path] = {}
        self._last_mtime = time.time()
        self._lock = threading.Lock()

    # -- routes --

    def start(self) -> list[Route]:
        """Empty the build directory and collect routes."""
        self.site.writer.clear()
        with self._lock:
            self._copied.clear()
        routes = self.refresh()
        # Clearing and loading handlers touch the project tree
        with self._lock:
            self._last_mtime = max(self._last_mtime, time.time())
        return routes

    def refresh(self) -> list[Route]:
        """Collect routes again and replace the route cache."""
        routes = self.site.collect()
        with self._lock:
            self._routes = {route.route_path: route for route in routes}
        return routes

    @staticmethod
    def normalize(path: str) -> str:
        """``"/blog/"`` -> ``"/blog"``, ``"%20x"`` -> ``"/ x"``."""
        path = unquote(path.split("?", 1)[0])
        return "/" + path.strip("/")

    def find(self, path: str) -> Route | None:
        """Route for *path*, trying ``<path>/index.html`` second."""
        index_path = "/" + f"{path}/index.html".strip("/")
        with self._lock:
            return self._routes.get(path) or self._routes.get(index_path)

    @property
    def route_count(self) -> int:
        with self._lock:
            return len(self._routes)

    # -- requests --

    def respond(self, path: str) -> DevResponse:
        """Build whatever *path* needs and return the response.

        Never raises: failures become a 500 response and a console error.

        """
        start = time.perf_counter()
        route_path = self.normalize(path)
        try:
            response = self._respond(route_path)
        except Exception as exc:
            print_error(f"{route_path}: {exc}")
            response = _error_response(route_path, exc)
        self.log.append(RequestServed(
            route_path=route_path,
            status=response.status,
            duration_ms=(time.perf_counter() - start) * 1000,
            timestamp_ns=now_ns(),
        ))
        return response

    def _respond(self, route_path: str) -> DevResponse:
        route = self.find(route_path)
        if route is None:
            # New files since the last collection
            self.refresh()
            route = self.find(route_path)
        if route is None:
            return DevResponse(404, b"Not Found", "text/plain; charset=utf-8")

        if route.is_document:
            output = self.site.writer.write(route.route_path, self.site.compiler.compile(route))
            content_type = _content_type(route.route_path)
            if content_type.startswith("text/html"):
                body = inject_reload_script(output.read_text(encoding="utf-8")).encode("utf-8")
            else:
                body = output.read_bytes()
            return DevResponse(200, body, content_type)

        with self._lock:
            output = self._copied.get(route.route_path)
        if output is None or _is_stale(output, route.source_path):
            output = self.site.writer.copy(route.route_path, route.source_path)
            with self._lock:
                self._copied[route.route_path] = output
        return DevResponse(200, output.read_bytes(), _content_type(route.route_path))

    # -- reload stream --

    @property
    def last_mtime(self) -> float:
        """Shared watermark: newest change any connection has reported."""
        with self._lock:
            return self._last_mtime

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    def connect(self) -> ReloadConnection:
        """Register a reload connection starting from the current watermark."""
        with self._lock:
            conn = ReloadConnection(client_id=uuid.uuid4().hex, baseline=self._last_mtime)
            self._connections[conn.client_id] = conn
        return conn

    def disconnect(self, conn: ReloadConnection) -> None:
        """Cancel and forget a reload connection."""
        conn.cancel()
        with self._lock:
            self._connections.pop(conn.client_id, None)

    def close(self) -> None:
        """Cancel every open reload connection."""
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for conn in connections:
            conn.cancel()

    async def reload_stream(self, conn: ReloadConnection) -> AsyncIterator[str]:
        """Yield ``"reload"`` once a change newer than the baseline appears.

        Catches ``CancelledError`` (client disconnect) and ``GeneratorExit``
        (generator cleanup) so a closed browser tab ends the stream
        quietly.  Leaving the generator always disconnects *conn*.

        """
        try:
            while not conn.cancelled.is_set():
                await asyncio.sleep(self.interval)
                if conn.cancelled.is_set():
                    break
                try:
                    newest, trigger = await asyncio.to_thread(self.newest_change)
                except Exception as exc:
                    print_error(f"Change check failed for client {conn.client_id[:8]}: {exc}")
                    continue
                if newest > conn.baseline:
                    self._advance(newest)
                    self.log.append(ReloadPushed(
                        client_id=conn.client_id,
                        trigger_path=str(trigger),
                        timestamp_ns=now_ns(),
                    ))
                    yield "reload"
                    return
        except (asyncio.CancelledError, GeneratorExit):
            return
        finally:
            self.disconnect(conn)

    def newest_change(self) -> tuple[float, Path | None]:
        """Newest modification time under the project root, and its path.

        Skips hidden directories, caches, and the build directory.  Directory
        mtimes count too, so deletions are noticed.

        """
        root = self.site.config.root
        build = self.site.writer.build_path.resolve()
        newest = 0.0
        newest_path: Path | None = None
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = [
                name for name in dirnames
                if not name.startswith(".")
                and name not in _IGNORED_DIRS
                and (current / name).resolve() != build
            ]
            for name in (*filenames, "."):
                path = current / name
                try:
                    mtime = path.stat().st_mtime
                except FileNotFoundError:
                    # Removed while walking
                    continue
                if mtime > newest:
                    newest = mtime
                    newest_path = current if name == "." else path
        return newest, newest_path

    def _advance(self, mtime: float) -> None:
        with self._lock:
            if mtime > self._last_mtime:
                self._last_mtime = mtime

    def stats(self) -> dict[str, Any]:
        """Route, connection and event counters for the stats endpoint."""
        with self._lock:
            routes = len(self._routes)
            connections = len(self._connections)
            watermark = self._last_mtime
        return {
            "routes": routes,
            "connections": connections,
            "last_mtime": watermark,
            "build_dir": str(self.site.writer.build_path),
            "events": self.log.stats(),
        }


def _is_stale(output: Path, source: Path) -> bool:
    if not output.exists():
        return True
    return output.stat().st_mtime < source.stat().st_mtime


def _content_type(route_path: str) -> str:
    content_type = mimetypes.guess_type(route_path)[0] or "application/octet-stream"
    if content_type.startswith("text/") or content_type in ("application/javascript", "application/json"):
        content_type += "; charset=utf-8"
    return content_type


def _error_response(route_path: str, exc: Exception) -> DevResponse:
    page = (
        "<!DOCTYPE html><html><head><title>Build error</title></head><body>"
        f"<h1>Build error</h1><p>{html.escape(route_path)}</p>"
        f"<pre>{html.escape(type(exc).__name__)}: {html.escape(str(exc))}</pre>"
        "</body></html>"
    )
    # Reload once the error is fixed
    return DevResponse(500, inject_reload_script(page).encode("utf-8"), "text/html; charset=utf-8")
