"""HTTP wiring for the dev server on chirp, served by pounce.

    GET /__burrow/broadcast   reload stream (text/event-stream), else 302 to /
    GET /__burrow/stats       route, connection and event counters as JSON
    GET /anything-else        built on demand by DevServer.respond()
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

from burrow.server.hmr import BROADCAST_PATH, RELOAD_EVENT

if TYPE_CHECKING:
    from chirp import App
    from chirp.http.request import Request
    from chirp.middleware.protocol import AnyResponse, Next

    from burrow.server.devserver import DevServer

STATS_PATH = "/__burrow/stats"

# Paths owned by the server itself, never looked up as routes
_RESERVED_PREFIX = "/__burrow/"


def create_app(server: DevServer) -> App:
    """Build the chirp App serving *server*."""
    from chirp import App, EventStream, Redirect, Response, SSEEvent

    app = App()

    async def serve_route(request: Request, next: Next) -> AnyResponse:
        if request.method not in ("GET", "HEAD") or request.path.startswith(_RESERVED_PREFIX):
            return await next(request)
        result = await asyncio.to_thread(server.respond, request.path)
        return Response(body=result.body, status=result.status, content_type=result.content_type)

    async def broadcast(request: Request) -> Any:
        accept = request.headers.get("accept") or ""
        if "text/event-stream" not in accept:
            return Redirect("/")

        conn = server.connect()

        async def generate():  # type: ignore[return]
            stream = server.reload_stream(conn)
            try:
                async for payload in stream:
                    yield SSEEvent(data=payload, event=RELOAD_EVENT)
            finally:
                await stream.aclose()
                server.disconnect(conn)

        return EventStream(generate())

    async def stats(request: Request) -> Any:
        return Response(
            body=json.dumps(server.stats(), indent=2),
            status=200,
            content_type="application/json",
        )

    app.add_middleware(serve_route)
    app.route(BROADCAST_PATH, name="burrow:broadcast", referenced=True)(broadcast)
    app.route(STATS_PATH, name="burrow:stats", referenced=True)(stats)

    @app.on_shutdown
    async def _close_connections() -> None:
        server.close()

    return app


def run(server: DevServer, host: str, port: int) -> None:
    """Serve *server* with pounce, single worker."""
    from pounce.config import ServerConfig
    from pounce.server import Server

    app = create_app(server)
    Server(ServerConfig(host=host, port=port, workers=1), app).run()
