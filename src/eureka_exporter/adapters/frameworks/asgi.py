"""Dependency-free ASGI app serving registry metrics on /metrics.

Collection is blocking I/O, so each request runs the collectors in a worker
thread and only encodes on the event loop. Any ASGI server can host it.
"""

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from eureka_exporter.core.encoding.prometheus import CONTENT_TYPE, encode_metrics
from eureka_exporter.core.models import Snapshot
from eureka_exporter.core.ports import CollectorPort

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send a complete response: start message, then the UTF-8 body."""
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


def collect_all(collectors: tuple[CollectorPort, ...]) -> Snapshot:
    """Run every collector once and concatenate their snapshots in order."""
    snapshot: Snapshot = ()
    for collector in collectors:
        snapshot += collector.collect()
    return snapshot


async def render_metrics(collectors: tuple[CollectorPort, ...]) -> str:
    """Collect in a worker thread and encode the result as Prometheus text."""
    snapshot = await asyncio.to_thread(collect_all, collectors)
    return encode_metrics(snapshot)


def create_asgi_app(*collectors: CollectorPort) -> ASGIApp:
    """Create an ASGI app with a /metrics endpoint.

    Every request to /metrics runs a fresh scrape cycle on each collector.

    Args:
        *collectors: Objects implementing CollectorPort.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        if scope["path"] != "/metrics":
            await _send_response(send, 404, "text/plain", "Not Found")
            return

        try:
            body = await render_metrics(collectors)
        except Exception:
            logger.exception("Error collecting metrics")
            error_body = json.dumps({"error": "Internal Server Error"})
            await _send_response(send, 500, "application/json", error_body)
            return
        await _send_response(send, 200, CONTENT_TYPE, body)

    return app
