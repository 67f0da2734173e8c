"""JSON-over-HTTP transport between the companion platform and the service."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
import logging
from typing import Any

from src.config import AppConfig
from src.data.places_client import PlacesClient
from src.data.ride_client import RideClient
from src.data.trip_store import JsonTripStore
from src.logic.operations import REJECT_BAD_REQUEST, REJECT_INVALID_AUTH_TOKENS, CompanionService, Invocation, Reply
from src.logic.reconcile import TripReconciler

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 64 * 1024

_REJECT_HTTP_STATUS = {
    REJECT_INVALID_AUTH_TOKENS: 401,
    REJECT_BAD_REQUEST: 400,
}


def build_service(config: AppConfig, executor: ThreadPoolExecutor) -> CompanionService:
    """Wire the collaborators described by the config into a CompanionService."""
    places = PlacesClient(
        config.places.api_key,
        radius_meters=config.places.search_radius_meters,
        search_types=config.places.search_types,
    )
    store = JsonTripStore(config.storage.path)
    reconciler = TripReconciler(
        places,
        store,
        executor,
        status_ttl_seconds=config.trip.status_ttl_seconds,
        receipt_delay_seconds=config.trip.receipt_delay_seconds,
    )

    def client_factory(access_token: str) -> RideClient:
        return RideClient(
            access_token,
            sandbox=config.provider.sandbox,
            timeout_seconds=config.provider.timeout_seconds,
        )

    return CompanionService(places, reconciler, executor, client_factory)


class InvocationHandler(BaseHTTPRequestHandler):
    service: CompanionService

    def do_GET(self) -> None:  # noqa: N802
        if self.path == "/healthz":
            self.send_response(200)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.end_headers()
            self.wfile.write(b"ok")
            return

        self.send_response(404)
        self.end_headers()

    def do_POST(self) -> None:  # noqa: N802
        if self.path not in ("/", "/invoke"):
            self.send_response(404)
            self.end_headers()
            return

        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            length = -1
        if length <= 0 or length > MAX_BODY_BYTES:
            self._send_reply(Reply.reject(REJECT_BAD_REQUEST, "Invalid request body."))
            return

        try:
            body = json.loads(self.rfile.read(length).decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            self._send_reply(Reply.reject(REJECT_BAD_REQUEST, "Invalid JSON body."))
            return
        if not isinstance(body, dict):
            self._send_reply(Reply.reject(REJECT_BAD_REQUEST, "Invalid request body."))
            return

        invocation = Invocation.from_json(body)
        logger.debug("Invocation %s", invocation.method)
        self._send_reply(self.service.handle(invocation))

    def _send_reply(self, reply: Reply) -> None:
        payload = json.dumps(reply.to_json(), ensure_ascii=False).encode("utf-8")
        status = _REJECT_HTTP_STATUS.get(reply.reject_code, 400) if reply.reject_code is not None else 200
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def create_server(service: CompanionService, host: str, port: int) -> ThreadingHTTPServer:
    """HTTP server handling each invocation on its own thread."""
    handler = type("BoundInvocationHandler", (InvocationHandler,), {"service": service})
    server = ThreadingHTTPServer((host, port), handler)
    server.daemon_threads = True
    return server


__all__ = ["InvocationHandler", "build_service", "create_server"]
