# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Local HTTP adapter that carries host calls to the bridge's entry point.

Built on Python's standard library http.server. The server is the plain,
single-threaded HTTPServer: every call runs on the one execution
context, so calls are serialized in arrival order and a slow evaluation
holds up the ones behind it.

The server binds to localhost by default. Evaluated code has the full power
of this process, so exposing it beyond the machine is a bad idea.

Endpoints:
  POST /call/<entry_point>  evaluate {"source": "..."} and return {"output": "..."}
  GET  /status              readiness and counters
  POST /shutdown            stop the server loop
"""

import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

from evalbridge.bridge.registry import HostBridge
from evalbridge.bridge.schema import ServiceStatus
from evalbridge.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)

CALL_PREFIX = "/call/"


class BridgeRequestHandler(BaseHTTPRequestHandler):
    """
    Routes incoming HTTP requests to the host bridge.

    Every call goes through the same steps:
      1. Resolve the entry point from the URL path
      2. Check the payload size and parse the JSON body
      3. Invoke the bridge and return the report as JSON

    Evaluation failures are part of the report and still return 200.
    Only malformed requests and unexpected faults get error statuses.
    """

    server: "BridgeServer"

    def log_message(self, format: str, *args: Any) -> None:
        """Silence the default request logger; we use structured logging."""
        pass

    def do_GET(self) -> None:
        if self.path == "/status":
            self._handle_status()
        else:
            self._send_error(404, "Not found")

    def do_POST(self) -> None:
        if self.path == "/shutdown":
            self._handle_shutdown()
        elif self.path.startswith(CALL_PREFIX):
            self._handle_call(self.path[len(CALL_PREFIX):])
        else:
            self._discard_body(self._content_length())
            self._send_error(404, f"Unknown endpoint: {self.path}")

    def _read_body(self) -> dict[str, Any] | None:
        """
        Read and parse the request body as JSON.

        Returns None if the body is missing, too large, or not a JSON object.
        In each case the error response has already been sent.
        """
        content_length = self._content_length()
        max_size = self.server.max_request_size_bytes

        if content_length <= 0:
            self._send_error(400, "Request body is empty")
            return None

        if content_length > max_size:
            self._discard_body(content_length)
            self._send_error(
                413,
                f"Payload too large: {content_length} bytes exceeds limit of {max_size}",
            )
            return None

        try:
            raw = self.rfile.read(content_length)
            body = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            self._send_error(400, f"Invalid JSON: {err}")
            return None

        if not isinstance(body, dict):
            self._send_error(400, "Request body must be a JSON object")
            return None

        return body

    def _content_length(self) -> int:
        try:
            return int(self.headers.get("Content-Length", "0"))
        except ValueError:
            return 0

    def _discard_body(self, content_length: int) -> None:
        # Closing with unread bytes resets the connection before the client
        # reads the error response.
        remaining = content_length
        while remaining > 0:
            chunk = self.rfile.read(min(remaining, 65536))
            if not chunk:
                break
            remaining -= len(chunk)

    def _handle_call(self, name: str) -> None:
        bridge = self.server.bridge
        if name != bridge.entry_point:
            self._discard_body(self._content_length())
            self._send_error(404, f"Unknown entry point: {name}")
            return

        body = self._read_body()
        if body is None:
            return

        source = body.get("source")
        if not isinstance(source, str):
            self._send_error(400, "Missing required string field: source")
            return

        status = self.server.status
        try:
            output = bridge.invoke(source)
        except Exception as err:
            status.failed_calls += 1
            logger.error("Entry point call failed", extra={"error": str(err)}, exc_info=True)
            self._send_error(500, f"Bridge error: {err}")
            return

        status.calls_served += 1
        logger.info(
            "Entry point call served",
            extra={
                "entry_point": name,
                "source_chars": len(source),
                "output_chars": len(output),
            },
        )
        self._send_json(200, {"output": output})

    def _handle_status(self) -> None:
        status = self.server.status
        self._send_json(
            200,
            {
                "ready": status.ready,
                "entry_point": status.entry_point,
                "uptime_seconds": status.uptime_seconds(),
                "calls_served": status.calls_served,
                "failed_calls": status.failed_calls,
            },
        )

    def _handle_shutdown(self) -> None:
        self._send_json(200, {"message": "Server shutting down"})
        logger.info("Shutdown requested via API")
        # shutdown() waits for serve_forever to return, which cannot happen
        # while this handler is still running on the serving thread.
        threading.Thread(target=self.server.shutdown, daemon=True).start()

    def _send_json(self, status_code: int, data: dict[str, Any]) -> None:
        payload = json.dumps(data, default=str).encode("utf-8")
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _send_error(self, status_code: int, message: str) -> None:
        self._send_json(status_code, {"error": message})


class BridgeServer(HTTPServer):
    """
    HTTPServer that carries the host bridge and its status.

    The handler reaches both through self.server, so there is no module
    level state.
    """

    def __init__(
        self,
        address: tuple[str, int],
        bridge: HostBridge,
        status: ServiceStatus,
        max_request_size_bytes: int,
    ) -> None:
        super().__init__(address, BridgeRequestHandler)
        self.bridge = bridge
        self.status = status
        self.max_request_size_bytes = max_request_size_bytes


def create_server(
    bridge: HostBridge,
    host: str,
    port: int,
    status: ServiceStatus,
    max_request_size_bytes: int,
) -> BridgeServer:
    """Bind a BridgeServer, warning if the address is reachable off-host."""
    if host not in ("127.0.0.1", "localhost", "::1"):
        logger.warning(
            "Server binding to non-localhost address; submitted code runs with full process rights",
            extra={"host": host},
        )

    return BridgeServer(
        (host, port),
        bridge=bridge,
        status=status,
        max_request_size_bytes=max_request_size_bytes,
    )
