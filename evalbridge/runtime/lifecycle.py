# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Process lifecycle keeper.

Keeps the service resident so the host can keep calling the entry point.
The order is fixed:
  1. Register the entry point on the host bridge
  2. Flip the readiness flag and log the readiness line, exactly once
  3. Block the calling thread in the server loop

Host calls are answered from inside that loop. The loop only ends on
stop(), a POST to /shutdown, Ctrl+C, or the process being killed; none of
these happen in normal operation.
"""

import threading
from typing import Optional

from evalbridge.bridge.registry import EntryPoint, HostBridge, make_entry_point
from evalbridge.bridge.schema import ServiceStatus
from evalbridge.bridge.server import BridgeServer, create_server
from evalbridge.config.schema import BridgeConfig, EvalBridgeConfig, InterpreterConfig
from evalbridge.interpreter.library import StandardLibrary
from evalbridge.logging.logger import get_logger

logger = get_logger(__name__)

READINESS_MESSAGE = "Evaluation bridge initialized"


class ServiceLifecycle:
    """
    Owns the run loop and the readiness flag for one process.

    A lifecycle can be started once. Other threads can wait on readiness
    with wait_until_ready() and end the loop with stop().
    """

    def __init__(
        self,
        bridge: HostBridge,
        server: BridgeServer,
        entry_point: str,
        handler: EntryPoint,
    ) -> None:
        self._bridge = bridge
        self._server = server
        self._entry_point = entry_point
        self._handler = handler
        self._ready = threading.Event()
        self._stopped = threading.Event()
        self._started = False
        self._lock = threading.Lock()

    @property
    def server(self) -> BridgeServer:
        return self._server

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    def _publish(self) -> None:
        self._bridge.register(self._entry_point, self._handler)

        status: ServiceStatus = self._server.status
        status.entry_point = self._entry_point
        status.ready = True
        self._ready.set()

        host, port = self._server.server_address[:2]
        logger.info(
            READINESS_MESSAGE,
            extra={"entry_point": self._entry_point, "host": host, "port": port},
        )

    def start(self) -> None:
        """Publish the entry point, signal readiness, and block until stopped."""
        with self._lock:
            if self._started:
                raise RuntimeError("Service lifecycle has already been started")
            self._started = True

        self._publish()

        try:
            self._server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down server (keyboard interrupt)")
        finally:
            self._server.status.ready = False
            self._ready.clear()
            self._server.server_close()
            self._stopped.set()
            logger.info("Server stopped")

    def stop(self) -> None:
        """
        End the run loop from another thread.

        Does nothing if the loop was never entered, since
        HTTPServer.shutdown() would wait forever for it.
        """
        if self._ready.is_set():
            self._server.shutdown()


def build_lifecycle(
    config: Optional[EvalBridgeConfig] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> ServiceLifecycle:
    """
    Wire a bridge, server and lifecycle from config.

    Missing config sections fall back to their defaults. `host` and `port`
    override the bridge section when given.
    """
    interpreter_cfg = InterpreterConfig(config_version="1.0.0")
    bridge_cfg = BridgeConfig(config_version="1.0.0")
    if config is not None:
        interpreter_cfg = config.interpreter or interpreter_cfg
        bridge_cfg = config.bridge or bridge_cfg

    library = StandardLibrary(modules=tuple(interpreter_cfg.library_modules))
    handler = make_entry_point(library=library, filename=interpreter_cfg.filename)

    bridge = HostBridge()
    server = create_server(
        bridge,
        host=host or bridge_cfg.host,
        port=bridge_cfg.port if port is None else port,
        status=ServiceStatus(),
        max_request_size_bytes=bridge_cfg.max_request_size_bytes,
    )
    return ServiceLifecycle(bridge, server, entry_point=bridge_cfg.entry_point, handler=handler)


def run_service(
    config: Optional[EvalBridgeConfig] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    """Build the service from config and block in its run loop."""
    build_lifecycle(config, host=host, port=port).start()
