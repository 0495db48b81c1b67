# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Host-side client for a running evaluation bridge.

A host that starts the service in another process cannot call the entry
point until the readiness flag is up. wait_until_ready() polls /status a
bounded number of times and gives up loudly, rather than letting the first
real call hang or fail with a connection error.

Usage:
    client = BridgeClient("http://127.0.0.1:8740")
    client.wait_until_ready()
    print(client.run("print('hello')"))
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from evalbridge.bridge.registry import DEFAULT_ENTRY_POINT
from evalbridge.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULT_READY_ATTEMPTS = 50
DEFAULT_READY_INTERVAL_S = 0.1


class BridgeUnavailableError(RuntimeError):
    """The bridge could not be reached, was never ready, or rejected the call."""


class BridgeClient:
    """Synchronous client for the bridge's HTTP adapter."""

    def __init__(
        self,
        base_url: str,
        entry_point: str = DEFAULT_ENTRY_POINT,
        timeout_s: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        # No default timeout: an evaluation may legitimately run for a long time.
        self._client = httpx.Client(base_url=base_url, timeout=timeout_s, transport=transport)
        self._entry_point = entry_point

    def __enter__(self) -> BridgeClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as err:
            raise BridgeUnavailableError(f"Bridge request to {path} failed: {err}") from err

        try:
            body = resp.json()
        except ValueError as err:
            raise BridgeUnavailableError(
                f"Bridge returned a non-JSON response (HTTP {resp.status_code})"
            ) from err

        if resp.status_code != 200:
            message = body.get("error", "unknown error") if isinstance(body, dict) else body
            raise BridgeUnavailableError(f"HTTP {resp.status_code}: {message}")

        return body

    def status(self) -> dict[str, Any]:
        return self._request("GET", "/status")

    def wait_until_ready(
        self,
        attempts: int = DEFAULT_READY_ATTEMPTS,
        interval_s: float = DEFAULT_READY_INTERVAL_S,
    ) -> dict[str, Any]:
        """
        Poll /status until the bridge reports ready.

        Returns:
            The first status payload with ready=true.

        Raises:
            BridgeUnavailableError: If the bridge isn't ready after `attempts` polls.
        """
        last_error = "bridge never reported ready"
        for attempt in range(attempts):
            try:
                status = self.status()
            except BridgeUnavailableError as err:
                last_error = str(err)
            else:
                if status.get("ready"):
                    if status.get("entry_point"):
                        self._entry_point = status["entry_point"]
                    logger.debug("Bridge ready", extra={"attempts": attempt + 1})
                    return status
            time.sleep(interval_s)

        raise BridgeUnavailableError(
            f"{self._entry_point} not available after {attempts} attempts: {last_error}"
        )

    def run(self, source: str) -> str:
        """Send source text to the entry point and return the report."""
        body = self._request("POST", f"/call/{self._entry_point}", json={"source": source})
        return str(body.get("output", ""))

    def shutdown(self) -> None:
        self._request("POST", "/shutdown")
