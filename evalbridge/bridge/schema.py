# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data structures that cross the host boundary.

These are plain dataclasses, no pydantic here: they are runtime values
created per call, not configuration. Nothing in this module is persisted.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from evalbridge.interpreter.exceptions import InterpreterError


@dataclass(frozen=True)
class EvaluationRequest:
    """The source text a host submits for one call."""

    source: str


@dataclass(frozen=True)
class SessionOutcome:
    """
    The three values an evaluation session hands back.

    `stdout` and `stderr` are the final buffer contents, including anything
    written before a failure. `error` is None when evaluation succeeded.
    """

    stdout: str = ""
    stderr: str = ""
    error: Optional[InterpreterError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class ServiceStatus:
    """Health check info for the /status endpoint."""

    ready: bool = False
    entry_point: str = ""
    calls_served: int = 0
    failed_calls: int = 0
    started_at: float = field(default_factory=time.monotonic)

    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self.started_at, 2)
