# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Host bridge registration.

The bridge publishes exactly one host-callable entry point: a function from
source text to report text. The name is fixed the moment it is registered;
a second registration is a programming error, not something to recover from.

Whatever carries calls from the host (the HTTP adapter in
evalbridge.bridge.server, or a direct in-process caller) goes through
HostBridge.invoke and never touches sessions directly.
"""

from typing import Callable, Optional

from evalbridge.interpreter.engine import python_interpreter_factory
from evalbridge.interpreter.library import StandardLibrary
from evalbridge.interpreter.session import evaluate_source
from evalbridge.logging.logger import get_logger

logger = get_logger(__name__)

EntryPoint = Callable[[str], str]

DEFAULT_ENTRY_POINT = "runCode"


class RegistrationError(RuntimeError):
    """Raised on re-registration, or when invoking an unregistered bridge."""


class HostBridge:
    """Holds the single published entry point."""

    def __init__(self) -> None:
        self._name: Optional[str] = None
        self._handler: Optional[EntryPoint] = None

    @property
    def registered(self) -> bool:
        return self._handler is not None

    @property
    def entry_point(self) -> Optional[str]:
        return self._name

    def register(self, name: str, handler: EntryPoint) -> None:
        if self._handler is not None:
            raise RegistrationError(
                f"Entry point '{self._name}' is already registered; re-registration is not supported"
            )
        if not name or not name.isidentifier():
            raise RegistrationError(f"Invalid entry point name: {name!r}")

        self._name = name
        self._handler = handler
        logger.debug("Entry point registered", extra={"entry_point": name})

    def invoke(self, source: str) -> str:
        if self._handler is None:
            raise RegistrationError("No entry point has been registered")
        return self._handler(source)


def make_entry_point(library: Optional[StandardLibrary] = None, filename: str = "<eval>") -> EntryPoint:
    """Bind evaluate_source to a library and filename, ready to register."""
    factory = python_interpreter_factory(filename)

    def run_code(source: str) -> str:
        return evaluate_source(source, library=library, interpreter_factory=factory)

    return run_code
