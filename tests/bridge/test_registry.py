# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for host bridge registration."""

import pytest

from evalbridge.bridge.registry import (
    DEFAULT_ENTRY_POINT,
    HostBridge,
    RegistrationError,
    make_entry_point,
)
from evalbridge.interpreter.library import StandardLibrary


class TestHostBridge:
    def test_new_bridge_is_unregistered(self) -> None:
        bridge = HostBridge()
        assert bridge.registered is False
        assert bridge.entry_point is None

    def test_register_publishes_name_and_handler(self) -> None:
        bridge = HostBridge()
        bridge.register("runCode", lambda source: source.upper())
        assert bridge.registered is True
        assert bridge.entry_point == "runCode"
        assert bridge.invoke("abc") == "ABC"

    def test_re_registration_is_rejected(self) -> None:
        bridge = HostBridge()
        bridge.register("runCode", lambda source: source)
        with pytest.raises(RegistrationError, match="already registered"):
            bridge.register("other", lambda source: source)
        assert bridge.entry_point == "runCode"

    def test_invoke_before_register_fails(self) -> None:
        with pytest.raises(RegistrationError):
            HostBridge().invoke("print(1)")

    @pytest.mark.parametrize("name", ["", "run code", "1run", "run-code"])
    def test_invalid_names_are_rejected(self, name: str) -> None:
        with pytest.raises(RegistrationError):
            HostBridge().register(name, lambda source: source)


class TestMakeEntryPoint:
    def test_default_name(self) -> None:
        assert DEFAULT_ENTRY_POINT == "runCode"

    def test_entry_point_evaluates_source(self) -> None:
        run_code = make_entry_point()
        assert run_code("print(2 + 2)") == "4\n"

    def test_entry_point_uses_given_library(self) -> None:
        run_code = make_entry_point(library=StandardLibrary(modules=("evalbridge_absent",)))
        assert run_code("print(1)").startswith("Error loading standard library: ")

    def test_entry_point_uses_given_filename(self) -> None:
        run_code = make_entry_point(filename="<host>")
        assert "<host>" in run_code("if")

    def test_calls_are_idempotent(self) -> None:
        run_code = make_entry_point()
        source = "counter = globals().get('counter', 0) + 1\nprint(counter)"
        assert run_code(source) == "1\n"
        assert run_code(source) == "1\n"
