# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Schema-level validation tests.

These focus on the pydantic models themselves: defaults, constraint
enforcement, and structural correctness.
"""

import pytest
from pydantic import ValidationError

from evalbridge.config.schema import BridgeConfig, EvalBridgeConfig, GlobalConfig, InterpreterConfig
from evalbridge.interpreter.library import DEFAULT_LIBRARY_MODULES


class TestGlobalConfigSchema:
    def test_default_log_level_is_info(self) -> None:
        assert GlobalConfig(config_version="1.0.0").log_level == "INFO"

    def test_default_project_name(self) -> None:
        assert GlobalConfig(config_version="1.0.0").project_name == "evalbridge"

    def test_config_version_is_required(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig()  # type: ignore[call-arg]


class TestInterpreterConfigSchema:
    def test_default_library(self) -> None:
        config = InterpreterConfig(config_version="1.0.0")
        assert tuple(config.library_modules) == DEFAULT_LIBRARY_MODULES
        assert config.filename == "<eval>"

    def test_empty_filename_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InterpreterConfig(config_version="1.0.0", filename="")

    def test_empty_library_is_allowed(self) -> None:
        assert InterpreterConfig(config_version="1.0.0", library_modules=[]).library_modules == []


class TestBridgeConfigSchema:
    def test_defaults(self) -> None:
        config = BridgeConfig(config_version="1.0.0")
        assert config.entry_point == "runCode"
        assert config.host == "127.0.0.1"
        assert config.port == 8740
        assert config.max_request_size_bytes == 1_048_576

    @pytest.mark.parametrize("name", ["", "run code", "9lives", "run-code"])
    def test_entry_point_must_be_identifier(self, name: str) -> None:
        with pytest.raises(ValidationError):
            BridgeConfig(config_version="1.0.0", entry_point=name)

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_port_range(self, port: int) -> None:
        with pytest.raises(ValidationError):
            BridgeConfig(config_version="1.0.0", port=port)

    def test_port_zero_is_valid(self) -> None:
        assert BridgeConfig(config_version="1.0.0", port=0).port == 0

    def test_request_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            BridgeConfig(config_version="1.0.0", max_request_size_bytes=0)

    def test_unknown_field_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BridgeConfig(config_version="1.0.0", timeout_s=5)  # type: ignore[call-arg]


class TestEvalBridgeConfigSchema:
    def test_global_alias(self) -> None:
        config = EvalBridgeConfig.model_validate({"global": {"config_version": "1.0.0"}})
        assert config.global_config.config_version == "1.0.0"

    def test_global_section_is_required(self) -> None:
        with pytest.raises(ValidationError):
            EvalBridgeConfig.model_validate({})
