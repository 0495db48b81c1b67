# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for evalbridge tests.

Fixtures here are available to every test file automatically.
We keep them minimal, just the stuff that multiple test modules need.
"""

import textwrap
import threading
from pathlib import Path
from typing import Iterator

import pytest

from evalbridge.config.schema import EvalBridgeConfig
from evalbridge.runtime.lifecycle import ServiceLifecycle, build_lifecycle


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    The smallest config that passes schema validation.
    Tests that need specific values should write their own files.
    """
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "evalbridge-test"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (missing config_version)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "evalbridge-test"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


def _start_in_thread(lifecycle: ServiceLifecycle) -> threading.Thread:
    thread = threading.Thread(target=lifecycle.start, daemon=True)
    thread.start()
    assert lifecycle.wait_until_ready(timeout=5.0)
    return thread


@pytest.fixture()
def running_service() -> Iterator[ServiceLifecycle]:
    """A live service on a free localhost port, stopped after the test."""
    lifecycle = build_lifecycle(port=0)
    thread = _start_in_thread(lifecycle)
    yield lifecycle
    lifecycle.stop()
    thread.join(timeout=5.0)


@pytest.fixture()
def small_payload_service() -> Iterator[ServiceLifecycle]:
    """A live service that rejects request bodies over 64 bytes."""
    config = EvalBridgeConfig.model_validate(
        {
            "global": {"config_version": "1.0.0"},
            "bridge": {"config_version": "1.0.0", "port": 0, "max_request_size_bytes": 64},
        }
    )
    lifecycle = build_lifecycle(config)
    thread = _start_in_thread(lifecycle)
    yield lifecycle
    lifecycle.stop()
    thread.join(timeout=5.0)


def _base_url(lifecycle: ServiceLifecycle) -> str:
    host, port = lifecycle.server.server_address[:2]
    return f"http://{host}:{port}"


@pytest.fixture()
def base_url(running_service: ServiceLifecycle) -> str:
    """Base URL of the running_service fixture."""
    return _base_url(running_service)


@pytest.fixture()
def small_payload_url(small_payload_service: ServiceLifecycle) -> str:
    return _base_url(small_payload_service)
