# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the structured JSON logger.

We verify:
  - output is valid JSON
  - all mandatory fields are present (ts, level, module, msg)
  - log levels filter correctly
  - extra context fields get merged into the JSON
"""

import json
import logging
from pathlib import Path

import pytest

from evalbridge.logging.logger import configure_package_logging, get_logger


@pytest.fixture(autouse=True)
def _reset_loggers() -> None:
    """
    Clear handlers between tests so get_logger's handler-stacking guard
    doesn't interfere with test isolation.
    """
    yield  # type: ignore[misc]
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("evalbridge.test"):
            logging.getLogger(name).handlers.clear()
    configure_package_logging("INFO")


class TestJsonOutput:
    def test_output_is_valid_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("evalbridge.test.json", log_level="INFO")
        logger.info("hello")
        parsed = json.loads(capsys.readouterr().out.strip())
        assert isinstance(parsed, dict)

    def test_mandatory_fields_are_present(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("evalbridge.test.fields", log_level="INFO")
        logger.info("test message")
        parsed = json.loads(capsys.readouterr().out.strip())
        assert parsed["level"] == "INFO"
        assert parsed["module"] == "evalbridge.test.fields"
        assert parsed["msg"] == "test message"
        assert "ts" in parsed

    def test_extra_fields_are_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("evalbridge.test.extra", log_level="DEBUG")
        logger.info("call served", extra={"entry_point": "runCode", "output_chars": 6})
        parsed = json.loads(capsys.readouterr().out.strip())
        assert parsed["entry_point"] == "runCode"
        assert parsed["output_chars"] == 6

    def test_exception_info_is_serialized(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("evalbridge.test.exc", log_level="INFO")
        try:
            raise ValueError("kaboom")
        except ValueError:
            logger.error("failed", exc_info=True)
        parsed = json.loads(capsys.readouterr().out.strip())
        assert "ValueError: kaboom" in parsed["exc"]


class TestLogLevelFiltering:
    def test_debug_hidden_at_info_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("evalbridge.test.level_filter", log_level="INFO")
        logger.debug("this should not appear")
        assert capsys.readouterr().out.strip() == ""

    def test_level_can_be_raised_on_existing_logger(self, capsys: pytest.CaptureFixture[str]) -> None:
        get_logger("evalbridge.test.relevel", log_level="INFO")
        logger = get_logger("evalbridge.test.relevel", log_level="DEBUG")
        logger.debug("now visible")
        assert "now visible" in capsys.readouterr().out


class TestFileOutput:
    def test_logs_are_written_to_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "bridge.log"
        logger = get_logger("evalbridge.test.file_output", log_level="INFO", log_file=log_file)
        logger.info("file log test")
        for handler in logger.handlers:
            handler.flush()
        parsed = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert parsed["msg"] == "file log test"


class TestInvalidLogLevel:
    def test_invalid_level_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            get_logger("evalbridge.test.invalid", log_level="INVALID")


class TestPackageConfiguration:
    def test_existing_logger_follows_package_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("evalbridge.test.pkg_existing")
        logger.debug("hidden")
        configure_package_logging("DEBUG")
        logger.debug("visible")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "visible" in out

    def test_later_logger_uses_package_defaults(self, tmp_path: Path) -> None:
        log_file = tmp_path / "package.log"
        configure_package_logging("DEBUG", log_file)
        logger = get_logger("evalbridge.test.pkg_later")
        assert logger.level == logging.DEBUG
        logger.debug("late logger")
        for handler in logger.handlers:
            handler.flush()
        lines = log_file.read_text(encoding="utf-8").strip().splitlines()
        assert json.loads(lines[-1])["msg"] == "late logger"

    def test_reconfiguring_without_file_detaches_it(self, tmp_path: Path) -> None:
        logger = get_logger("evalbridge.test.pkg_detach")
        configure_package_logging("INFO", tmp_path / "detach.log")
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        configure_package_logging("INFO")
        assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)

    def test_loggers_outside_the_package_are_untouched(self) -> None:
        other = get_logger("thirdparty.pkg_check", log_level="INFO")
        try:
            configure_package_logging("DEBUG")
            assert other.level == logging.INFO
        finally:
            other.handlers.clear()
