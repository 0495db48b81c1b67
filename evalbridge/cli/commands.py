# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the evalbridge CLI.

Each function here corresponds to one subcommand and returns an exit code.
Diagnostics go through the structured logger; the only thing written to
stdout directly is the evaluation report from `run`, since that is the
command's output.
"""

import argparse
import logging
import sys
from pathlib import Path

from evalbridge.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR
from evalbridge.config.exceptions import ConfigError
from evalbridge.config.loader import load_config
from evalbridge.config.schema import EvalBridgeConfig, InterpreterConfig
from evalbridge.logging.logger import configure_package_logging, get_logger
from evalbridge.runtime.bootstrap import bootstrap


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, EvalBridgeConfig | None, logging.Logger]:
    """
    The shared setup every command needs: load config, run bootstrap.

    Returns (exit_code, config, logger). If exit_code is not SUCCESS the
    caller should return it immediately.
    """
    configure_package_logging(args.log_level or "INFO")
    logger = get_logger(f"evalbridge.cli.{command_name}")

    config = None
    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger

    if config is not None:
        global_config = config.global_config
        if args.log_level is not None:
            global_config = global_config.model_copy(update={"log_level": args.log_level})
        bootstrap(global_config)
    else:
        logger.debug(
            "No config provided, running with defaults",
            extra={"command": command_name},
        )

    return SUCCESS, config, logger


def _interpreter_config(config: EvalBridgeConfig | None) -> InterpreterConfig:
    if config is not None and config.interpreter is not None:
        return config.interpreter
    return InterpreterConfig(config_version="1.0.0")


def handle_serve(args: argparse.Namespace) -> int:
    """Start the resident evaluation service and block until it stops."""
    exit_code, config, logger = _load_and_bootstrap(args, "serve")
    if exit_code != SUCCESS:
        return exit_code

    try:
        from evalbridge.runtime.lifecycle import run_service

        logger.info(
            "Starting evaluation bridge",
            extra={"command": "serve", "host": args.host, "port": args.port},
        )
        run_service(config, host=args.host, port=args.port)
        return SUCCESS

    except OSError as err:
        logger.error("Serve failed, cannot bind", extra={"error": str(err)})
        return RUNTIME_ERROR
    except Exception as err:
        logger.error("Serve failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_run(args: argparse.Namespace) -> int:
    """Evaluate one source file (or stdin) in-process and write the report."""
    exit_code, config, logger = _load_and_bootstrap(args, "run")
    if exit_code != SUCCESS:
        return exit_code

    if args.source == "-":
        source = sys.stdin.read()
    else:
        source_path = Path(args.source)
        if not source_path.is_file():
            logger.error("Source file not found", extra={"path": str(source_path)})
            return USER_ERROR
        source = source_path.read_text(encoding="utf-8")

    try:
        from evalbridge.bridge.registry import make_entry_point
        from evalbridge.interpreter.library import StandardLibrary

        interpreter_cfg = _interpreter_config(config)
        run_code = make_entry_point(
            library=StandardLibrary(modules=tuple(interpreter_cfg.library_modules)),
            filename=interpreter_cfg.filename,
        )
        report = run_code(source)
    except Exception as err:
        logger.error("Run failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    sys.stdout.write(report)
    if report and not report.endswith("\n"):
        sys.stdout.write("\n")
    sys.stdout.flush()
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Log environment information and the effective configuration."""
    exit_code, config, logger = _load_and_bootstrap(args, "info")
    if exit_code != SUCCESS:
        return exit_code

    from evalbridge.config.schema import BridgeConfig
    from evalbridge.runtime.environment import get_system_info

    info = get_system_info()
    bridge_cfg = BridgeConfig(config_version="1.0.0")
    if config is not None and config.bridge is not None:
        bridge_cfg = config.bridge
    interpreter_cfg = _interpreter_config(config)

    logger.info(
        "evalbridge environment",
        extra={
            "python_version": info.python_version,
            "implementation": info.implementation,
            "platform": info.platform,
            "architecture": info.architecture,
            "entry_point": bridge_cfg.entry_point,
            "host": bridge_cfg.host,
            "port": bridge_cfg.port,
            "library_modules": interpreter_cfg.library_modules,
        },
    )
    return SUCCESS
