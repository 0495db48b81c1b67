# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for evalbridge.

Every operation is a subcommand of `evalbridge`. The global options
(--config, --log-level) are inherited by every subcommand through argparse's
parent parser mechanism.

Usage:
    evalbridge serve --config configs/evalbridge.yaml
    evalbridge serve --port 0
    evalbridge run script.py
    echo "print('hi')" | evalbridge run -
    evalbridge info
"""

import argparse
import sys

from evalbridge.cli.commands import handle_info, handle_run, handle_serve
from evalbridge.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    Uses add_help=False so help text doesn't collide between the parent and
    the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides global.log_level, default INFO).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    serve_parser = subparsers.add_parser(
        "serve", parents=[parent], help="Start the resident evaluation service."
    )
    serve_parser.add_argument(
        "--host", type=str, default=None, help="Bind address (overrides config)."
    )
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Bind port (overrides config)."
    )
    serve_parser.set_defaults(func=handle_serve)

    run_parser = subparsers.add_parser(
        "run", parents=[parent], help="Evaluate a source file once and print the report."
    )
    run_parser.add_argument(
        "source", type=str, help="Path to a source file, or '-' to read stdin."
    )
    run_parser.set_defaults(func=handle_run)

    info_parser = subparsers.add_parser(
        "info", parents=[parent], help="Display environment and config info."
    )
    info_parser.set_defaults(func=handle_info)


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, show help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="evalbridge",
        description="evalbridge: evaluate source text in a fresh interpreter per call.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
