# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for evalbridge.

The one-time setup before any entry point is published:
  1. Validate the environment (Python version)
  2. Apply the configured level and log file to every evalbridge logger
  3. Log a startup snapshot
"""

import logging
from pathlib import Path

from evalbridge.config.schema import GlobalConfig
from evalbridge.logging.logger import configure_package_logging, get_logger
from evalbridge.runtime.environment import check_minimum_python, get_system_info


def bootstrap(config: GlobalConfig) -> logging.Logger:
    """
    Run the bootstrap sequence and return the runtime logger.

    Args:
        config: The validated global configuration.
    """
    check_minimum_python()

    log_file = None
    if config.log_file is not None:
        log_file = Path(config.log_file)

    configure_package_logging(config.log_level, log_file)
    logger = get_logger("evalbridge.runtime")

    system_info = get_system_info()
    logger.info(
        "evalbridge bootstrap complete",
        extra={
            "project_name": config.project_name,
            "python_version": system_info.python_version,
            "implementation": system_info.implementation,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
        },
    )
    return logger
