# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Core utilities and shared modules for capkg.

This package contains:
- config: Configuration management
- errors: Custom exceptions
- logging: Structured logging
"""

from capkg.core.config import get_config, load_config, Config
from capkg.core.errors import PackageManagerError
from capkg.core.logging import get_logger, configure_logging

__all__ = [
    "get_config",
    "load_config",
    "Config",
    "PackageManagerError",
    "get_logger",
    "configure_logging",
]
