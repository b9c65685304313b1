# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
capkg - package manager decision core

Computes a dependency-first installation order, detects version conflicts
and applies the plan under an exclusive lock with a crash-recoverable
transaction journal.
"""

__version__ = "1.0.0"
