# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for the capkg package manager core
"""

from setuptools import setup, find_packages

setup(
    name="capkg",
    version="1.0.0",
    description="Dependency resolution, conflict detection and transactional installs for capkg",
    author="Jason Cafarelli",
    packages=find_packages(include=["capkg", "capkg.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ]
    },
)
