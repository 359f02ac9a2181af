#!/usr/bin/env python3
"""
MycoKV Client Setup Script
==========================
Allows installation of the mycokv package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="mycokv",
    version="1.0.0",
    description="Asyncio client for the MycoKV key-value store",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "mycokv=mycokv.cli:main",
        ],
    },
)
