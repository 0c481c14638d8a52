#!/usr/bin/env python3
"""Setup script for the molehunt package."""

from setuptools import setup, find_packages

setup(
    name="molehunt",
    version="0.1.0",
    description="Authoritative match engine for a hidden-role social deduction game",
    packages=find_packages(where=".", include=["molehunt*"]),
    package_dir={"": "."},
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "numpy",
        "pydantic>=2",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
