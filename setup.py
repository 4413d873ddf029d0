#!/usr/bin/env python3
"""
Setup configuration for the Vine Finance backend package
"""

from pathlib import Path

from setuptools import setup, find_packages


def read_requirements():
    """Runtime dependencies are kept in requirements.txt."""
    requirements = Path(__file__).parent / "requirements.txt"
    return [
        line.strip()
        for line in requirements.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]


setup(
    name="vine-finance-backend",
    version="1.0.0",
    description="Vine Finance Backend - net worth, account and real estate aggregation",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["api_server"],
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "httpx>=0.24.0",
        ],
    },
)
