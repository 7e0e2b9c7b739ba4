"""
Horizon setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="horizon-export",
    version="1.0.0",
    description="Horizon — design-document tree exporter (snapshots + regeneration scripts)",
    packages=find_packages(include=["horizon", "horizon.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "horizon=horizon.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
        "httpx>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
)
