"""
Folio setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="folio",
    version="0.1.0",
    description="Folio — hierarchical document store with per-document edit history",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "folio=folio.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
)
