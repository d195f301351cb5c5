"""
Dependency Outdated Stats

A tool for reporting how many of a project's dependencies are behind by a
major, minor or patch version.
"""

__version__ = "0.1.0"

from .aggregator import aggregate, aggregate_by_type
from .classifier import classify
from .cli import main

__all__ = ["aggregate", "aggregate_by_type", "classify", "main"]
