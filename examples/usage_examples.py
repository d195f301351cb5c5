#!/usr/bin/env python3
"""
Example script showing how to use the outdated dependency stats tool.
"""

from pathlib import Path

from outdated_stats.aggregator import aggregate
from outdated_stats.classifier import classify
from outdated_stats.ignore import build_ignore_list
from outdated_stats.models import DependencyRecord, DependencyType
from outdated_stats.reporting import log_typed_summary
from outdated_stats.resolvers import get_resolver
from outdated_stats.stats import collect_monorepo_stats, get_dependency_stats


def example_classify():
    """Example: Classify version pairs without running a package manager."""
    print("="*60)
    print("Example 1: Classification")
    print("="*60)

    for current, latest in [("1.0.0", "2.0.0"), ("0.1.0", "0.2.0"), ("0.2.0", "0.2.1"), ("1.0.0", "exotic")]:
        print(f"{current} -> {latest}: {classify(current, latest).value}")


def example_aggregate():
    """Example: Aggregate records supplied by hand."""
    print("\n" + "="*60)
    print("Example 2: Aggregation")
    print("="*60)

    records = [
        DependencyRecord("react", "16.14.0", "18.2.0", DependencyType.RUNTIME),
        DependencyRecord("lodash", "4.17.0", "4.17.21", DependencyType.RUNTIME),
    ]
    stats = aggregate(10, records)
    print(f"Counts: {stats.counts.to_dict()}")
    print(f"Percents: {stats.percents.to_dict()}")


def example_project(path: Path):
    """Example: Stats for a yarn project."""
    print("\n" + "="*60)
    print("Example 3: Project stats")
    print("="*60)

    stats = get_dependency_stats(path, get_resolver("yarn"), ignore=build_ignore_list(path))
    log_typed_summary(stats)
    print(f"Counts: {stats.overall.counts.to_dict()}")


def example_monorepo(path: Path):
    """Example: Stats for every package of a monorepo."""
    print("\n" + "="*60)
    print("Example 4: Monorepo stats")
    print("="*60)

    for result in collect_monorepo_stats(path, get_resolver("npm"), show_progress=True):
        if result.ok:
            print(f"{result.name}: {result.stats.overall.percents.to_dict()}")
        else:
            print(f"{result.name}: failed ({result.error})")


if __name__ == "__main__":
    import logging
    import sys

    logging.basicConfig(level=logging.INFO)

    print("Outdated Dependency Stats - Example Usage")
    print("="*60)
    print("\nNOTE: Examples 3 and 4 require yarn/npm and a project with installed dependencies.")

    try:
        example_classify()
        example_aggregate()

        if len(sys.argv) > 1:
            example_project(Path(sys.argv[1]))
            example_monorepo(Path(sys.argv[1]))

    except Exception as e:
        print(f"\nError running examples: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
