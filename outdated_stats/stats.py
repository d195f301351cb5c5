"""
Collect outdated dependency stats for a project or a monorepo.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from tqdm import tqdm

from .aggregator import aggregate_by_type
from .interfaces import OutdatedResolver
from .manifest import PACKAGE_FILE, count_dependencies_by_type
from .models import PackageStatsResult, TypedStatsSnapshot
from .resolvers import group_by_type


logger = logging.getLogger(__name__)


def get_dependency_stats(
    working_directory: Union[str, Path],
    resolver: OutdatedResolver,
    ignore: Iterable[str] = (),
) -> TypedStatsSnapshot:
    """Stats for the project in ``working_directory``.

    Args:
        working_directory: Directory holding package.json
        resolver: Package-manager resolver used to list outdated dependencies
        ignore: Dependency names to leave out of the outdated buckets

    Returns:
        Combined and per-type stats.
    """
    working_directory = Path(working_directory).resolve()
    logger.debug("working directory %s", working_directory)

    records = resolver.list_outdated(working_directory)
    logger.info(
        "%s reported %d outdated dependencies in %s",
        resolver.package_manager,
        len(records),
        working_directory,
    )
    counts = count_dependencies_by_type(working_directory)
    return aggregate_by_type(group_by_type(records), counts, ignore=ignore)


def discover_packages(root: Union[str, Path], packages_dir: str = "packages") -> List[Path]:
    """Sub-package directories of ``root/packages_dir`` that hold a package.json."""
    base = Path(root) / packages_dir
    if not base.is_dir():
        logger.warning("Packages folder %s does not exist", base)
        return []
    return sorted(
        path for path in base.iterdir()
        if path.is_dir() and (path / PACKAGE_FILE).exists()
    )


def collect_monorepo_stats(
    root: Union[str, Path],
    resolver: OutdatedResolver,
    packages_dir: str = "packages",
    ignore: Iterable[str] = (),
    include_root: bool = False,
    show_progress: bool = False,
    ignore_for: Optional[Callable[[Path], Iterable[str]]] = None,
) -> List[PackageStatsResult]:
    """Stats for every sub-package of a monorepo.

    A failing sub-package is reported with its error and does not stop the
    remaining ones. When ``ignore_for`` is given it is called with each
    package directory and its result replaces ``ignore`` for that package.
    """
    root = Path(root).resolve()
    ignore = list(ignore)
    targets = discover_packages(root, packages_dir)
    if include_root and (root / PACKAGE_FILE).exists():
        targets.insert(0, root)
    logger.info("Found %d packages under %s", len(targets), root)

    results = []
    for path in tqdm(targets, desc="Packages", unit="pkg", disable=not show_progress):
        name = path.name if path != root else "."
        try:
            package_ignore = list(ignore_for(path)) if ignore_for else ignore
            stats = get_dependency_stats(path, resolver, ignore=package_ignore)
        except Exception as e:
            logger.error("Error collecting stats for %s: %s", name, e)
            results.append(PackageStatsResult(name=name, path=str(path), error=str(e)))
            continue
        results.append(PackageStatsResult(name=name, path=str(path), stats=stats))
    return results


def failed_packages(results: Iterable[PackageStatsResult]) -> List[str]:
    return [result.name for result in results if not result.ok]


def summarize_packages(results: Iterable[PackageStatsResult]) -> Dict[str, dict]:
    """Plain dict keyed by package name, ready for JSON output."""
    summary = {}
    for result in results:
        if result.ok and result.stats is not None:
            summary[result.name] = result.stats.to_dict()
        else:
            summary[result.name] = {"error": result.error}
    return summary
