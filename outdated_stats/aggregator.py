"""
Aggregate classified dependency records into counts and percentages.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .classifier import classify
from .models import (
    SEVERITIES,
    Classification,
    DependencyRecord,
    DependencyType,
    InvalidRecordError,
    StatsCounts,
    StatsPercents,
    StatsSnapshot,
    TypedStatsSnapshot,
)


logger = logging.getLogger(__name__)


def _coerce_record(item: Any) -> DependencyRecord:
    if isinstance(item, DependencyRecord):
        return item
    if isinstance(item, Mapping):
        return DependencyRecord.from_mapping(item)
    raise InvalidRecordError(
        f"Expected a DependencyRecord or mapping, got {type(item).__name__}"
    )


def group_by_severity(
    records: Iterable[Any],
) -> Dict[Classification, Tuple[DependencyRecord, ...]]:
    """Sort records into major/minor/patch buckets.

    Unresolvable and unchanged records are left out of every bucket.
    """
    buckets: Dict[Classification, List[DependencyRecord]] = {
        severity: [] for severity in SEVERITIES
    }
    for item in records:
        record = _coerce_record(item)
        result = classify(record.current_version, record.latest_version)
        if result is Classification.UNRESOLVABLE:
            logger.debug(
                "Skipping check of %s since its versions (%s -> %s) cannot be resolved "
                "against the package registry",
                record.name,
                record.current_version,
                record.latest_version,
            )
            continue
        if result is Classification.UNCHANGED:
            continue
        buckets[result].append(record)
    return {severity: tuple(items) for severity, items in buckets.items()}


def _percent(part: int, total: int) -> str:
    return f"{part / total * 100:.2f}"


def aggregate(
    total_count: int,
    records: Iterable[Any],
    label: Optional[str] = None,
) -> StatsSnapshot:
    """Build a :class:`StatsSnapshot` for ``records`` out of ``total_count`` dependencies.

    Args:
        total_count: Number of declared dependencies, outdated or not
        records: Outdated dependency records (records or mappings)
        label: Prefix for the debug summary

    Returns:
        Snapshot whose counts always satisfy
        ``up_to_date + major + minor + patch == total``.

    Raises:
        InvalidRecordError: If a record is malformed.
        ValueError: If ``total_count`` is negative.
    """
    if isinstance(total_count, bool) or not isinstance(total_count, int):
        raise TypeError(f"total_count must be an int, got {total_count!r}")
    if total_count < 0:
        raise ValueError(f"total_count must not be negative, got {total_count}")

    buckets = group_by_severity(records)
    major = len(buckets[Classification.MAJOR])
    minor = len(buckets[Classification.MINOR])
    patch = len(buckets[Classification.PATCH])
    outdated = major + minor + patch

    total = total_count
    if outdated > total:
        logger.warning(
            "%s: %d outdated dependencies exceed the declared total of %d; "
            "using %d as the total",
            label or "Dependencies",
            outdated,
            total_count,
            outdated,
        )
        total = outdated
    up_to_date = total - outdated

    if total == 0:
        percents = StatsPercents(up_to_date="100.00", major="0.00", minor="0.00", patch="0.00")
    else:
        percents = StatsPercents(
            up_to_date=_percent(up_to_date, total),
            major=_percent(major, total),
            minor=_percent(minor, total),
            patch=_percent(patch, total),
        )

    counts = StatsCounts(
        total=total,
        up_to_date=up_to_date,
        major=major,
        minor=minor,
        patch=patch,
    )
    logger.debug(
        "%s\nup to date: %d/%d (%s %%)\nmajor behind: %d/%d (%s %%)\n"
        "minor behind: %d/%d (%s %%)\npatch behind: %d/%d (%s %%)",
        label or "Dependencies",
        up_to_date, total, percents.up_to_date,
        major, total, percents.major,
        minor, total, percents.minor,
        patch, total, percents.patch,
    )
    return StatsSnapshot(counts=counts, percents=percents, dependencies=buckets)


def filter_ignored(records: Iterable[Any], ignore: Iterable[str]) -> List[DependencyRecord]:
    """Drop records whose name matches ``ignore`` (case-insensitive, exact)."""
    ignored = {name.lower() for name in ignore}
    kept = []
    for item in records:
        record = _coerce_record(item)
        if record.name.lower() in ignored:
            logger.debug("Ignoring %s", record.name)
            continue
        kept.append(record)
    return kept


_TYPE_LABELS = {
    DependencyType.RUNTIME: "Dependencies",
    DependencyType.DEVELOPMENT: "Dev Dependencies",
}


def aggregate_by_type(
    records_by_type: Mapping[DependencyType, Iterable[Any]],
    counts_by_type: Mapping[DependencyType, int],
    ignore: Iterable[str] = (),
) -> TypedStatsSnapshot:
    """Aggregate each dependency type on its own plus a combined view.

    The ignore list is applied to the development bucket and to the combined
    view. Ignored dependencies stay part of the declared totals.
    """
    ignore = [name.lower() for name in ignore]
    by_type: Dict[DependencyType, StatsSnapshot] = {}
    combined: List[DependencyRecord] = []

    for dep_type in DependencyType:
        records = [_coerce_record(item) for item in records_by_type.get(dep_type, ())]
        mismatched = [r.name for r in records if r.dependency_type is not dep_type]
        if mismatched:
            raise InvalidRecordError(
                f"Records {mismatched} are not of type {dep_type.value}"
            )
        if dep_type is DependencyType.DEVELOPMENT:
            records = filter_ignored(records, ignore)
        by_type[dep_type] = aggregate(
            counts_by_type.get(dep_type, 0), records, label=_TYPE_LABELS[dep_type]
        )
        combined.extend(records)

    overall = aggregate(
        sum(counts_by_type.get(dep_type, 0) for dep_type in DependencyType),
        filter_ignored(combined, ignore),
        label="All dependencies (including dev)",
    )
    return TypedStatsSnapshot(overall=overall, by_type=by_type)
