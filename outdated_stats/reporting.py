"""
Reporting and export utilities.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Union

import pandas as pd

from .models import SEVERITIES, PackageStatsResult, StatsSnapshot, TypedStatsSnapshot


logger = logging.getLogger(__name__)

OUTDATED_COLUMNS = ["name", "current", "wanted", "latest", "type", "severity"]


def log_summary(label: str, snapshot: StatsSnapshot) -> None:
    counts = snapshot.counts
    percents = snapshot.percents
    logger.info(label)
    logger.info("up to date: %d/%d (%s %%)", counts.up_to_date, counts.total, percents.up_to_date)
    logger.info("major behind: %d/%d (%s %%)", counts.major, counts.total, percents.major)
    logger.info("minor behind: %d/%d (%s %%)", counts.minor, counts.total, percents.minor)
    logger.info("patch behind: %d/%d (%s %%)", counts.patch, counts.total, percents.patch)


def log_typed_summary(stats: TypedStatsSnapshot, name: str = "") -> None:
    prefix = f"{name}: " if name else ""
    logger.info("=" * 60)
    log_summary(f"{prefix}All dependencies (including dev)", stats.overall)
    for dep_type, snapshot in stats.by_type.items():
        logger.info("-" * 60)
        log_summary(f"{prefix}{dep_type.value}", snapshot)
    logger.info("=" * 60)


def save_results_json(results: Union[Dict, TypedStatsSnapshot], output_file: Path) -> Path:
    if isinstance(results, TypedStatsSnapshot):
        results = results.to_dict()
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w') as f:
        json.dump(results, f, indent=2, default=str)
    return output_file


def outdated_dataframe(snapshot: StatsSnapshot) -> pd.DataFrame:
    """One row per outdated dependency, ordered major, minor, patch."""
    rows = []
    for severity in SEVERITIES:
        for record in snapshot.dependencies.get(severity, ()):
            row = record.to_dict()
            row["severity"] = severity.value
            rows.append(row)
    return pd.DataFrame(rows, columns=OUTDATED_COLUMNS)


def export_outdated_csv(snapshot: StatsSnapshot, output_dir: Path, name: str) -> Path | None:
    df = outdated_dataframe(snapshot)
    if df.empty:
        return None
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_file = output_dir / f"{name}_outdated.csv"
    df.to_csv(csv_file, index=False)
    return csv_file


def export_worksheets(snapshot: StatsSnapshot, output_dir: Path, name: str) -> Path | None:
    df = outdated_dataframe(snapshot)
    if df.empty:
        return None
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    excel_file = output_dir / f"{name}_worksheets.xlsx"
    with pd.ExcelWriter(excel_file, engine='openpyxl') as writer:
        for severity, severity_df in df.groupby("severity", sort=False):
            severity_df.drop(columns=["severity"]).to_excel(
                writer, sheet_name=str(severity), index=False
            )
    return excel_file


def monorepo_summary_frame(results: Iterable[PackageStatsResult]) -> pd.DataFrame:
    rows = []
    for result in results:
        row = {"package": result.name, "path": result.path, "status": "ok", "error": None}
        if result.ok and result.stats is not None:
            counts = result.stats.overall.counts
            percents = result.stats.overall.percents
            row.update(
                total=counts.total,
                up_to_date=counts.up_to_date,
                major=counts.major,
                minor=counts.minor,
                patch=counts.patch,
                up_to_date_percent=percents.up_to_date,
                major_percent=percents.major,
                minor_percent=percents.minor,
                patch_percent=percents.patch,
            )
        else:
            row.update(status="failed", error=result.error)
        rows.append(row)
    columns = [
        "package",
        "path",
        "total",
        "up_to_date",
        "major",
        "minor",
        "patch",
        "up_to_date_percent",
        "major_percent",
        "minor_percent",
        "patch_percent",
        "status",
        "error",
    ]
    return pd.DataFrame(rows, columns=columns)


def export_monorepo_summary_csv(results: Iterable[PackageStatsResult], output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    summary_file = output_dir / "packages_summary.csv"
    monorepo_summary_frame(results).to_csv(summary_file, index=False)
    return summary_file
