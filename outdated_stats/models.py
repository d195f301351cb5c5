"""
Core data models for outdated dependency stats.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class InvalidRecordError(ValueError):
    """Raised when a dependency record is missing fields or has the wrong shape."""


class DependencyType(str, Enum):
    """Dependency type as declared in the package manifest."""

    RUNTIME = "dependencies"
    DEVELOPMENT = "devDependencies"

    @classmethod
    def parse(cls, value: Any) -> "DependencyType":
        """Accept either the enum, its manifest key or its short name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip()
            for member in cls:
                if normalized in (member.value, member.name.lower()):
                    return member
        raise InvalidRecordError(f"Unknown dependency type: {value!r}")


class Classification(str, Enum):
    """Outcome of comparing a current version against the latest one."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    UNCHANGED = "unchanged"
    UNRESOLVABLE = "unresolvable"

    @property
    def is_outdated(self) -> bool:
        return self in SEVERITIES


# Severities in reporting order; absence of a severity means up to date.
SEVERITIES: Tuple[Classification, ...] = (
    Classification.MAJOR,
    Classification.MINOR,
    Classification.PATCH,
)


@dataclass(frozen=True)
class VersionTriple:
    """A parsed ``major.minor.patch`` version."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


_REQUIRED_RECORD_FIELDS = (
    ("name", "name"),
    ("current_version", "currentVersion"),
    ("latest_version", "latestVersion"),
    ("dependency_type", "dependencyType"),
)


@dataclass(frozen=True)
class DependencyRecord:
    """A single outdated dependency as reported by the package manager."""

    name: str
    current_version: str
    latest_version: str
    dependency_type: DependencyType
    wanted_version: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DependencyRecord":
        """Build a record from a loose mapping (snake_case or camelCase keys).

        Raises:
            InvalidRecordError: If a required field is missing or not a string.
        """
        if not isinstance(data, Mapping):
            raise InvalidRecordError(
                f"Dependency record must be a mapping, got {type(data).__name__}"
            )
        values: Dict[str, Any] = {}
        for attr, alias in _REQUIRED_RECORD_FIELDS:
            if attr in data:
                value = data[attr]
            elif alias in data:
                value = data[alias]
            else:
                raise InvalidRecordError(
                    f"Dependency record {data.get('name', '<unnamed>')!r} is missing '{alias}'"
                )
            if attr != "dependency_type" and not isinstance(value, str):
                raise InvalidRecordError(
                    f"Dependency record field '{alias}' must be a string, got {value!r}"
                )
            values[attr] = value

        wanted = data.get("wanted_version", data.get("wantedVersion"))
        return cls(
            name=values["name"],
            current_version=values["current_version"],
            latest_version=values["latest_version"],
            dependency_type=DependencyType.parse(values["dependency_type"]),
            wanted_version=wanted if isinstance(wanted, str) else None,
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "name": self.name,
            "current": self.current_version,
            "wanted": self.wanted_version,
            "latest": self.latest_version,
            "type": self.dependency_type.value,
        }


def _empty_buckets() -> Dict[Classification, Tuple[DependencyRecord, ...]]:
    return {severity: () for severity in SEVERITIES}


@dataclass(frozen=True)
class StatsCounts:
    """Absolute counts for a stats snapshot."""

    total: int
    up_to_date: int
    major: int
    minor: int
    patch: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "upToDate": self.up_to_date,
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
        }


@dataclass(frozen=True)
class StatsPercents:
    """Percentages formatted with exactly two decimals."""

    up_to_date: str
    major: str
    minor: str
    patch: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "upToDate": self.up_to_date,
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
        }


@dataclass(frozen=True)
class StatsSnapshot:
    """Counts, percentages and grouped records for one set of dependencies."""

    counts: StatsCounts
    percents: StatsPercents
    dependencies: Dict[Classification, Tuple[DependencyRecord, ...]] = field(
        default_factory=_empty_buckets
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencies": {
                severity.value: [record.to_dict() for record in self.dependencies.get(severity, ())]
                for severity in SEVERITIES
            },
            "counts": self.counts.to_dict(),
            "percents": self.percents.to_dict(),
        }


@dataclass(frozen=True)
class TypedStatsSnapshot:
    """Per dependency type snapshots plus the combined view."""

    overall: StatsSnapshot
    by_type: Dict[DependencyType, StatsSnapshot]

    def to_dict(self) -> Dict[str, Any]:
        result = self.overall.to_dict()
        result["byType"] = {
            dep_type.value: snapshot.to_dict()
            for dep_type, snapshot in self.by_type.items()
        }
        return result


@dataclass(frozen=True)
class PackageStatsResult:
    """Stats for a single monorepo sub-package, or the reason they are missing."""

    name: str
    path: str
    stats: Optional[TypedStatsSnapshot] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
