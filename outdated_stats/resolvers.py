"""
Package-manager resolvers that list outdated dependencies.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .interfaces import OutdatedResolver
from .manifest import declared_dependency_types
from .models import DependencyRecord, DependencyType, InvalidRecordError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120

# npm leaves "current" out for dependencies that are declared but not installed.
MISSING_VERSION = "MISSING"


class OutdatedCommandError(RuntimeError):
    """Raised when the outdated command fails or its output cannot be parsed."""


def is_counted_type(value) -> bool:
    """Whether ``value`` is one of the manifest sections the totals count.

    optionalDependencies and peerDependencies are reported by the package
    managers but left out of the manifest totals.
    """
    try:
        DependencyType.parse(value)
    except InvalidRecordError:
        return False
    return True


class _CommandResolver:
    package_manager = ""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def _run(self, cmd: Sequence[str]) -> subprocess.CompletedProcess:
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(
                list(cmd),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise OutdatedCommandError(f"{self.package_manager} executable not found") from e
        except subprocess.TimeoutExpired as e:
            raise OutdatedCommandError(
                f"{self.package_manager} outdated timed out after {self.timeout}s"
            ) from e


class YarnOutdatedResolver(_CommandResolver, OutdatedResolver):
    """Resolver for ``yarn outdated --json`` (yarn classic JSON-lines output)."""

    package_manager = "yarn"

    # Layout used by yarn before the table head was reliable.
    LEGACY_COLUMNS = {"Package": 0, "Current": 1, "Wanted": 2, "Latest": 3, "Package Type": 4}

    def list_outdated(self, base_path: Optional[Union[str, Path]] = None) -> List[DependencyRecord]:
        cmd = ["yarn", "outdated", "--json"]
        if base_path:
            cmd += ["--cwd", str(base_path)]
        result = self._run(cmd)

        # yarn exits non-zero when something is outdated
        if result.returncode == 0:
            if result.stderr.strip():
                logger.error("Yarn outdated command emitted an error: %s", result.stderr)
                raise OutdatedCommandError(result.stderr.strip())
            return []
        return self.parse_output(result.stdout)

    def parse_output(self, output: str) -> List[DependencyRecord]:
        table = self._find_table(output)
        head = table.get("head") or []
        body = table.get("body") or []
        columns = self._column_indexes(head)

        records = []
        for row in body:
            try:
                name = row[columns["Package"]]
                dep_type = row[columns["Package Type"]]
                if not is_counted_type(dep_type):
                    logger.warning("Skipping %s: %s are not counted", name, dep_type)
                    continue
                records.append(
                    DependencyRecord.from_mapping(
                        {
                            "name": name,
                            "currentVersion": row[columns["Current"]],
                            "wantedVersion": row[columns["Wanted"]],
                            "latestVersion": row[columns["Latest"]],
                            "dependencyType": dep_type,
                        }
                    )
                )
            except (IndexError, TypeError, InvalidRecordError) as e:
                raise OutdatedCommandError(f"Unexpected yarn outdated row {row!r}: {e}") from e
        return records

    def _find_table(self, output: str) -> Dict:
        for line in output.splitlines():
            line = line.strip()
            if not line.startswith("{"):
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(message, dict) and message.get("type") == "table":
                logger.debug("Output of parsing yarn outdated command: %s", line)
                return message.get("data") or {}
        logger.error("Error parsing results of yarn outdated command: no table found")
        raise OutdatedCommandError("No table found in yarn outdated output")

    def _column_indexes(self, head: Iterable[str]) -> Dict[str, int]:
        head = list(head)
        columns = dict(self.LEGACY_COLUMNS)
        for column in columns:
            if column in head:
                columns[column] = head.index(column)
        return columns


class NpmOutdatedResolver(_CommandResolver, OutdatedResolver):
    """Resolver for ``npm outdated --json``."""

    package_manager = "npm"

    def list_outdated(self, base_path: Optional[Union[str, Path]] = None) -> List[DependencyRecord]:
        cmd = ["npm", "outdated", "--json"]
        if base_path:
            cmd += ["--prefix", str(base_path)]
        result = self._run(cmd)

        # npm exits non-zero when something is outdated
        if result.returncode == 0:
            if result.stderr.strip():
                logger.error("npm outdated command emitted an error: %s", result.stderr)
                raise OutdatedCommandError(result.stderr.strip())
            if not result.stdout.strip():
                return []
        elif not result.stdout.strip():
            logger.error("npm outdated command failed without output: %s", result.stderr)
            raise OutdatedCommandError(
                result.stderr.strip() or f"npm outdated exited with code {result.returncode}"
            )
        return self.parse_output(result.stdout, declared_dependency_types(base_path))

    def parse_output(
        self,
        output: str,
        declared: Optional[Mapping[str, DependencyType]] = None,
    ) -> List[DependencyRecord]:
        """Parse ``npm outdated --json`` output.

        Args:
            output: Raw stdout of the command
            declared: Manifest dependency names mapped to their type. Names
                missing from it (optional or peer dependencies) are skipped.
                When None every entry counts as a runtime dependency.
        """
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            logger.error("Error parsing results of npm outdated command: %s", e)
            raise OutdatedCommandError(f"Invalid npm outdated output: {e}") from e
        if not isinstance(data, dict):
            raise OutdatedCommandError("npm outdated output is not a JSON object")
        if "error" in data and isinstance(data["error"], dict):
            raise OutdatedCommandError(data["error"].get("summary") or "npm outdated failed")

        records = []
        for name, info in data.items():
            if isinstance(info, list):
                # Workspaces report one entry per dependent package
                info = info[0] if info else {}
            if not isinstance(info, dict):
                raise OutdatedCommandError(f"Unexpected npm outdated entry for {name}: {info!r}")
            if declared is None:
                dep_type = DependencyType.RUNTIME
            elif name in declared:
                dep_type = declared[name]
            else:
                logger.warning(
                    "Skipping %s: not listed under dependencies or devDependencies", name
                )
                continue
            try:
                records.append(
                    DependencyRecord.from_mapping(
                        {
                            "name": name,
                            "currentVersion": info.get("current", MISSING_VERSION),
                            "wantedVersion": info.get("wanted"),
                            "latestVersion": info.get("latest"),
                            "dependencyType": dep_type,
                        }
                    )
                )
            except InvalidRecordError as e:
                raise OutdatedCommandError(f"Unexpected npm outdated entry for {name}: {e}") from e
        return records


RESOLVERS = {
    "yarn": YarnOutdatedResolver,
    "npm": NpmOutdatedResolver,
}


def get_resolver(package_manager: str, timeout: float = DEFAULT_TIMEOUT) -> OutdatedResolver:
    try:
        resolver_cls = RESOLVERS[package_manager.lower()]
    except KeyError:
        raise ValueError(f"Unsupported package manager: {package_manager}") from None
    return resolver_cls(timeout=timeout)


def group_by_type(records: Iterable[DependencyRecord]) -> Dict[DependencyType, List[DependencyRecord]]:
    grouped: Dict[DependencyType, List[DependencyRecord]] = {dep_type: [] for dep_type in DependencyType}
    for record in records:
        grouped[record.dependency_type].append(record)
    return grouped
