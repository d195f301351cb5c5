"""
Read the package manifest (package.json) to count declared dependencies.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .models import DependencyType


logger = logging.getLogger(__name__)

PACKAGE_FILE = "package.json"


class ManifestError(ValueError):
    """Raised when package.json exists but cannot be parsed."""


def _base(base_path: Optional[Union[str, Path]]) -> Path:
    return Path(base_path) if base_path else Path.cwd()


def load_package_file(base_path: Optional[Union[str, Path]] = None) -> Dict:
    """Load package.json from ``base_path``.

    Returns an empty dict when the file does not exist.

    Raises:
        ManifestError: If the file is not valid JSON or not a JSON object.
    """
    pkg_path = _base(base_path) / PACKAGE_FILE
    if not pkg_path.exists():
        logger.warning("Package file does not exist at path %s", pkg_path.parent)
        return {}
    try:
        with open(pkg_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error('Error parsing json file "%s"', pkg_path)
        raise ManifestError(f"Invalid JSON in {pkg_path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"{pkg_path} does not contain a JSON object")
    return data


def _section(pkg_file: Dict, dep_type: DependencyType) -> Dict:
    section = pkg_file.get(dep_type.value) or {}
    return section if isinstance(section, dict) else {}


def count_dependencies_by_type(
    base_path: Optional[Union[str, Path]] = None,
) -> Dict[DependencyType, int]:
    """Number of declared dependencies per type."""
    pkg_file = load_package_file(base_path)
    return {dep_type: len(_section(pkg_file, dep_type)) for dep_type in DependencyType}


def count_dependencies(base_path: Optional[Union[str, Path]] = None) -> int:
    """Number of declared dependencies (runtime and development)."""
    return sum(count_dependencies_by_type(base_path).values())


def declared_dependency_types(
    base_path: Optional[Union[str, Path]] = None,
) -> Dict[str, DependencyType]:
    """Map each declared dependency name to its type.

    A name listed in both sections is reported as a development dependency.
    """
    pkg_file = load_package_file(base_path)
    declared = {}
    for dep_type in (DependencyType.RUNTIME, DependencyType.DEVELOPMENT):
        for name in _section(pkg_file, dep_type):
            declared[name] = dep_type
    return declared
