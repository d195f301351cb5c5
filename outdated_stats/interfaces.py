"""
Interfaces for package-manager resolvers.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Union

from .models import DependencyRecord


class OutdatedResolver(Protocol):
    """List the outdated dependencies of a project with a package manager."""

    package_manager: str

    def list_outdated(self, base_path: Optional[Union[str, Path]] = None) -> List[DependencyRecord]:
        ...
