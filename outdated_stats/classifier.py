"""
Version drift classification.

Decides whether the gap between the installed and the latest version of a
dependency is a major, minor or patch change. Versions below 1.0.0 follow
the npm convention that the left-most non-zero component carries the
breaking-change signal, so ``0.1.x -> 0.2.x`` is a major change and
``0.0.1 -> 0.0.2`` is one as well.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .models import Classification, VersionTriple


logger = logging.getLogger(__name__)

# Reported by yarn when a dependency points outside the registry (git URL, tarball).
EXOTIC_VERSION = "exotic"

_VERSION_RE = re.compile(
    r"^[=v]?(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)


def parse_version(value: Optional[str]) -> Optional[VersionTriple]:
    """Parse ``major.minor.patch`` into a :class:`VersionTriple`.

    Pre-release and build suffixes are ignored. Returns None for anything
    that is not a three-part version, including the ``exotic`` sentinel.
    """
    if not isinstance(value, str):
        return None
    match = _VERSION_RE.match(value.strip())
    if match is None:
        return None
    return VersionTriple(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
    )


def classify(current: Optional[str], latest: Optional[str]) -> Classification:
    """Classify the drift between ``current`` and ``latest``.

    Args:
        current: Installed version string
        latest: Latest version string known to the package manager

    Returns:
        MAJOR, MINOR or PATCH for an outdated dependency, UNCHANGED when both
        versions are equal and UNRESOLVABLE when either side cannot be parsed.
    """
    if current == EXOTIC_VERSION or latest == EXOTIC_VERSION:
        logger.debug("Cannot compare %s -> %s: exotic version", current, latest)
        return Classification.UNRESOLVABLE

    current_triple = parse_version(current)
    latest_triple = parse_version(latest)
    if current_triple is None or latest_triple is None:
        logger.debug("Cannot compare %s -> %s: not a major.minor.patch version", current, latest)
        return Classification.UNRESOLVABLE

    pre_major = current_triple.major == 0 or latest_triple.major == 0
    pre_minor = pre_major and (current_triple.minor == 0 or latest_triple.minor == 0)

    if current_triple.major != latest_triple.major:
        result = Classification.MAJOR
    elif current_triple.minor != latest_triple.minor:
        # 0.x.y: a minor bump is breaking
        result = Classification.MAJOR if pre_major else Classification.MINOR
    elif current_triple.patch != latest_triple.patch:
        if pre_minor:
            # 0.0.x: every patch bump is breaking
            result = Classification.MAJOR
        elif pre_major:
            result = Classification.MINOR
        else:
            result = Classification.PATCH
    else:
        result = Classification.UNCHANGED

    logger.debug(
        "Classified %s -> %s as %s (pre_major=%s, pre_minor=%s)",
        current_triple,
        latest_triple,
        result.value,
        pre_major,
        pre_minor,
    )
    return result
