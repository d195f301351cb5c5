"""
Ignore lists: built-in defaults plus dependabot ``ignore`` settings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import yaml


logger = logging.getLogger(__name__)

DEPENDABOT_CONFIG = Path(".github") / "dependabot.yml"

# Ignored for every project on top of any dependabot settings.
DEFAULT_IGNORED_DEV_DEPENDENCIES = ("@types/node",)


def load_dependabot_config(repo_root: Optional[Union[str, Path]] = None) -> Dict:
    """Load ``.github/dependabot.yml`` from ``repo_root``.

    Returns an empty dict when the file is missing or is not a YAML mapping.
    """
    config_path = (Path(repo_root) if repo_root else Path.cwd()) / DEPENDABOT_CONFIG
    if not config_path.exists():
        logger.debug("%s not found at repo base, skipping search for ignore", DEPENDABOT_CONFIG)
        return {}

    logger.debug("%s found, loading contents", DEPENDABOT_CONFIG)
    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(
            "Error parsing %s, confirm it is valid yaml in order for ignore settings "
            "to be picked up: %s",
            DEPENDABOT_CONFIG,
            e,
        )
        return {}

    if not isinstance(config, dict):
        logger.warning("%s is not a valid yaml object, skipping check for ignore", DEPENDABOT_CONFIG)
        return {}
    return config


def _trim_slashes(value: str) -> str:
    return value.strip("/")


def load_ignore_from_dependabot_config(
    repo_root: Optional[Union[str, Path]] = None,
    directory: Optional[str] = None,
) -> List[str]:
    """Dependency names ignored by the npm dependabot entry for ``directory``.

    Args:
        repo_root: Repository root holding ``.github/dependabot.yml``
        directory: Project directory relative to the repo root. When empty the
            entry for ``/`` is used.

    Returns:
        Lower-cased dependency names.
    """
    config = load_dependabot_config(repo_root)
    logger.debug("Searching dependabot config for ignore settings matching %r", directory or "/")

    for update in config.get("updates") or []:
        if not isinstance(update, dict) or update.get("package-ecosystem") != "npm":
            continue
        configured = str(update.get("directory") or "")
        if directory:
            matches = _trim_slashes(configured) == _trim_slashes(str(directory))
        else:
            matches = configured == "/"
        if not matches:
            continue

        names = []
        for setting in update.get("ignore") or []:
            if isinstance(setting, dict) and setting.get("dependency-name"):
                names.append(str(setting["dependency-name"]).lower())
        return names
    return []


def build_ignore_list(
    repo_root: Optional[Union[str, Path]] = None,
    directory: Optional[str] = None,
    extra: Iterable[str] = (),
    use_dependabot: bool = True,
    defaults: Iterable[str] = DEFAULT_IGNORED_DEV_DEPENDENCIES,
) -> List[str]:
    """Combine default, dependabot and user supplied ignore names.

    Names are lower-cased and deduplicated, keeping first-seen order.
    """
    names: List[str] = list(defaults)
    if use_dependabot:
        names += load_ignore_from_dependabot_config(repo_root, directory)
    names += list(extra)

    seen = set()
    result = []
    for name in names:
        key = name.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(key)
    return result


def dependabot_directory(
    path: Union[str, Path],
    repo_root: Optional[Union[str, Path]] = None,
) -> Optional[str]:
    """Dependabot ``directory`` key for ``path``, relative to ``repo_root``.

    Returns None for the repository root itself. Paths outside the repository
    are returned as absolute POSIX paths and match no dependabot entry.
    """
    root = (Path(repo_root) if repo_root else Path.cwd()).resolve()
    target = Path(path)
    if not target.is_absolute():
        target = root / target
    target = target.resolve()
    if target == root:
        return None
    try:
        return target.relative_to(root).as_posix()
    except ValueError:
        return target.as_posix()
