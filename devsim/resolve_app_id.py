"""
devsim Bundle Identifier Resolver

Finds the iOS bundle identifier of a project by looking, in order, at the
Xcode project, the app's Info.plist and the app config (app.json).
"""

import json
import logging
import plistlib
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from xml.parsers.expat import ExpatError

from .pbxproj import XcodeProject, find_xcode_project


logger = logging.getLogger(__name__)

APP_CONFIG_FILES = ("app.config.json", "app.json")
PLACEHOLDER_PREFIX = "$("

# Info.plist files that never belong to the app target
_IGNORED_PLIST_DIRS = ("Pods", "build")


def is_valid_bundle_id(value: Any) -> bool:
    """A usable identifier: a non-empty string that is not a build variable."""
    return isinstance(value, str) and bool(value.strip()) and not value.startswith(PLACEHOLDER_PREFIX)


def get_bundle_id_from_xcode_project(project_root: Path) -> Optional[str]:
    project_path = find_xcode_project(project_root)
    if project_path is None:
        return None
    return XcodeProject.from_path(project_path).get_bundle_identifier()


def get_info_plist_path(project_root: Path) -> Optional[Path]:
    """
    Locate the app's Info.plist.

    Uses the INFOPLIST_FILE build setting when the Xcode project can be
    read, otherwise the first `ios/<name>/Info.plist` outside Pods and test
    targets.
    """
    project_path = find_xcode_project(project_root)
    if project_path is not None:
        try:
            path = XcodeProject.from_path(project_path).get_info_plist_path()
        except (OSError, ValueError) as e:
            logger.debug("Could not read INFOPLIST_FILE from %s: %s", project_path, e)
        else:
            if path is not None and path.is_file():
                return path

    ios_dir = project_root / "ios"
    candidates = sorted(
        p for p in ios_dir.glob("*/Info.plist")
        if p.parent.name not in _IGNORED_PLIST_DIRS and not p.parent.name.endswith("Tests")
    )
    return candidates[0] if candidates else None


def get_bundle_id_from_info_plist(project_root: Path) -> Optional[str]:
    plist_path = get_info_plist_path(project_root)
    if plist_path is None:
        return None
    with open(plist_path, "rb") as f:
        data = plistlib.load(f)
    return data.get("CFBundleIdentifier")


def read_app_config(project_root: Path) -> Dict[str, Any]:
    """
    Load the static app config.

    app.config.json wins over app.json. A top-level "expo" key is unwrapped.

    Returns:
        The config dict; empty if no config file exists
    """
    for name in APP_CONFIG_FILES:
        path = project_root / name
        if not path.is_file():
            continue
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        return data.get("expo", data)
    return {}


def get_bundle_id_from_app_config(project_root: Path) -> Optional[str]:
    ios = read_app_config(project_root).get("ios") or {}
    return ios.get("bundleIdentifier")


SOURCES: List[Callable[[Path], Optional[str]]] = [
    get_bundle_id_from_xcode_project,
    get_bundle_id_from_info_plist,
    get_bundle_id_from_app_config,
]


def resolve_app_id(project_root: Union[str, Path]) -> Optional[str]:
    """
    Resolve the best possible bundle identifier for a project.

    1. The PRODUCT_BUNDLE_IDENTIFIER of the Xcode project.
    2. CFBundleIdentifier in the app's Info.plist.
    3. ios.bundleIdentifier in the app config.

    A source that cannot be read is skipped.

    Args:
        project_root: Root directory of the project

    Returns:
        The first usable bundle identifier, or None
    """
    project_root = Path(project_root)
    for source in SOURCES:
        try:
            bundle_id = source(project_root)
        except (OSError, ValueError, AttributeError, ExpatError) as e:
            logger.debug("%s failed for %s: %s", source.__name__, project_root, e)
            continue
        if is_valid_bundle_id(bundle_id):
            logger.debug("Resolved %s via %s", bundle_id, source.__name__)
            return bundle_id
    return None
