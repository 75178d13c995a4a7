"""Node.js package.json and package-lock.json parsing."""

import json
import logging
from pathlib import Path

from .detect import FLAT, NESTED, detect_lockfile_version, identify
from .errors import ProjectFileError
from .models import Project

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
PACKAGE_LOCK = "package-lock.json"

_NODE_MODULES = "node_modules/"


def _load_json_object(content: str, path) -> dict:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ProjectFileError(path, f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise ProjectFileError(path, "expected a JSON object")
    return data


def parse_package_json(content: str, path=PACKAGE_JSON) -> dict:
    """Parse package.json content.

    Args:
        content: The package.json file content
        path: File name used in error messages

    Returns:
        The manifest as a dict
    """
    return _load_json_object(content, path)


def _install_path_names(key: str) -> list[str]:
    """Split 'node_modules/a/node_modules/@s/b' into ['a', '@s/b']."""
    return [part.rstrip("/") for part in key.split(_NODE_MODULES)[1:]]


def _flat_entry_to_record(entry: dict, packages: dict) -> dict:
    if entry.get("link"):
        # Symlinked package: the installed content lives at the link target
        target = packages.get(entry.get("resolved", ""), {})
        entry = {**target, **{k: v for k, v in entry.items() if k != "link"}}

    record = {"version": entry.get("version")}
    requires = {
        **entry.get("dependencies", {}),
        **entry.get("optionalDependencies", {}),
    }
    if requires:
        record["requires"] = requires
    for flag in ("dev", "optional"):
        if entry.get(flag):
            record[flag] = True
    if entry.get("inBundle"):
        record["bundled"] = True
    return record


def flat_to_nested(packages: dict) -> dict:
    """Convert a lockfileVersion 3 "packages" map to the nested layout.

    Args:
        packages: The "packages" section keyed by install path

    Returns:
        A lock dict with the nested "dependencies" section
    """
    nested: dict = {"dependencies": {}}

    for key, entry in packages.items():
        if not key.startswith(_NODE_MODULES):
            # "" is the project itself; anything else is a workspace folder
            continue

        names = _install_path_names(key)
        container = nested
        for name in names[:-1]:
            container = container.setdefault("dependencies", {}).setdefault(name, {})

        slot = container.setdefault("dependencies", {}).setdefault(names[-1], {})
        slot.update(_flat_entry_to_record(entry, packages))

    return nested


def parse_package_lock(content: str, path=PACKAGE_LOCK) -> tuple[dict, int]:
    """Parse package-lock.json content into the nested lock layout.

    Returns:
        Tuple of (nested lock dict, lockfileVersion)
    """
    lock = _load_json_object(content, path)
    version = detect_lockfile_version(lock)
    layout = identify(lock)

    if layout == NESTED:
        return lock, version
    if layout == FLAT:
        logger.debug("Converting lockfileVersion %s packages section", version)
        nested = flat_to_nested(lock["packages"])
        nested["lockfileVersion"] = version
        return nested, version

    raise ProjectFileError(
        path, f"unsupported lockfileVersion {version}: no dependencies or packages section"
    )


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ProjectFileError(path, "file not found") from e
    except OSError as e:
        raise ProjectFileError(path, f"cannot read file ({e.strerror})") from e


def load_project(directory=None) -> Project:
    """Read package.json and package-lock.json from a project directory.

    Args:
        directory: Project root; defaults to the current working directory

    Returns:
        The parsed Project
    """
    root = Path(directory) if directory is not None else Path.cwd()
    manifest_path = root / PACKAGE_JSON
    lock_path = root / PACKAGE_LOCK

    manifest = parse_package_json(_read(manifest_path), manifest_path)
    lock, version = parse_package_lock(_read(lock_path), lock_path)
    logger.debug("Loaded %s (lockfileVersion %s)", lock_path, version)

    return Project(manifest=manifest, lock=lock, lockfile_version=version)
