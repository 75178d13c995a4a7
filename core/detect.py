"""Lock file format detection."""

NESTED = "nested"  # lockfileVersion 1 and 2: nested "dependencies" section
FLAT = "flat"  # lockfileVersion 3: flat "packages" section keyed by install path
UNKNOWN = "unknown"


def detect_lockfile_version(lock: dict) -> int:
    """Return the lockfileVersion, defaulting to 1 for old npm releases."""
    version = lock.get("lockfileVersion", 1)
    if isinstance(version, int) and not isinstance(version, bool):
        return version
    return 1


def identify(lock: dict) -> str:
    """Detect which section of a package-lock.json describes the install.

    Args:
        lock: The parsed lock file

    Returns:
        Detected layout: 'nested', 'flat', or 'unknown'
    """
    # Version 2 files carry both sections; the nested one is authoritative
    # for older tooling and holds the same data.
    if isinstance(lock.get("dependencies"), dict):
        return NESTED
    if isinstance(lock.get("packages"), dict):
        return FLAT

    # A project without dependencies has neither section
    if detect_lockfile_version(lock) <= 2:
        return NESTED

    return UNKNOWN
