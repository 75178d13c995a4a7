"""npm semver helpers: version precedence and range intersection."""

import logging
import re
from functools import lru_cache

from semantic_version import NpmSpec, Version

logger = logging.getLogger(__name__)

# npm allows whitespace between a comparator and its version: ">= 1.2.3"
_SPACED_OPERATOR = re.compile(r"(<=|>=|<|>|=|\^|~)\s+")


@lru_cache(maxsize=None)
def parse_version(version: str | None) -> Version | None:
    """Parse an installed version, or None if it is not valid semver.

    Git and tarball installs record a URL instead of a version.
    """
    if not version:
        return None
    try:
        return Version(version.strip().lstrip("v="))
    except ValueError:
        logger.debug("Not a semver version: %s", version)
        return None


@lru_cache(maxsize=None)
def parse_range(expression: str | None) -> NpmSpec | None:
    """Parse an npm range, or None for git/file/alias specs."""
    if expression is None:
        return None
    try:
        return NpmSpec(_SPACED_OPERATOR.sub(r"\1", expression.strip()) or "*")
    except ValueError:
        logger.debug("Not a semver range: %s", expression)
        return None


def precedence(version: str | None) -> Version | None:
    """The version without build metadata, which does not affect ordering."""
    parsed = parse_version(version)
    if parsed is None:
        return None
    return parsed.truncate("prerelease")


def version_gt(a: str | None, b: str | None) -> bool:
    """True if a has strictly higher precedence than b; False if either is invalid."""
    va, vb = precedence(a), precedence(b)
    if va is None or vb is None:
        return False
    return va > vb


def _bound_versions(clause) -> set[Version]:
    """Collect the comparator targets of a parsed spec."""
    found = set()
    pending = [clause]
    while pending:
        current = pending.pop()
        target = getattr(current, "target", None)
        if target is not None:
            found.add(target)
        pending.extend(getattr(current, "clauses", ()))
    return found


def _candidates(*specs: NpmSpec) -> set[Version]:
    # An intersection of comparator sets is an interval; when it is not
    # empty its lowest member is 0.0.0, one of the comparator targets, or
    # the first release after a target.
    candidates = {Version("0.0.0")}
    for spec in specs:
        for target in _bound_versions(spec.clause):
            candidates.add(target)
            candidates.add(target.truncate())
            candidates.add(target.next_patch())
    return candidates


def intersects(range_a: str | None, range_b: str | None) -> bool:
    """True if some concrete version satisfies both npm ranges.

    Ranges that are not semver ranges intersect nothing.
    """
    spec_a, spec_b = parse_range(range_a), parse_range(range_b)
    if spec_a is None or spec_b is None:
        return False

    return any(
        spec_a.match(candidate) and spec_b.match(candidate)
        for candidate in _candidates(spec_a, spec_b)
    )
