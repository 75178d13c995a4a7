"""Grouping, classification and ordering of duplicate packages."""

import logging
from collections import Counter
from functools import cmp_to_key

from .errors import MissingRequirementError
from .models import (
    DuplicateGroup,
    DuplicateInstance,
    DupReason,
    LogicalNode,
    Statistics,
)
from .ranges import intersects, precedence, version_gt
from .tree import LockIndex, count_dependencies, walk

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " > "


def group_dependencies(root: LogicalNode) -> dict[str, list[LogicalNode]]:
    """Group installed packages by name, in first-seen traversal order.

    The root is the project itself and is not part of any group.
    """
    groups: dict[str, list[LogicalNode]] = {}
    for node in walk(root):
        if node is root:
            continue
        groups.setdefault(node.name, []).append(node)
    return groups


def dependency_path(parent: LogicalNode) -> str:
    """Names from the top-level ancestor down to parent, excluding the root.

    Each step up follows the first parent only. A direct dependency of the
    project has the empty path.
    """
    names = []
    node = parent
    while not node.is_root:
        names.append(node.name)
        node = node.required_by[0]
    return PATH_SEPARATOR.join(reversed(names))


def _annotate(node: LogicalNode, lock_index: LockIndex) -> DuplicateInstance:
    instance = DuplicateInstance(node=node)
    for parent in node.required_by:
        requires = lock_index.lookup(parent).requires
        if node.name not in requires:
            raise MissingRequirementError(node, parent)
        instance.version_ranges.append(requires[node.name])
        instance.paths.append(dependency_path(parent))
    return instance


def find_top_hoisted(
    instances: list[DuplicateInstance], lock_index: LockIndex
) -> DuplicateInstance | None:
    """First instance installed at the top level of node_modules, if any."""
    for instance in instances:
        if lock_index.lookup(instance.node).depth == 0:
            return instance
    return None


def get_reason(
    instance: DuplicateInstance, top_hoisted: DuplicateInstance | None
) -> DupReason:
    """Explain why an instance exists next to the group's hoisted one."""
    if instance.node.bundled:
        return DupReason.BUNDLED
    if top_hoisted is None:
        return DupReason.NOT_HOISTED
    if instance is top_hoisted:
        return DupReason.ROOT
    if not intersects(instance.version_range, top_hoisted.version_range):
        return DupReason.OTHER_HOISTED
    if version_gt(top_hoisted.version, instance.version):
        return DupReason.HIGHER_INSTALLED
    return DupReason.INSTALL_ORDER


def _compare_instances(a: DuplicateInstance, b: DuplicateInstance) -> int:
    va, vb = precedence(a.version), precedence(b.version)
    if va != vb:
        # Valid versions first, newest first
        if va is None:
            return 1
        if vb is None:
            return -1
        return -1 if va > vb else 1
    reason_a, reason_b = str(a.reason), str(b.reason)
    return (reason_a > reason_b) - (reason_a < reason_b)


def sort_instances(instances: list[DuplicateInstance]) -> list[DuplicateInstance]:
    """Newest version first; equal versions ordered by reason text."""
    return sorted(instances, key=cmp_to_key(_compare_instances))


def classify_group(
    name: str, nodes: list[LogicalNode], lock_index: LockIndex
) -> DuplicateGroup:
    """Compute ranges, paths and a reason for every instance of one package.

    Args:
        name: Package name shared by all nodes
        nodes: Instances in traversal order, at least two
        lock_index: Lock records for the tree

    Returns:
        The group with members sorted for display
    """
    instances = [_annotate(node, lock_index) for node in nodes]
    top_hoisted = find_top_hoisted(instances, lock_index)

    for instance in instances:
        instance.reason = get_reason(instance, top_hoisted)

    logger.debug(
        "%s: %d instances, top hoisted %s",
        name,
        len(instances),
        top_hoisted.version if top_hoisted else "none",
    )
    return DuplicateGroup(name=name, members=sort_instances(instances))


def get_sorted_groups(root: LogicalNode, lock_index: LockIndex) -> list[DuplicateGroup]:
    """Classify every package installed more than once.

    Returns:
        Groups ordered by instance count, most duplicated first
    """
    groups = [
        classify_group(name, nodes, lock_index)
        for name, nodes in group_dependencies(root).items()
        if len(nodes) >= 2
    ]
    return sorted(groups, key=lambda group: len(group.members), reverse=True)


def get_statistics(root: LogicalNode, groups: list[DuplicateGroup]) -> Statistics:
    """Aggregate counts over classified groups.

    Every instance is counted under its reason, the hoisted one included;
    the duplicate total leaves out one instance per group.
    """
    by_reason = Counter(
        member.reason for group in groups for member in group.members
    )
    return Statistics(
        total_installed=count_dependencies(root),
        total_duplicated=sum(group.duplicate_count for group in groups),
        by_reason=dict(by_reason),
    )
