"""Logical dependency tree built from package.json and package-lock.json."""

import logging
from collections.abc import Iterator

from rich.tree import Tree

from .errors import LockfileError, UnresolvableDependencyError
from .models import LockRecord, LogicalNode

logger = logging.getLogger(__name__)

ADDRESS_SEPARATOR = ":"

# Manifest sections whose packages become children of the root, in the
# order npm's logical tree adds them.
MANIFEST_SECTIONS = ("devDependencies", "optionalDependencies", "dependencies")


def _at_address(lock: dict, address: str) -> dict | None:
    """Return the lock entry at a colon-joined address, or None."""
    if not address:
        return lock

    entry = lock
    for name in address.split(ADDRESS_SEPARATOR):
        entry = (entry.get("dependencies") or {}).get(name)
        if entry is None:
            return None
    return entry


def _requirement_address(lock: dict, name: str, from_address: str) -> str:
    """Find where a requirement of the entry at from_address is installed.

    Node resolution: the requirer's own nested dependencies first, then
    each enclosing level up to the top of the lock file.
    """
    entry = _at_address(lock, from_address) or {}
    if name in (entry.get("dependencies") or {}):
        return f"{from_address}{ADDRESS_SEPARATOR}{name}" if from_address else name

    parts = from_address.split(ADDRESS_SEPARATOR) if from_address else []
    while parts:
        parts.pop()
        joined = ADDRESS_SEPARATOR.join(parts)
        parent = _at_address(lock, joined)
        if parent and name in (parent.get("dependencies") or {}):
            return f"{joined}{ADDRESS_SEPARATOR}{name}" if parts else name

    raise UnresolvableDependencyError(name, from_address)


def _requires(entry: dict | None) -> dict:
    requires = (entry or {}).get("requires")
    return requires if isinstance(requires, dict) else {}


def _make_node(name: str, address: str, entry: dict | None) -> LogicalNode:
    entry = entry or {}
    return LogicalNode(
        name=name,
        version=entry.get("version"),
        address=address,
        bundled=bool(entry.get("bundled")),
    )


def manifest_dependency_names(manifest: dict) -> list[str]:
    """Names the project depends on directly, deduplicated, in tree order."""
    names: dict[str, None] = {}
    for section in MANIFEST_SECTIONS:
        for name in manifest.get(section) or {}:
            names.setdefault(name, None)
    return list(names)


def build_tree(manifest: dict, lock: dict) -> LogicalNode:
    """Build the logical dependency tree.

    Args:
        manifest: Parsed package.json
        lock: Parsed package-lock.json in the nested layout

    Returns:
        The root node, representing the project itself
    """
    root = LogicalNode(name=manifest.get("name") or "", version=manifest.get("version"))
    nodes: dict[str, LogicalNode] = {}
    # Depth-first stack of (node, remaining requirement names)
    stack: list[tuple[LogicalNode, Iterator[str]]] = []

    def attach(dep: LogicalNode, parent: LogicalNode) -> None:
        parent.add_dependency(dep)
        nodes[dep.address] = dep
        requires = _requires(_at_address(lock, dep.address))
        stack.append((dep, iter(requires)))

    for name in manifest_dependency_names(manifest):
        existing = nodes.get(name)
        if existing is not None:
            root.add_dependency(existing)
            continue

        entry = (lock.get("dependencies") or {}).get(name)
        if entry is None:
            logger.warning("%s is declared in package.json but not installed", name)
            continue
        attach(_make_node(name, name, entry), root)

        while stack:
            dep, names = stack[-1]
            required = next(names, None)
            if required is None:
                stack.pop()
                continue

            address = _requirement_address(lock, required, dep.address)
            tdep = nodes.get(address)
            if tdep is None:
                attach(_make_node(required, address, _at_address(lock, address)), dep)
            else:
                dep.add_dependency(tdep)

    logger.debug("Built logical tree with %d packages", len(nodes))
    return root


def walk(root: LogicalNode) -> Iterator[LogicalNode]:
    """Yield every node once, depth-first pre-order, starting at the root."""
    seen: set[LogicalNode] = set()
    stack = [iter([root])]
    while stack:
        node = next(stack[-1], None)
        if node is None:
            stack.pop()
            continue
        if node in seen:
            continue
        seen.add(node)
        yield node
        stack.append(iter(node.dependencies.values()))


def count_dependencies(root: LogicalNode) -> int:
    """Count installed packages, excluding the project itself."""
    return sum(1 for _ in walk(root)) - 1


class LockIndex:
    """Lock records keyed by node address."""

    def __init__(self, records: dict[str, LockRecord]):
        self._records = records

    def lookup(self, node: LogicalNode) -> LockRecord:
        try:
            return self._records[node.address]
        except KeyError:
            raise LockfileError(
                f"No lock file entry for {node.spec} at '{node.address}'"
            ) from None


def build_lock_index(manifest: dict, lock: dict) -> LockIndex:
    """Index every lock entry by address, with the manifest as the root record.

    The root is not installed anywhere, so its depth is -1; top-level
    entries have depth 0.
    """
    root_requires: dict[str, str] = {}
    for section in MANIFEST_SECTIONS:
        for name, spec in (manifest.get(section) or {}).items():
            root_requires[name] = str(spec)

    records = {"": LockRecord(requires=root_requires, depth=-1)}
    pending = [("", lock)]
    while pending:
        address, entry = pending.pop()
        for name, child in (entry.get("dependencies") or {}).items():
            child_address = f"{address}{ADDRESS_SEPARATOR}{name}" if address else name
            requires = _requires(child)
            records[child_address] = LockRecord(
                requires={dep: str(spec) for dep, spec in requires.items()},
                depth=child_address.count(ADDRESS_SEPARATOR),
            )
            pending.append((child_address, child))

    return LockIndex(records)


def render_tree(root: LogicalNode) -> Tree:
    """Build a printable tree; packages already shown are marked deduped."""
    tree = Tree(root.spec if root.version else root.name or "<root>")
    seen = {root}
    stack = [(root, tree)]
    while stack:
        node, branch = stack.pop()
        for dep in node.dependencies.values():
            if dep in seen:
                branch.add(f"{dep.spec} [dim](deduped)[/dim]")
                continue
            seen.add(dep)
            stack.append((dep, branch.add(dep.spec)))
    return tree
