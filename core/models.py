"""Core data models for dupdeps."""

from dataclasses import dataclass, field
from enum import Enum


class DupReason(str, Enum):
    """Why an installed instance coexists with others of the same name."""

    ROOT = "Top hoisted"
    BUNDLED = "Bundled"
    NOT_HOISTED = "Not hoisted"
    OTHER_HOISTED = "Other hoisted"
    INSTALL_ORDER = "Install order"
    HIGHER_INSTALLED = "Higher installed"

    @property
    def is_avoidable(self) -> bool:
        return self in (DupReason.INSTALL_ORDER, DupReason.HIGHER_INSTALLED)

    def __str__(self) -> str:
        return self.value


@dataclass
class Project:
    """A parsed package.json with its lock file in the nested layout."""

    manifest: dict
    lock: dict
    lockfile_version: int = 1


@dataclass(eq=False)
class LogicalNode:
    """One installed package instance in the logical dependency tree.

    Nodes compare by identity: two instances of the same name@version
    installed at different places are different nodes.
    """

    name: str
    version: str | None = None
    address: str = ""  # colon-joined lock file path, "" for the root
    bundled: bool = False
    dependencies: dict[str, "LogicalNode"] = field(default_factory=dict, repr=False)
    required_by: list["LogicalNode"] = field(default_factory=list, repr=False)

    @property
    def is_root(self) -> bool:
        return not self.required_by

    @property
    def spec(self) -> str:
        """Return the package in name@version format."""
        return f"{self.name}@{self.version}"

    def add_dependency(self, dep: "LogicalNode") -> None:
        """Add a child, registering this node as one of its parents."""
        self.dependencies[dep.name] = dep
        if not any(parent is self for parent in dep.required_by):
            dep.required_by.append(self)

    def __str__(self) -> str:
        return self.spec


@dataclass
class LockRecord:
    """What the lock file says about one installed instance."""

    requires: dict[str, str] = field(default_factory=dict)
    depth: int = 0


@dataclass
class DuplicateInstance:
    """Classification result for one member of a duplicate group."""

    node: LogicalNode
    version_ranges: list[str] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)
    reason: DupReason | None = None

    @property
    def version(self) -> str | None:
        return self.node.version

    @property
    def version_range(self) -> str | None:
        """Range declared by the first parent."""
        return self.version_ranges[0] if self.version_ranges else None

    @property
    def path(self) -> str | None:
        return self.paths[0] if self.paths else None


@dataclass
class DuplicateGroup:
    """All installed instances of one package name."""

    name: str
    members: list[DuplicateInstance]

    @property
    def duplicate_count(self) -> int:
        return len(self.members) - 1


@dataclass
class Statistics:
    """Aggregate numbers for a report."""

    total_installed: int
    total_duplicated: int
    by_reason: dict[DupReason, int] = field(default_factory=dict)

    @property
    def total_avoidable(self) -> int:
        """Instances that a different install could have deduplicated."""
        return sum(count for reason, count in self.by_reason.items() if reason.is_avoidable)
