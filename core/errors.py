"""Exceptions raised while analyzing a project."""


class DupDepsError(Exception):
    """Base class for all analysis failures."""


class ProjectFileError(DupDepsError):
    """package.json or package-lock.json is missing or malformed."""

    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{self.path}: {message}")


class LockfileError(DupDepsError):
    """Lock file content does not match the dependency tree."""


class UnresolvableDependencyError(LockfileError):
    """A requirement cannot be found from the package that requires it."""

    def __init__(self, name: str, from_address: str):
        self.name = name
        self.from_address = from_address
        location = from_address or "the project root"
        super().__init__(f"{name} not accessible from {location}")


class MissingRequirementError(LockfileError):
    """A parent's lock record has no range for a child the tree says it requires."""

    def __init__(self, member, parent):
        self.member = member
        self.parent = parent
        super().__init__(
            f"{parent.name}@{parent.version} does not declare a requirement on "
            f"{member.name} (installed {member.name}@{member.version}); "
            "the lock file is inconsistent"
        )
