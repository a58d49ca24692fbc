"""
Reconciler Errors - Exception hierarchy for repository reconciliation.

Every fatal failure raised by a reconciler operation derives from
ReconcilerError so callers can turn it into a diagnostic uniformly.
"""

from typing import List, Optional


class ReconcilerError(Exception):
    """Base exception for reconciliation failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ReconcilerError):
    """Raised when declared attributes are invalid or conflict."""


class RegistryError(ReconcilerError):
    """Raised when the registry rejects or fails an install/get/uninstall call."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class AlreadyInstalledError(ReconcilerError):
    """Raised when an install call succeeds but reports nothing installed."""

    def __init__(
        self, tool_shed: str, owner: str, name: str, changeset_revision: str
    ):
        self.tool_shed = tool_shed
        self.owner = owner
        self.name = name
        self.changeset_revision = changeset_revision
        super().__init__(
            f"Repository {tool_shed}/{owner}/{name}/{changeset_revision} "
            f"already installed"
        )


class AmbiguousResultWarning(UserWarning):
    """
    An install call returned more than one repository.

    Not raised. The reconciler keeps the first repository and reports this
    as a warning diagnostic so the extra repositories are not lost silently.
    """

    def __init__(self, ids: List[str]):
        self.ids = list(ids)
        super().__init__(self.summary)

    @property
    def summary(self) -> str:
        return f"Unexpected number of repositories created: {len(self.ids)}"

    @property
    def detail(self) -> str:
        return f"Repository IDs: {self.ids}"
