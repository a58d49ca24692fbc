"""
Diagnostics - Operator-facing messages produced by reconciler operations.
"""

from dataclasses import dataclass
from enum import Enum

from errors import AmbiguousResultWarning, ReconcilerError


class Severity(Enum):
    """Diagnostic severity levels."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single message reported back to the operator."""

    severity: Severity
    summary: str
    detail: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @classmethod
    def from_error(cls, error: Exception) -> "Diagnostic":
        """
        Build an error diagnostic from an exception.

        Args:
            error: The exception raised by an operation.

        Returns:
            A Diagnostic with ERROR severity.
        """
        if isinstance(error, ReconcilerError):
            summary = error.message
        else:
            summary = str(error) or type(error).__name__
        return cls(severity=Severity.ERROR, summary=summary)

    @classmethod
    def from_warning(cls, warning: AmbiguousResultWarning) -> "Diagnostic":
        """Build a warning diagnostic from an ambiguous install result."""
        return cls(
            severity=Severity.WARNING,
            summary=warning.summary,
            detail=warning.detail,
        )
