"""
Reconciler Plugin Base - Abstract interface for reconciler plugins.

Reconciler plugins own the create/read/delete logic for one or more
resource types. Each operation is driven by the caller, issues its own
registry calls and reports back through a ReconcileResult. Fatal failures
are raised as errors.ReconcilerError subclasses.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List

from diagnostics import Diagnostic
from plugins.clients.base import RegistryClient

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Result from a reconciler operation."""

    success: bool = False
    message: str = ""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    drift_detected: bool = False


class ReconcilerContext:
    """
    Context provided to reconciler plugins by the caller.

    Gives reconcilers access to the registry client used for network calls.
    """

    def __init__(self, client: RegistryClient):
        self.client = client


class ReconcilerPlugin(ABC):
    """
    Abstract base class for reconciler plugins.

    Reconcilers are discovered via Python entry points in the
    'shedctl.reconcilers' group.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this reconciler."""
        pass

    @property
    @abstractmethod
    def resource_types(self) -> List[str]:
        """Resource type names this reconciler handles."""
        pass

    @abstractmethod
    async def create(self, resource: Any, ctx: ReconcilerContext) -> ReconcileResult:
        """
        Bring a declared resource into existence.

        Writes the resource's computed state only when the operation succeeds.

        Args:
            resource: The declared resource.
            ctx: ReconcilerContext giving access to the registry client.

        Returns:
            ReconcileResult with any non-fatal diagnostics.
        """
        pass

    @abstractmethod
    async def read(self, resource: Any, ctx: ReconcilerContext) -> ReconcileResult:
        """
        Refresh a resource's computed state from the registry.

        Args:
            resource: The previously created resource.
            ctx: ReconcilerContext giving access to the registry client.

        Returns:
            ReconcileResult, with drift_detected set when the registry
            reports the resource as removed.
        """
        pass

    @abstractmethod
    async def delete(self, resource: Any, ctx: ReconcilerContext) -> ReconcileResult:
        """
        Remove a resource from the registry.

        Args:
            resource: The previously created resource.
            ctx: ReconcilerContext giving access to the registry client.

        Returns:
            ReconcileResult indicating success.
        """
        pass
