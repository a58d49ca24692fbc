"""
Registry Client Base - Abstract interface for registry client plugins.

Registry clients perform the network calls a reconciler issues against an
installable-package registry: install, get and uninstall. Each call is a
single round trip; retry policy, if any, belongs to the client.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from models import RepositoryInstallResult


class RegistryClient(ABC):
    """
    Abstract base class for registry client plugins.

    Implementations raise errors.RegistryError for every failed call.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this client (e.g., 'galaxy')."""
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        """Client version string."""
        pass

    @abstractmethod
    async def initialize(self, config: Dict[str, Any]) -> None:
        """
        Initialize the client with configuration.

        Args:
            config: Client-specific configuration dictionary
        """
        pass

    @abstractmethod
    async def install(
        self,
        tool_shed: str,
        owner: str,
        name: str,
        changeset_revision: str,
        install_tool_dependencies: bool,
        install_repository_dependencies: bool,
        install_resolver_dependencies: bool,
        tool_panel_section_id: str,
        new_tool_panel_section_label: str,
    ) -> List[RepositoryInstallResult]:
        """
        Install a repository from a tool shed.

        Args:
            tool_shed: Tool shed host
            owner: Repository owner
            name: Repository name
            changeset_revision: Revision to install, empty for latest
            install_tool_dependencies: Install tool dependencies
            install_repository_dependencies: Install repository dependencies
            install_resolver_dependencies: Install resolver dependencies
            tool_panel_section_id: Existing tool panel section, or empty
            new_tool_panel_section_label: Label of a new section, or empty

        Returns:
            The repositories the registry reports as installed, possibly none.
        """
        pass

    @abstractmethod
    async def get(self, repository_id: str) -> RepositoryInstallResult:
        """
        Fetch the current registry view of an installed repository.

        Args:
            repository_id: Registry-assigned repository identifier

        Returns:
            The repository as reported by the registry.
        """
        pass

    @abstractmethod
    async def uninstall(self, repository_id: str, remove_from_disk: bool) -> None:
        """
        Uninstall a repository.

        Args:
            repository_id: Registry-assigned repository identifier
            remove_from_disk: Also delete the repository files on the registry host
        """
        pass

    @classmethod
    def load_config_from_env(cls) -> Dict[str, Any]:
        """
        Load client-specific configuration from environment variables.

        Override this method in subclasses to define how the client
        loads its configuration from the environment.

        Returns:
            Dictionary of configuration values for this client.
        """
        return {}
