"""
Plugin Registry - Registry clients and reconcilers, by name and resource type.

Clients are looked up by name and initialized on first use. Reconcilers are
looked up by the resource type they claim; a resource type belongs to
exactly one reconciler.
"""

import logging
from importlib.metadata import entry_points
from typing import Any, Dict, Optional, Type

from plugins.clients.base import RegistryClient
from plugins.reconcilers.base import ReconcilerPlugin

logger = logging.getLogger(__name__)

CLIENT_ENTRY_POINT_GROUP = "shedctl.clients"
RECONCILER_ENTRY_POINT_GROUP = "shedctl.reconcilers"


class PluginRegistry:
    """Holds the registry clients and reconcilers available to the CLI."""

    def __init__(self):
        # name -> (client class, configuration read from the environment)
        self._clients: Dict[str, tuple[Type[RegistryClient], Dict[str, Any]]] = {}
        self._initialized_clients: Dict[str, RegistryClient] = {}

        # resource type -> reconciler instance
        self._reconcilers: Dict[str, ReconcilerPlugin] = {}

    def register_client_plugin(self, plugin_class: Type[RegistryClient]) -> None:
        """
        Register a registry client class under its name and read its
        environment configuration.

        Raises:
            ValueError: If the client's environment configuration is invalid
        """
        name = plugin_class().name
        if name in self._clients:
            logger.warning(f"Replacing registry client {name}")

        self._clients[name] = (plugin_class, plugin_class.load_config_from_env())
        self._initialized_clients.pop(name, None)
        logger.debug(f"Registered registry client {name}")

    def register_reconciler_plugin(
        self, plugin_class: Type[ReconcilerPlugin]
    ) -> None:
        """
        Register a reconciler for every resource type it declares.

        Raises:
            ValueError: If another reconciler already owns one of its types
        """
        reconciler = plugin_class()

        for resource_type in reconciler.resource_types:
            owner = self._reconcilers.get(resource_type)
            if owner is not None and owner.name != reconciler.name:
                raise ValueError(
                    f"Resource type '{resource_type}' is already claimed by "
                    f"reconciler '{owner.name}'"
                )

        for resource_type in reconciler.resource_types:
            self._reconcilers[resource_type] = reconciler
        logger.debug(
            f"Registered reconciler {reconciler.name} for "
            f"{', '.join(reconciler.resource_types)}"
        )

    async def get_client(
        self, name: str, config: Optional[Dict[str, Any]] = None
    ) -> RegistryClient:
        """
        Get the initialized client registered as ``name``.

        ``config`` overrides keys of the environment configuration. It only
        applies the first time the client is initialized.

        Raises:
            ValueError: If no client is registered under ``name``
        """
        if name in self._initialized_clients:
            return self._initialized_clients[name]

        if name not in self._clients:
            available = ", ".join(sorted(self._clients)) or "none"
            raise ValueError(
                f"Unknown registry client: {name}. Available clients: {available}"
            )

        plugin_class, env_config = self._clients[name]
        client = plugin_class()
        await client.initialize({**env_config, **(config or {})})
        self._initialized_clients[name] = client
        logger.info(f"Initialized registry client {name}")
        return client

    def get_reconciler_for_resource_type(
        self, resource_type: str
    ) -> Optional[ReconcilerPlugin]:
        return self._reconcilers.get(resource_type)


_registry: Optional[PluginRegistry] = None


def get_registry() -> PluginRegistry:
    global _registry
    if _registry is None:
        _registry = PluginRegistry()
    return _registry


def reset_registry() -> None:
    global _registry
    _registry = None


def _load_entry_points(group: str, register) -> None:
    for ep in entry_points(group=group):
        try:
            register(ep.load())
        except Exception as e:
            logger.warning(f"Could not load plugin {ep.name} from {group}: {e}")


def register_builtin_plugins() -> None:
    """Register GalaxyClient and RepositoryReconciler, then any installed plugins."""
    from plugins.clients.galaxy import GalaxyClient
    from plugins.reconcilers.repository import RepositoryReconciler

    registry = get_registry()
    registry.register_client_plugin(GalaxyClient)
    registry.register_reconciler_plugin(RepositoryReconciler)

    _load_entry_points(CLIENT_ENTRY_POINT_GROUP, registry.register_client_plugin)
    _load_entry_points(
        RECONCILER_ENTRY_POINT_GROUP, registry.register_reconciler_plugin
    )
