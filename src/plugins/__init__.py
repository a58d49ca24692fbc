"""
Plugin system for the Tool Shed Repository Reconciler.

This package provides the plugin architecture for registry clients and
reconcilers.
"""

from plugins.clients.base import RegistryClient
from plugins.reconcilers.base import (
    ReconcilerPlugin,
    ReconcilerContext,
    ReconcileResult,
)
from plugins.registry import PluginRegistry, get_registry

__all__ = [
    "RegistryClient",
    "ReconcilerPlugin",
    "ReconcilerContext",
    "ReconcileResult",
    "PluginRegistry",
    "get_registry",
]
