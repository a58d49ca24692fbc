"""
Registry client plugins package.

Registry clients perform install, get and uninstall calls against a
registry. Third-party clients are discovered via Python entry points
(group: 'shedctl.clients').
"""

from plugins.clients.base import RegistryClient

__all__ = ["RegistryClient"]
