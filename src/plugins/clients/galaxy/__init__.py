"""Galaxy registry client plugin."""

from plugins.clients.galaxy.client import GalaxyClient

__all__ = ["GalaxyClient"]
