"""
Galaxy Registry Client - Implements RegistryClient for the Galaxy API.

Installs, fetches and uninstalls tool shed repositories through a Galaxy
server's /api/tool_shed_repositories endpoints.
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from errors import RegistryError
from models import RepositoryInstallResult
from plugins.clients.base import RegistryClient

logger = logging.getLogger(__name__)

REPOSITORIES_PATH = "/api/tool_shed_repositories"


def tool_shed_url(tool_shed: str) -> str:
    """Turn a tool shed host into the URL form Galaxy expects."""
    url = tool_shed if "://" in tool_shed else f"https://{tool_shed}"
    return url if url.endswith("/") else f"{url}/"


class GalaxyClient(RegistryClient):
    """
    Registry client that talks to a Galaxy server.

    Every call opens its own HTTP session and maps any failure, including
    non-2xx responses, to RegistryError. No call is retried.
    """

    def __init__(self):
        self.url: str = "http://localhost:8080"
        self.api_key: Optional[str] = None
        self.timeout: int = 300  # installs can take several minutes
        self.verify_ssl: bool = True

    @property
    def name(self) -> str:
        return "galaxy"

    @property
    def version(self) -> str:
        return "1.0.0"

    @classmethod
    def load_config_from_env(cls) -> Dict[str, Any]:
        """Load Galaxy client configuration from environment variables."""
        timeout = os.getenv("GALAXY_TIMEOUT", "300")
        try:
            timeout_seconds = int(timeout)
        except ValueError:
            raise ValueError(
                f"GALAXY_TIMEOUT must be a whole number of seconds, got {timeout!r}"
            )

        return {
            "url": os.getenv("GALAXY_URL", "http://localhost:8080"),
            "api_key": os.getenv("GALAXY_API_KEY", ""),
            "timeout": timeout_seconds,
            "verify_ssl": os.getenv("GALAXY_VERIFY_SSL", "true").lower() == "true",
        }

    async def initialize(self, config: Dict[str, Any]) -> None:
        """Initialize the client with configuration."""
        self.url = config.get("url", self.url)
        self.api_key = config.get("api_key")
        self.timeout = config.get("timeout", self.timeout)
        self.verify_ssl = config.get("verify_ssl", self.verify_ssl)

        if not self.url:
            raise ValueError("Galaxy URL must be set (GALAXY_URL)")
        self.url = self.url.rstrip("/")

        if not self.api_key:
            logger.warning(
                "Galaxy API key not configured. "
                "Set GALAXY_API_KEY environment variable."
            )

        logger.debug(
            f"Galaxy client initialized: url={self.url}, timeout={self.timeout}s, "
            f"verify_ssl={self.verify_ssl}"
        )

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
        """Install a repository and return the repositories Galaxy reports."""
        payload: Dict[str, Any] = {
            "tool_shed_url": tool_shed_url(tool_shed),
            "owner": owner,
            "name": name,
            "changeset_revision": changeset_revision,
            "install_tool_dependencies": install_tool_dependencies,
            "install_repository_dependencies": install_repository_dependencies,
            "install_resolver_dependencies": install_resolver_dependencies,
        }
        if tool_panel_section_id:
            payload["tool_panel_section_id"] = tool_panel_section_id
        if new_tool_panel_section_label:
            payload["new_tool_panel_section_label"] = new_tool_panel_section_label

        logger.info(f"Installing repository {owner}/{name} from {tool_shed}")
        data = await self._request("POST", REPOSITORIES_PATH, json=payload)

        if not data:
            return []
        if isinstance(data, dict):
            # Galaxy answers with a status message when nothing was installed
            if "id" not in data:
                logger.info(
                    f"Galaxy installed nothing for {owner}/{name}: "
                    f"{data.get('message', data)}"
                )
                return []
            data = [data]
        if not isinstance(data, list):
            raise RegistryError(f"Unexpected install response from Galaxy: {data!r}")
        return [self._parse_repository(item) for item in data]

    async def get(self, repository_id: str) -> RepositoryInstallResult:
        """Get an installed repository by ID."""
        data = await self._request("GET", f"{REPOSITORIES_PATH}/{repository_id}")
        return self._parse_repository(data)

    async def uninstall(self, repository_id: str, remove_from_disk: bool) -> None:
        """Uninstall a repository by ID."""
        logger.info(
            f"Uninstalling repository {repository_id} "
            f"(remove_from_disk={remove_from_disk})"
        )
        await self._request(
            "DELETE",
            f"{REPOSITORIES_PATH}/{repository_id}",
            params={"remove_from_disk": "true" if remove_from_disk else "false"},
        )

    # Private helper methods

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for Galaxy API requests."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def _parse_repository(self, data: Any) -> RepositoryInstallResult:
        try:
            return RepositoryInstallResult.model_validate(data)
        except PydanticValidationError as e:
            raise RegistryError(f"Invalid repository returned by Galaxy: {e}")

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Issue one request against the Galaxy API.

        Args:
            method: HTTP method
            path: API path below the Galaxy URL
            **kwargs: Passed through to aiohttp (json, params)

        Returns:
            The decoded JSON body, or None for an empty body.

        Raises:
            RegistryError: On connection failures, timeouts and non-2xx responses
        """
        url = f"{self.url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        logger.debug(f"{method} {url}")

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    method,
                    url,
                    headers=self._get_headers(),
                    ssl=self.verify_ssl,
                    **kwargs,
                ) as response:
                    text = await response.text()
                    if response.status >= 400:
                        raise RegistryError(
                            self._error_message(method, url, response.status, text),
                            status=response.status,
                        )
                    if not text.strip():
                        return None
                    try:
                        return json.loads(text)
                    except ValueError:
                        raise RegistryError(
                            f"{method} {url} returned a non-JSON body",
                            status=response.status,
                        )
        except aiohttp.ClientError as e:
            raise RegistryError(f"{method} {url} failed: {e}")
        except asyncio.TimeoutError:
            raise RegistryError(f"{method} {url} timed out after {self.timeout}s")

    @staticmethod
    def _error_message(method: str, url: str, status: int, text: str) -> str:
        """Prefer Galaxy's err_msg over the raw response body."""
        detail = text
        try:
            body = json.loads(text)
            if isinstance(body, dict) and body.get("err_msg"):
                detail = body["err_msg"]
        except ValueError:
            pass
        return f"{method} {url} returned {status}: {detail}"
