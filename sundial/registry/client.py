"""RegistryClient - HTTP client for the curated skill registry.

The registry maps short names (shortcuts) to fetchable locations::

    client = RegistryClient(api_url=settings.registry_url,
                            storage_url=settings.storage_url)
    entry = await client.lookup("tinker")
    if entry is not None:
        print(entry.degit_path, client.archive_url(entry))

The full listing is fetched once per client instance and cached for its
lifetime. Construct a fresh client to see registry changes.
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from sundial.errors import RegistryError
from sundial.utils import get_logger

logger = get_logger(__name__)


class RegistrySkill(BaseModel):
    """One entry of the registry listing."""
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    author: str = ""
    display_name: str | None = None
    category: str | None = None
    github_url: str | None = None
    degit_path: str
    zip_path: str | None = None
    download_count: int = 0


class RegistryClient:
    """Reads the skill registry and records downloads.

    Args:
        api_url: Base URL of the registry API (``/list``, ``/get``, ``/track``).
        storage_url: Base URL archives named by ``zip_path`` are served from.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        api_url: str,
        storage_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.storage_url = storage_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._cache: list[RegistrySkill] | None = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def list_skills(self) -> list[RegistrySkill]:
        """Return every registry entry, fetching on first call only.

        Raises:
            RegistryError: The API was unreachable or returned a bad payload.
        """
        if self._cache is not None:
            return self._cache

        try:
            async with self._client() as client:
                resp = await client.get(f"{self.api_url}/list")
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise RegistryError(
                f"Failed to fetch skills: {e.response.reason_phrase}", cause=e
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise RegistryError(f"Failed to fetch skills: {e}", cause=e) from e

        if not isinstance(payload, list):
            raise RegistryError("Failed to fetch skills: registry listing is not a list")

        skills = []
        for entry in payload:
            try:
                skills.append(RegistrySkill.model_validate(entry))
            except ValidationError as e:
                logger.warning("Ignoring malformed registry entry: %s", e)

        logger.debug("Registry listed %d skill(s)", len(skills))
        self._cache = skills
        return skills

    def mark_unavailable(self) -> None:
        """Cache an empty listing so a failed registry is not retried this run."""
        if self._cache is None:
            self._cache = []

    async def lookup(self, name: str) -> RegistrySkill | None:
        """Find ``name`` in the cached listing."""
        for skill in await self.list_skills():
            if skill.name == name:
                return skill
        return None

    async def is_shortcut(self, name: str) -> bool:
        return await self.lookup(name) is not None

    async def shortcut_location(self, name: str) -> str | None:
        skill = await self.lookup(name)
        return skill.degit_path if skill else None

    async def get_by_name(self, name: str) -> RegistrySkill | None:
        """Fetch one entry directly from the API, bypassing the listing cache."""
        try:
            async with self._client() as client:
                resp = await client.get(f"{self.api_url}/get", params={"name": name})
        except httpx.HTTPError as e:
            raise RegistryError(f"Failed to fetch skill: {e}", cause=e) from e

        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise RegistryError(f"Failed to fetch skill: {resp.reason_phrase}")
        return RegistrySkill.model_validate(resp.json())

    def archive_url(self, skill: RegistrySkill) -> str | None:
        if not skill.zip_path:
            return None
        return f"{self.storage_url}/{skill.zip_path.lstrip('/')}"

    async def track_download(self, name: str) -> None:
        """Record a download. Never raises."""
        try:
            async with self._client() as client:
                await client.post(f"{self.api_url}/track", json={"skill_name": name})
        except Exception as e:
            logger.debug("Download tracking failed for %s: %s", name, e)
