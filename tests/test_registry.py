"""Tests for the skill registry client."""

from __future__ import annotations

import json

import httpx
import pytest

from sundial.errors import RegistryError
from sundial.registry import RegistryClient, RegistrySkill

API_URL = "https://registry.test/skills"
STORAGE_URL = "https://storage.test/zips"

LISTING = [
    {
        "name": "tinker",
        "description": "Tinker with things.",
        "author": "acme",
        "degit_path": "acme/skills/tinker",
        "zip_path": "tinker.zip",
        "download_count": 3,
        "unused_field": True,
    },
    {"name": "plain", "description": "No archive.", "degit_path": "acme/plain"},
]


def make_client(handler) -> RegistryClient:
    return RegistryClient(API_URL, STORAGE_URL, transport=httpx.MockTransport(handler))


class TestListSkills:
    @pytest.mark.asyncio
    async def test_listing_is_cached(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(200, json=LISTING)

        client = make_client(handler)
        first = await client.list_skills()
        second = await client.list_skills()

        assert [s.name for s in first] == ["tinker", "plain"]
        assert second is first
        assert calls == ["/skills/list"]

    @pytest.mark.asyncio
    async def test_malformed_entries_skipped(self):
        client = make_client(
            lambda request: httpx.Response(200, json=[{"name": "no-path"}, *LISTING])
        )
        skills = await client.list_skills()
        assert [s.name for s in skills] == ["tinker", "plain"]

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = make_client(lambda request: httpx.Response(500))
        with pytest.raises(RegistryError, match="Failed to fetch skills: Internal Server Error"):
            await client.list_skills()

    @pytest.mark.asyncio
    async def test_non_list_payload(self):
        client = make_client(lambda request: httpx.Response(200, json={"skills": []}))
        with pytest.raises(RegistryError):
            await client.list_skills()

    @pytest.mark.asyncio
    async def test_mark_unavailable_caches_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("registry should not be queried")

        client = make_client(handler)
        client.mark_unavailable()
        assert await client.list_skills() == []


class TestLookup:
    @pytest.mark.asyncio
    async def test_shortcut_helpers(self):
        client = make_client(lambda request: httpx.Response(200, json=LISTING))

        assert await client.is_shortcut("tinker")
        assert not await client.is_shortcut("missing")
        assert await client.shortcut_location("tinker") == "acme/skills/tinker"
        assert await client.shortcut_location("missing") is None

    @pytest.mark.asyncio
    async def test_get_by_name(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["name"] = request.url.params["name"]
            if request.url.params["name"] == "tinker":
                return httpx.Response(200, json=LISTING[0])
            return httpx.Response(404)

        client = make_client(handler)
        skill = await client.get_by_name("tinker")

        assert skill is not None
        assert skill.degit_path == "acme/skills/tinker"
        assert seen["name"] == "tinker"
        assert await client.get_by_name("missing") is None

    @pytest.mark.asyncio
    async def test_get_by_name_server_error(self):
        client = make_client(lambda request: httpx.Response(503))
        with pytest.raises(RegistryError):
            await client.get_by_name("tinker")

    def test_archive_url(self):
        client = RegistryClient(API_URL + "/", STORAGE_URL + "/")
        with_zip = RegistrySkill.model_validate(LISTING[0])
        without_zip = RegistrySkill.model_validate(LISTING[1])

        assert client.archive_url(with_zip) == "https://storage.test/zips/tinker.zip"
        assert client.archive_url(without_zip) is None


class TestTrackDownload:
    @pytest.mark.asyncio
    async def test_posts_skill_name(self):
        posted = []

        def handler(request: httpx.Request) -> httpx.Response:
            posted.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"ok": True})

        await make_client(handler).track_download("tinker")

        assert posted == [("POST", "/skills/track", {"skill_name": "tinker"})]

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        await make_client(handler).track_download("tinker")
