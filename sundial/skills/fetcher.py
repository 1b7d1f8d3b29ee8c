"""Materialize a SkillSource on disk so it can be scanned for skills.

Three strategies, picked by source kind:

- local: the resolved path is used in place, nothing is staged.
- remote repository: shallow, blobless ``git clone``; narrowed to the subpath
  with sparse checkout when one is given.
- archive: a zip downloaded over HTTP and extracted; a single wrapper folder
  at the archive root is stripped.

Staged content lives in a temporary directory that is removed however the
``stage_source`` block exits.
"""

from __future__ import annotations

import asyncio
import tempfile
import zipfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import httpx

from sundial.errors import FetchError
from sundial.skills.models import SkillSource, SourceKind
from sundial.utils import get_logger

logger = get_logger(__name__)

DEFAULT_GIT_HOST_URL = "https://github.com"
STAGING_PREFIX = "sundial-install-"


@dataclass(frozen=True)
class RepoLocation:
    """Parsed ``owner/repo[/subpath][#branch]`` location."""

    owner: str
    repo: str
    subpath: str | None = None
    branch: str | None = None

    def clone_url(self, host_url: str = DEFAULT_GIT_HOST_URL) -> str:
        return f"{host_url.rstrip('/')}/{self.owner}/{self.repo}.git"


def parse_repo_location(location: str) -> RepoLocation:
    path, _, branch = location.partition("#")
    parts = [part for part in path.strip("/").split("/") if part]
    if len(parts) < 2:
        raise FetchError(f"Invalid repository location: {location!r} (expected owner/repo)")
    if ".." in parts[2:]:
        raise FetchError(f"Invalid repository location: {location!r}")
    subpath = "/".join(parts[2:]) or None
    return RepoLocation(owner=parts[0], repo=parts[1], subpath=subpath, branch=branch or None)


async def run_git(args: list[str]) -> None:
    """Run a git command, raising FetchError with its stderr on failure."""
    logger.debug("Running %s", " ".join(args))
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise FetchError("Failed to download from GitHub: git is not installed", cause=e) from e

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        output = stderr.decode("utf-8", errors="replace").strip()
        if not output:
            output = stdout.decode("utf-8", errors="replace").strip()
        raise FetchError(f"Failed to download from GitHub: {output}")


async def fetch_repository(
    location: str, staging_dir: Path, host_url: str = DEFAULT_GIT_HOST_URL
) -> Path:
    """Clone ``location`` into ``staging_dir`` and return the directory to scan."""
    repo = parse_repo_location(location)
    checkout = staging_dir / "repo"

    clone_args = ["git", "clone", "--depth", "1", "--filter=blob:none"]
    if repo.subpath:
        clone_args.append("--sparse")
    if repo.branch:
        clone_args.extend(["--branch", repo.branch])
    clone_args.extend([repo.clone_url(host_url), str(checkout)])

    await run_git(clone_args)
    if repo.subpath:
        await run_git(["git", "-C", str(checkout), "sparse-checkout", "set", repo.subpath])
        await run_git(["git", "-C", str(checkout), "checkout"])
        return checkout.joinpath(*PurePosixPath(repo.subpath).parts)
    return checkout


def _archive_root(extract_dir: Path) -> Path:
    entries = list(extract_dir.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return extract_dir


async def download_archive(
    url: str,
    staging_dir: Path,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """Download and extract a zip archive; return its effective root."""
    archive_path = staging_dir / "skill.zip"
    extract_dir = staging_dir / "extracted"

    try:
        async with httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        ) as client:
            async with client.stream("GET", url) as resp:
                if resp.is_error:
                    raise FetchError(f"Failed to download: {resp.reason_phrase}")
                with open(archive_path, "wb") as f:
                    async for chunk in resp.aiter_bytes():
                        f.write(chunk)
    except httpx.HTTPError as e:
        raise FetchError(f"Failed to download: {e}", cause=e) from e

    extract_dir.mkdir()
    try:
        with zipfile.ZipFile(archive_path) as zf:
            zf.extractall(extract_dir)
    except zipfile.BadZipFile as e:
        raise FetchError(f"Failed to download: {url} is not a valid zip archive", cause=e) from e

    return _archive_root(extract_dir)


@asynccontextmanager
async def stage_source(
    source: SkillSource,
    *,
    archive_url: str | None = None,
    git_host_url: str = DEFAULT_GIT_HOST_URL,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[Path]:
    """Yield the root directory holding ``source``'s content.

    Args:
        source: Resolved skill source.
        archive_url: For shortcuts, a zip to download instead of cloning.
        git_host_url: Base URL repositories are cloned from.
        timeout: HTTP timeout for archive downloads.
        transport: Optional httpx transport, used by tests.
    """
    if source.kind is SourceKind.LOCAL:
        yield Path(source.location)
        return

    with tempfile.TemporaryDirectory(prefix=STAGING_PREFIX) as tmp:
        staging_dir = Path(tmp)
        if source.kind is SourceKind.SHORTCUT and archive_url:
            logger.info("Downloading %s from %s", source.original_input, archive_url)
            root = await download_archive(archive_url, staging_dir, timeout, transport)
        else:
            logger.info("Cloning %s", source.location)
            root = await fetch_repository(source.location, staging_dir, git_host_url)
        yield root
