"""Install, remove and locate skills across agent folders."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import httpx

from sundial.agents import SUPPORTED_AGENTS, get_agent
from sundial.errors import InvalidSkillError, NoSkillsFoundError
from sundial.registry import RegistryClient
from sundial.skills.discovery import find_skill_directories
from sundial.skills.fetcher import DEFAULT_GIT_HOST_URL, stage_source
from sundial.skills.frontmatter import is_safe_dir_name, read_manifest, validate_metadata
from sundial.skills.hashing import compute_content_hash
from sundial.skills.models import InstallResult, Installation, SkillSource, SourceKind
from sundial.skills.source import resolve_skill_source
from sundial.skills.targets import skill_install_path
from sundial.utils import get_logger

if TYPE_CHECKING:
    from sundial.config import Settings

logger = get_logger(__name__)

COPY_IGNORE = shutil.ignore_patterns(".git")


def replace_directory(source_dir: Path, destination: Path) -> None:
    """Make ``destination`` an exact copy of ``source_dir``.

    The copy is staged next to the destination and swapped in, so files left
    over from a previous install never survive a reinstall.
    """
    parent = destination.parent
    parent.mkdir(parents=True, exist_ok=True)
    staged = parent / f".{destination.name}.staging-{uuid4().hex}"

    try:
        shutil.copytree(source_dir, staged, symlinks=True, ignore=COPY_IGNORE)
    except Exception:
        shutil.rmtree(staged, ignore_errors=True)
        raise

    if not destination.exists() and not destination.is_symlink():
        try:
            os.replace(staged, destination)
        except Exception:
            shutil.rmtree(staged, ignore_errors=True)
            raise
        return

    backup = parent / f".{destination.name}.backup-{uuid4().hex}"
    os.replace(destination, backup)
    try:
        os.replace(staged, destination)
    except Exception:
        os.replace(backup, destination)
        shutil.rmtree(staged, ignore_errors=True)
        raise
    _remove_path(backup)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def install_skill_directory(skill_dir: Path, agent_flag: str, is_global: bool) -> str:
    """Copy one skill folder into an agent, named after its manifest ``name``.

    Returns:
        The installed skill name.

    Raises:
        InvalidSkillError: The manifest is gone, incomplete, or names an
            unusable directory.
    """
    meta = read_manifest(skill_dir)
    if meta is None:
        raise InvalidSkillError(
            f'Invalid skill at "{skill_dir}": SKILL.md must have name and description in frontmatter'
        )
    if not is_safe_dir_name(meta.name):
        raise InvalidSkillError(f'Invalid skill at "{skill_dir}": unusable name {meta.name!r}')
    for warning in validate_metadata(meta):
        logger.warning("Skill '%s': %s", meta.name, warning)

    destination = skill_install_path(meta.name, agent_flag, is_global)
    source_real = skill_dir.resolve()
    destination_real = destination.resolve()
    if source_real == destination_real:
        logger.info("Skill '%s' is already installed at %s", meta.name, destination)
        return meta.name
    if source_real in destination_real.parents:
        raise InvalidSkillError(
            f'Invalid skill at "{skill_dir}": cannot install a skill into itself'
        )

    replace_directory(skill_dir, destination)
    logger.info("Installed skill '%s' to %s", meta.name, destination)
    return meta.name


def remove_skill(skill_name: str, agent_flag: str, is_global: bool) -> bool:
    """Delete an installed skill. Returns False if it was not there."""
    if not is_safe_dir_name(skill_name):
        raise InvalidSkillError(f"Invalid skill name: {skill_name!r}")
    destination = skill_install_path(skill_name, agent_flag, is_global)
    if not destination.exists() and not destination.is_symlink():
        return False

    _remove_path(destination)
    logger.info("Removed skill '%s' from %s", skill_name, destination)
    return True


def find_skill_installations(skill_name: str) -> list[Installation]:
    """Every local and global agent folder holding a valid copy of ``skill_name``."""
    installations: list[Installation] = []
    if not is_safe_dir_name(skill_name):
        return installations
    locations = [(Path.cwd(), False), (Path.home(), True)]

    for base, is_global in locations:
        for agent in SUPPORTED_AGENTS:
            skill_path = base / agent.folder_name / "skills" / skill_name
            try:
                if not skill_path.is_dir():
                    continue
                meta = read_manifest(skill_path)
                if meta is None:
                    continue
                content_hash = compute_content_hash(skill_path)
            except OSError as e:
                logger.debug("Skipping %s: %s", skill_path, e)
                continue

            installations.append(
                Installation(
                    agent=agent.flag,
                    path=skill_path,
                    is_global=is_global,
                    metadata=meta,
                    content_hash=content_hash,
                )
            )

    return installations


class SkillInstaller:
    """Resolve, fetch and install skill references.

    Example:
        >>> installer = SkillInstaller(registry=RegistryClient(api_url, storage_url))
        >>> result = await installer.install("./my-skill", "claude", is_global=False)
        >>> result.skill_names
        ['widget']
    """

    def __init__(
        self,
        registry: RegistryClient | None = None,
        git_host_url: str = DEFAULT_GIT_HOST_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the installer.

        Args:
            registry: Registry used for shortcut names and download tracking
                (None disables shortcuts)
            git_host_url: Base URL repositories are cloned from
            timeout: HTTP timeout for archive downloads
            transport: Optional httpx transport for archive downloads
        """
        self.registry = registry
        self.git_host_url = git_host_url
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(
        cls, settings: "Settings", registry: RegistryClient | None = None
    ) -> "SkillInstaller":
        if registry is None:
            registry = RegistryClient(
                api_url=settings.registry_url,
                storage_url=settings.storage_url,
                timeout=settings.http_timeout,
            )
        return cls(
            registry=registry,
            git_host_url=settings.git_host_url,
            timeout=settings.http_timeout,
        )

    async def resolve(self, raw_input: str) -> SkillSource:
        return await resolve_skill_source(raw_input, self.registry)

    async def _archive_url(self, source: SkillSource) -> str | None:
        if source.kind is not SourceKind.SHORTCUT or self.registry is None:
            return None
        entry = await self.registry.lookup(source.original_input)
        return self.registry.archive_url(entry) if entry else None

    async def install(self, raw_input: str, agent_flag: str, is_global: bool) -> InstallResult:
        """Install every skill found behind ``raw_input`` into one agent.

        Raises:
            UnknownAgentError: ``agent_flag`` is not supported.
            SkillNotFoundError: ``raw_input`` could not be classified.
            FetchError: Clone or download failed.
            NoSkillsFoundError: The fetched content holds no valid skill.
            InvalidSkillError: A discovered skill could not be installed.
        """
        get_agent(agent_flag)
        source = await self.resolve(raw_input)
        archive_url = await self._archive_url(source)

        async with stage_source(
            source,
            archive_url=archive_url,
            git_host_url=self.git_host_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as root:
            skill_dirs = find_skill_directories(root)
            if not skill_dirs:
                raise NoSkillsFoundError(source.original_input)

            skill_names = [
                install_skill_directory(skill_dir, agent_flag, is_global)
                for skill_dir in skill_dirs
            ]

        if source.kind is SourceKind.SHORTCUT and self.registry is not None:
            await self.registry.track_download(source.original_input)

        return InstallResult(skill_names=skill_names, source=source)

    def remove(self, skill_name: str, agent_flag: str, is_global: bool) -> bool:
        return remove_skill(skill_name, agent_flag, is_global)

    def find_installations(self, skill_name: str) -> list[Installation]:
        return find_skill_installations(skill_name)
