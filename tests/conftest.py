"""Shared fixtures: an isolated home directory and project directory per test."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the home directory so global installs stay inside tmp_path."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    for var in ("SUNDIAL_REGISTRY_URL", "SUNDIAL_STORAGE_URL", "SUNDIAL_CONFIG_DIR"):
        monkeypatch.delenv(var, raising=False)
    return home_dir


@pytest.fixture
def project(tmp_path: Path, home: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A project directory used as the current working directory."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    monkeypatch.chdir(project_dir)
    return project_dir


@pytest.fixture
def make_skill():
    """Factory writing a skill folder with a SKILL.md and optional extra files."""

    def _make(
        directory: Path,
        name: str,
        description: str = "A test skill.",
        files: dict[str, str] | None = None,
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "SKILL.md").write_text(
            "---\n"
            f"name: {name}\n"
            f"description: {description}\n"
            "---\n\n"
            f"# {name}\n\nInstructions.\n"
        )
        for relative, content in (files or {}).items():
            path = directory / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return directory

    return _make
