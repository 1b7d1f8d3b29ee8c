"""Tests for settings loading and the JSON config store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sundial.config import (
    DEFAULT_REGISTRY_URL,
    ConfigStore,
    Settings,
    SunConfig,
    load_settings,
)


class TestSettings:
    def test_defaults(self, home: Path):
        settings = Settings()

        assert settings.registry_url == DEFAULT_REGISTRY_URL
        assert settings.git_host_url == "https://github.com"
        assert settings.config_dir == home / ".sun"
        assert settings.logging.level == "WARNING"

    def test_environment_override(self, home: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SUNDIAL_REGISTRY_URL", "https://registry.test/skills")
        monkeypatch.setenv("SUNDIAL_LOGGING__LEVEL", "DEBUG")

        settings = Settings()

        assert settings.registry_url == "https://registry.test/skills"
        assert settings.logging.level == "DEBUG"

    def test_missing_file_gives_defaults(self, home: Path):
        settings = load_settings(home / "absent.yaml")
        assert settings.registry_url == DEFAULT_REGISTRY_URL

    def test_yaml_with_substitution(
        self, home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("MIRROR_HOST", "mirror.test")
        path = tmp_path / "settings.yaml"
        path.write_text(
            "storage_url: https://${MIRROR_HOST}/zips\n"
            "git_host_url: ${GIT_HOST:-https://git.test}\n"
            "http_timeout: 5\n"
            "logging:\n"
            "  format: json\n"
        )

        settings = load_settings(path)

        assert settings.storage_url == "https://mirror.test/zips"
        assert settings.git_host_url == "https://git.test"
        assert settings.http_timeout == 5.0
        assert settings.logging.format == "json"

    def test_environment_wins_over_yaml(
        self, home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("SUNDIAL_HTTP_TIMEOUT", "12")
        path = tmp_path / "settings.yaml"
        path.write_text("http_timeout: 5\n")

        assert load_settings(path).http_timeout == 12.0

    def test_default_location(self, home: Path):
        (home / ".sun").mkdir()
        (home / ".sun" / "settings.yaml").write_text("registry_url: https://registry.test\n")

        assert load_settings().registry_url == "https://registry.test"


class TestConfigStore:
    def test_first_run(self, tmp_path: Path):
        store = ConfigStore(tmp_path / ".sun")

        assert store.is_first_run()
        assert store.load_default_agents() == []

    def test_save_default_agents(self, tmp_path: Path):
        store = ConfigStore(tmp_path / ".sun")
        store.save_default_agents(["claude", "gemini"])

        data = json.loads(store.path.read_text())
        assert data == {"defaultAgents": ["claude", "gemini"], "firstRunComplete": True}
        assert not store.is_first_run()
        assert store.load_default_agents() == ["claude", "gemini"]

    def test_reads_camel_case_file(self, tmp_path: Path):
        store = ConfigStore(tmp_path)
        store.path.write_text(json.dumps({
            "defaultAgents": ["codex"],
            "firstRunComplete": True,
            "skillRegistryUrl": "https://other.test/skills",
        }))

        config = store.load()

        assert config.default_agents == ["codex"]
        assert config.skill_registry_url == "https://other.test/skills"

    def test_corrupt_file_gives_defaults(self, tmp_path: Path):
        store = ConfigStore(tmp_path)
        store.path.write_text("{not json")

        assert store.load() == SunConfig()
        assert store.is_first_run()

    def test_registry_url_override(self, home: Path, tmp_path: Path):
        settings = Settings()
        store = ConfigStore(tmp_path)
        assert store.registry_url(settings) == DEFAULT_REGISTRY_URL

        store.save(SunConfig(skill_registry_url="https://other.test/skills"))
        assert store.registry_url(settings) == "https://other.test/skills"

    def test_from_settings(self, home: Path):
        assert ConfigStore.from_settings(Settings()).path == home / ".sun" / "config.json"
