"""Tests for target agent and scope selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from sundial.errors import NoTargetAgentsError, UnknownAgentError
from sundial.skills.targets import resolve_targets, skill_install_path


class TestResolveTargets:
    def test_explicit_flags_win_over_defaults(self):
        decision = resolve_targets(["codex"], False, ["claude"], [])
        assert decision.agents == ["codex"]

    def test_explicit_flags_deduplicated(self):
        decision = resolve_targets(["claude", "gemini", "claude"], False, [], [])
        assert decision.agents == ["claude", "gemini"]

    def test_saved_defaults_used(self):
        decision = resolve_targets([], False, ["gemini", "codex"], [])
        assert decision.agents == ["gemini", "codex"]

    def test_no_agents_never_falls_back(self):
        with pytest.raises(NoTargetAgentsError, match="sun config"):
            resolve_targets([], False, [], ["claude"])

    def test_unknown_agent(self):
        with pytest.raises(UnknownAgentError, match="Unknown agent: cursor"):
            resolve_targets(["cursor"], False, [], [])

    def test_explicit_global_forces_global(self):
        decision = resolve_targets(["claude"], True, [], ["claude"])
        assert decision.is_global is True

    def test_local_when_any_target_present(self):
        decision = resolve_targets(["claude", "codex"], False, [], ["codex"])
        assert decision.is_global is False

    def test_global_when_no_target_present(self):
        decision = resolve_targets(["claude"], False, [], ["gemini"])
        assert decision.is_global is True


class TestSkillInstallPath:
    def test_local(self, project: Path):
        assert skill_install_path("widget", "claude", False) == project / ".claude" / "skills" / "widget"

    def test_global(self, project: Path, home: Path):
        assert skill_install_path("widget", "gemini", True) == home / ".gemini" / "skills" / "widget"

    def test_unknown_agent(self, project: Path):
        with pytest.raises(UnknownAgentError):
            skill_install_path("widget", "cursor", False)
