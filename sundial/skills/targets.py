"""Decide which agents and which scope an add/remove operates on."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from sundial.agents import get_agent, scope_root
from sundial.errors import NoTargetAgentsError
from sundial.skills.models import ScopeDecision
from sundial.utils import dedupe

NO_AGENTS_MESSAGE = (
    'No default agents configured. Run "sun config" to set up your agents '
    "or pass --claude/--codex/--gemini."
)


def resolve_targets(
    explicit_agent_flags: Iterable[str],
    explicit_global: bool,
    saved_default_agents: Iterable[str],
    locally_present_agents: Iterable[str],
) -> ScopeDecision:
    """Pick target agents and the install scope.

    Explicit flags win over saved defaults. Scope is global when forced;
    otherwise local if any target agent already has a folder in the current
    directory, and global if none does.

    Raises:
        NoTargetAgentsError: No explicit flags and no saved defaults.
        UnknownAgentError: A flag is not a supported agent.
    """
    agents = dedupe(list(explicit_agent_flags)) or dedupe(list(saved_default_agents))
    if not agents:
        raise NoTargetAgentsError(NO_AGENTS_MESSAGE)

    for flag in agents:
        get_agent(flag)

    if explicit_global:
        return ScopeDecision(agents=agents, is_global=True)

    local = set(locally_present_agents)
    has_local_folder = any(flag in local for flag in agents)
    return ScopeDecision(agents=agents, is_global=not has_local_folder)


def skill_install_path(skill_name: str, agent_flag: str, is_global: bool) -> Path:
    """``{home or cwd}/{agent folder}/skills/{skill_name}``."""
    agent = get_agent(agent_flag)
    return scope_root(is_global) / agent.folder_name / "skills" / skill_name
