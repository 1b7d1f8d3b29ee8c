"""CLI interface for sundial."""

from __future__ import annotations

import asyncio
import difflib
from collections import defaultdict
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from sundial import __version__
from sundial.agents import (
    SUPPORTED_AGENTS,
    detect_all_agents,
    detect_local_agents,
    get_agent,
    supported_agents_message,
)
from sundial.config import ConfigStore, Settings, load_settings
from sundial.errors import RegistryError, SundialError
from sundial.registry import RegistryClient
from sundial.skills import (
    Installation,
    ScopeDecision,
    SkillInstaller,
    SkillMetadata,
    find_skill_installations,
    list_skills_for_agent,
    resolve_targets,
    skill_install_path,
)
from sundial.utils import format_list, setup_logging, truncate_string

console = Console()


class SuggestingGroup(click.Group):
    """Group that proposes the closest command name for a typo."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            name = args[0] if args else ""
            matches = difflib.get_close_matches(name, self.list_commands(ctx), n=1)
            if matches:
                ctx.fail(f"No such command '{name}'. Did you mean '{matches[0]}'?")
            raise


@click.group(cls=SuggestingGroup)
@click.version_option(version=__version__, prog_name="sun")
@click.option("--log-level", default=None, help="Log level (overrides settings)")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """sun - install agent skills into Claude Code, Codex and Gemini."""
    ctx.ensure_object(dict)
    settings = ctx.obj.setdefault("settings", load_settings())
    setup_logging(log_level or settings.logging.level, settings.logging.format)


def agent_options(func):
    """Attach the scope and agent selection flags to a command."""
    func = click.option("--gemini", is_flag=True, help="Target Gemini")(func)
    func = click.option("--codex", is_flag=True, help="Target Codex")(func)
    func = click.option("--claude", is_flag=True, help="Target Claude Code")(func)
    func = click.option(
        "--global", "-g", "is_global", is_flag=True, help="Use the home directory scope"
    )(func)
    return func


def _explicit_agents(claude: bool, codex: bool, gemini: bool) -> list[str]:
    chosen = {"claude": claude, "codex": codex, "gemini": gemini}
    return [flag for flag, enabled in chosen.items() if enabled]


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _config_store(ctx: click.Context) -> ConfigStore:
    if "config_store" not in ctx.obj:
        ctx.obj["config_store"] = ConfigStore.from_settings(_settings(ctx))
    return ctx.obj["config_store"]


def _registry(ctx: click.Context) -> RegistryClient:
    if "registry" not in ctx.obj:
        settings = _settings(ctx)
        ctx.obj["registry"] = RegistryClient(
            api_url=_config_store(ctx).registry_url(settings),
            storage_url=settings.storage_url,
            timeout=settings.http_timeout,
        )
    return ctx.obj["registry"]


def select_agents(preselected: list[str]) -> list[str]:
    """Ask which agents to use; agents in ``preselected`` default to yes."""
    console.print("[bold]Which agents do you want to install skills for?[/]")
    chosen = []
    for agent in SUPPORTED_AGENTS:
        if click.confirm(f"  {agent.name}", default=agent.flag in preselected):
            chosen.append(agent.flag)
    return chosen


def _local_agent_flags() -> list[str]:
    return [detected.agent.flag for detected in detect_local_agents()]


def _decide_scope(
    ctx: click.Context, explicit: list[str], is_global: bool, prompt: bool
) -> ScopeDecision:
    store = _config_store(ctx)
    local_flags = _local_agent_flags()
    defaults = store.load_default_agents()

    if prompt and not explicit and not defaults:
        defaults = select_agents(preselected=local_flags)
        if defaults:
            store.save_default_agents(defaults)

    try:
        return resolve_targets(explicit, is_global, defaults, local_flags)
    except SundialError as e:
        console.print(f"[red]Error: {escape(e.message)}[/]")
        ctx.exit(1)


def _scope_label(is_global: bool) -> str:
    return "global" if is_global else "local"


def _error_text(error: Exception) -> str:
    if isinstance(error, SundialError):
        return error.message
    return f"{type(error).__name__}: {error}"


def build_tree(path: Path) -> Tree:
    """Render an installed skill folder as a rich tree."""
    tree = Tree(f"[bold]{escape(str(path))}[/]")

    def add_children(branch: Tree, directory: Path) -> None:
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            if child.is_dir() and not child.is_symlink():
                add_children(branch.add(f"{escape(child.name)}/"), child)
            else:
                branch.add(escape(child.name))

    add_children(tree, path)
    return tree


@cli.command()
@click.argument("skills", nargs=-1, required=True)
@agent_options
@click.pass_context
def add(ctx: click.Context, skills: tuple[str, ...], is_global: bool,
        claude: bool, codex: bool, gemini: bool):
    """Install skills from shortcuts, GitHub URLs or local paths."""
    scope = _decide_scope(ctx, _explicit_agents(claude, codex, gemini), is_global, prompt=True)
    installer = SkillInstaller.from_settings(_settings(ctx), registry=_registry(ctx))

    async def run_add() -> tuple[list[str], list[str]]:
        installed: list[str] = []
        failed: list[str] = []
        for raw_input in skills:
            for flag in scope.agents:
                agent = get_agent(flag)
                try:
                    result = await installer.install(raw_input, flag, scope.is_global)
                except (SundialError, OSError) as e:
                    console.print(f"[red]✗ {escape(raw_input)} ({agent.name}): {escape(_error_text(e))}[/]")
                    failed.append(raw_input)
                    continue

                for name in result.skill_names:
                    console.print(
                        f"[green]✓[/] Installed [bold]{escape(name)}[/] for {agent.name} "
                        f"[dim]({_scope_label(scope.is_global)})[/]"
                    )
                    console.print(build_tree(skill_install_path(name, flag, scope.is_global)))
                    installed.append(name)
        return installed, failed

    installed, failed = asyncio.run(run_add())

    if installed:
        console.print(f"\n[bold green]Installed {len(installed)} skill(s).[/]")
    if failed:
        console.print(f"[yellow]Failed: {escape(format_list(sorted(set(failed))))}[/]")
        ctx.exit(1)


@cli.command()
@click.argument("skills", nargs=-1, required=True)
@agent_options
@click.pass_context
def remove(ctx: click.Context, skills: tuple[str, ...], is_global: bool,
           claude: bool, codex: bool, gemini: bool):
    """Remove installed skills by name."""
    scope = _decide_scope(ctx, _explicit_agents(claude, codex, gemini), is_global, prompt=False)
    installer = SkillInstaller.from_settings(_settings(ctx), registry=_registry(ctx))

    removed = 0
    errors = 0
    for name in skills:
        for flag in scope.agents:
            agent = get_agent(flag)
            try:
                deleted = installer.remove(name, flag, scope.is_global)
            except (SundialError, OSError) as e:
                console.print(f"[red]✗ {escape(name)} ({agent.name}): {escape(_error_text(e))}[/]")
                errors += 1
                continue

            if deleted:
                console.print(
                    f"[green]✓[/] Removed [bold]{escape(name)}[/] from {agent.name} "
                    f"[dim]({_scope_label(scope.is_global)})[/]"
                )
                removed += 1
            else:
                console.print(
                    f"[yellow]{escape(name)} is not installed for {agent.name} "
                    f"({_scope_label(scope.is_global)})[/]"
                )

    console.print(f"\n[bold]Removed {removed} skill(s).[/]")
    if errors:
        ctx.exit(1)


@cli.command("list")
def list_installed():
    """List installed skills per agent."""
    table = Table(title="Installed Skills")
    table.add_column("Agent")
    table.add_column("Scope")
    table.add_column("Skills")

    for is_global in (False, True):
        for agent in SUPPORTED_AGENTS:
            names = list_skills_for_agent(agent, is_global)
            if names:
                table.add_row(agent.name, _scope_label(is_global), ", ".join(names))

    if not table.rows:
        console.print("[yellow]No skills installed.[/]")
        return
    console.print(table)


def _show_agents(ctx: click.Context) -> None:
    detected = detect_all_agents()
    if not detected:
        console.print("[yellow]No agent folders found here or in your home directory.[/]")
        console.print(supported_agents_message())
        return

    active: ScopeDecision | None = None
    defaults = _config_store(ctx).load_default_agents()
    if defaults:
        try:
            active = resolve_targets([], False, defaults, _local_agent_flags())
        except SundialError:
            active = None

    for entry in detected:
        marker = ""
        if active and entry.agent.flag in active.agents and entry.is_global == active.is_global:
            marker = " [green](active)[/]"
        console.print(
            f"[bold]{entry.agent.name}[/] [dim]{_scope_label(entry.is_global)}[/] "
            f"{escape(str(entry.path))}{marker}"
        )
        names = list_skills_for_agent(entry.agent, entry.is_global)
        if names:
            for name in names:
                console.print(f"  • {escape(name)}")
        else:
            console.print("  [dim]no skills[/]")


def _show_skill(ctx: click.Context, skill_name: str) -> None:
    installations = find_skill_installations(skill_name)
    if not installations:
        console.print(f"[yellow]Skill '{escape(skill_name)}' is not installed.[/]")
        ctx.exit(1)

    meta = installations[0].metadata
    console.print(f"[bold]{escape(meta.name)}[/]")
    console.print(escape(truncate_string(meta.description, 200)))

    table = Table()
    table.add_column("Agent")
    table.add_column("Scope")
    table.add_column("Path")
    table.add_column("Hash")
    for inst in installations:
        table.add_row(
            get_agent(inst.agent).name,
            _scope_label(inst.is_global),
            str(inst.path),
            inst.content_hash,
        )
    console.print(table)

    by_hash: dict[str, list[Installation]] = defaultdict(list)
    for inst in installations:
        by_hash[inst.content_hash].append(inst)
    if len(by_hash) > 1:
        console.print(
            f"[yellow]Warning: {len(by_hash)} different versions of "
            f"'{escape(skill_name)}' are installed.[/]"
        )

    for content_hash, group in by_hash.items():
        locations = [
            f"{get_agent(inst.agent).name} ({_scope_label(inst.is_global)})" for inst in group
        ]
        console.print(f"\n[bold]{content_hash}[/]: {escape(format_list(locations))}")
        for label, value in _version_details(group[0].metadata):
            console.print(f"  {label}: {escape(value)}")


def _version_details(meta: SkillMetadata) -> list[tuple[str, str]]:
    details = [
        ("License", meta.license),
        ("Compatibility", meta.compatibility),
        ("Author", meta.metadata.get("author")),
        ("Version", meta.metadata.get("version")),
    ]
    return [(label, value) for label, value in details if value]


@cli.command()
@click.argument("skill", required=False)
@click.pass_context
def show(ctx: click.Context, skill: str | None):
    """Show agent folders, or every installation of one skill."""
    if skill:
        _show_skill(ctx, skill)
    else:
        _show_agents(ctx)


@cli.command()
@click.pass_context
def config(ctx: click.Context):
    """Choose the default agents skills are installed for."""
    store = _config_store(ctx)
    preselected = store.load_default_agents() or _local_agent_flags()
    agents = select_agents(preselected)
    if not agents:
        console.print("[yellow]No agents selected; defaults unchanged.[/]")
        return

    store.save_default_agents(agents)
    names = [get_agent(flag).name for flag in agents]
    console.print(f"[green]Default agents: {format_list(names)}[/]")
    console.print(f"[dim]Saved to {escape(str(store.path))}[/]")


@cli.command()
@click.pass_context
def registry(ctx: click.Context):
    """List the skills available as shortcuts."""
    client = _registry(ctx)
    try:
        skills = asyncio.run(client.list_skills())
    except RegistryError as e:
        console.print(f"[red]Error: {escape(e.message)}[/]")
        ctx.exit(1)

    if not skills:
        console.print("[yellow]The registry has no skills.[/]")
        return

    table = Table(title="Skill Registry")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Author")
    for skill in sorted(skills, key=lambda s: s.name):
        table.add_row(
            skill.name,
            truncate_string(skill.description, 60),
            skill.author,
        )
    console.print(table)
    console.print("[dim]Install one with: sun add <name>[/]")


def main():
    cli()


if __name__ == "__main__":
    main()
