"""BranchPilot CLI — all commands."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from branchpilot.branches import BranchService
from branchpilot.constants import DEFAULT_CONFIG
from branchpilot.errors import BranchPilotError, ConfigError
from branchpilot.hosts.git import LocalGitHost
from branchpilot.logs import configure_logging
from branchpilot.models import BranchPilotConfig, CreateBranchResult, StateDirective, WorkItemContext
from branchpilot.naming import validate
from branchpilot.rules import RulesEngine
from branchpilot.settings import get_config, get_settings, resolve_config_path, save_config

app = typer.Typer(help="branchpilot: rule-based git branch names for work items", no_args_is_help=True)

ConfigOpt = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Config file (default ~/.config/branchpilot/config.toml)"),
]
RepoOpt = Annotated[str | None, typer.Option("--repo", "-r", help="Repository name for repoOverrides")]
SourceOpt = Annotated[str, typer.Option("--source", "-s", help="Source branch the new branch starts from")]
IdOpt = Annotated[int | None, typer.Option("--id", help="Work item ID")]
TitleOpt = Annotated[str, typer.Option("--title", "-t", help="Work item title")]
TypeOpt = Annotated[str, typer.Option("--type", help="Work item type (e.g. Bug, User Story)")]
StateOpt = Annotated[str, typer.Option("--state", help="Current work item state")]
AssignedOpt = Annotated[str | None, typer.Option("--assigned-to", help="Assigned-to display name")]
WorkItemFileOpt = Annotated[
    Path | None,
    typer.Option("--work-item", "-w", help="JSON file with the work item (replaces --id/--title/...)"),
]


@app.callback()
def main(verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging to stderr")] = False) -> None:
    configure_logging(verbose)


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def _load_config(config: Path | None, repo: str | None) -> BranchPilotConfig:
    try:
        return get_config(config_path=config, repo=repo)
    except ConfigError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


def _work_item(
    work_item_file: Path | None,
    wi_id: int | None,
    title: str,
    wi_type: str,
    state: str,
    assigned_to: str | None,
) -> WorkItemContext:
    try:
        if work_item_file:
            return WorkItemContext.model_validate_json(work_item_file.read_text())
        if wi_id is None:
            rprint("[red]No work item given. Use --id (with --title/--type) or --work-item FILE.[/red]")
            raise typer.Exit(1)
        return WorkItemContext(id=wi_id, title=title, type=wi_type, state=state, assigned_to=assigned_to)
    except (OSError, ValidationError) as exc:
        rprint(f"[red]Invalid work item:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _state_label(directive: StateDirective | None) -> str:
    if directive is None or not directive.enabled:
        return "[dim](none)[/dim]"
    return f"→ {escape(directive.state)}"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("name")
def name_cmd(
    source: SourceOpt = "main",
    wi_id: IdOpt = None,
    title: TitleOpt = "",
    wi_type: TypeOpt = "",
    state: StateOpt = "",
    assigned_to: AssignedOpt = None,
    work_item_file: WorkItemFileOpt = None,
    config: ConfigOpt = None,
    repo: RepoOpt = None,
) -> None:
    """Print the branch name for a work item (no trailing newline)."""
    cfg = _load_config(config, repo)
    work_item = _work_item(work_item_file, wi_id, title, wi_type, state, assigned_to)
    # no trailing newline, for $(branchpilot name ...)
    typer.echo(RulesEngine(cfg).compute_branch_name(work_item, source), nl=False)


@app.command("explain")
def explain(
    source: SourceOpt = "main",
    wi_id: IdOpt = None,
    title: TitleOpt = "",
    wi_type: TypeOpt = "",
    state: StateOpt = "",
    assigned_to: AssignedOpt = None,
    work_item_file: WorkItemFileOpt = None,
    config: ConfigOpt = None,
    repo: RepoOpt = None,
) -> None:
    """Show which rule applies and how the branch name is built."""
    cfg = _load_config(config, repo)
    work_item = _work_item(work_item_file, wi_id, title, wi_type, state, assigned_to)
    branch_name, rule = RulesEngine(cfg).compute_with_rule(work_item, source)
    result = validate(branch_name, cfg.general.max_length)

    table = Table(title=f"#{work_item.id}: {escape(work_item.title)}")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Source branch", escape(source))
    table.add_row("Matched rule", escape(rule.matched_rule_name))
    table.add_row("Template", escape(rule.template))
    table.add_row("Prefix", escape(rule.prefix) or "[dim](none)[/dim]")
    table.add_row("Work item state", _state_label(rule.work_item_state))
    table.add_row("Branch name", f"[cyan]{escape(branch_name)}[/cyan]")
    table.add_row("Valid", "[green]yes[/green]" if result.valid else "[red]no[/red]")
    for message in result.errors:
        table.add_row("Error", f"[red]{message}[/red]")
    for message in result.warnings:
        table.add_row("Warning", f"[yellow]{message}[/yellow]")

    rprint(table)


@app.command("validate")
def validate_cmd(
    name: Annotated[str, typer.Argument(help="Branch name to check")],
    max_length: Annotated[
        int | None, typer.Option("--max-length", help="Soft length limit (default: config maxLength)")
    ] = None,
    config: ConfigOpt = None,
) -> None:
    """Check a branch name against git's naming rules."""
    limit = max_length if max_length is not None else _load_config(config, None).general.max_length
    result = validate(name, limit)

    for message in result.errors:
        rprint(f"[red]✗[/red] {message}")
    for message in result.warnings:
        rprint(f"[yellow]Warning:[/yellow] {message}")

    if not result.valid:
        raise typer.Exit(1)
    rprint(f"[green]✓[/green] {name}")


@app.command("rules")
def rules_cmd(config: ConfigOpt = None, repo: RepoOpt = None) -> None:
    """List configured rules in precedence order."""
    cfg = _load_config(config, repo)

    table = Table(title="Rules (first match wins)")
    table.add_column("Tier", style="bold")
    table.add_column("Rule", style="cyan")
    table.add_column("Match")
    table.add_column("Prefix")
    table.add_column("Template")
    table.add_column("State")

    for rule in cfg.rules_by_source_branch:
        table.add_row(
            "source",
            escape(rule.name),
            escape(f"{rule.match_type.value}: {rule.match}"),
            escape(rule.prefix),
            escape(rule.template),
            _state_label(rule.work_item_state),
        )
    for type_rule in cfg.rules_by_work_item_type:
        table.add_row(
            "type",
            escape(f"WI type: {type_rule.work_item_type}"),
            escape(type_rule.work_item_type),
            escape(type_rule.prefix or ""),
            escape(type_rule.template),
            _state_label(type_rule.work_item_state),
        )
    defaults = cfg.defaults
    table.add_row("default", "default", "*", "", escape(defaults.template), _state_label(defaults.work_item_state))

    rprint(table)


def _report_failure(result: CreateBranchResult) -> None:
    match result.error_kind:
        case "branch_conflict":
            rprint(
                f"[red]Cannot create '{escape(result.branch_name)}': it conflicts with the existing branch "
                f"'{escape(result.conflicting_ref or '')}'.[/red]"
            )
        case "branch_exists":
            rprint(
                f"[red]Branch '{escape(result.branch_name)}' already exists.[/red] "
                f"Try: [cyan]{escape(result.suggestion or '')}[/cyan]"
            )
        case "permission_denied":
            rprint("[red]Permission denied while creating the branch.[/red]")
        case _:
            rprint(f"[red]Branch creation failed:[/red] {escape(result.error or '')}")


@app.command("create")
def create(
    source: SourceOpt = "main",
    wi_id: IdOpt = None,
    title: TitleOpt = "",
    wi_type: TypeOpt = "",
    state: StateOpt = "",
    assigned_to: AssignedOpt = None,
    work_item_file: WorkItemFileOpt = None,
    name: Annotated[str | None, typer.Option("--name", "-n", help="Use this name instead of the computed one")] = None,
    config: ConfigOpt = None,
    repo: RepoOpt = None,
) -> None:
    """Create the branch in the local repository."""
    cfg = _load_config(config, repo)
    work_item = _work_item(work_item_file, wi_id, title, wi_type, state, assigned_to)
    computed, rule = RulesEngine(cfg).compute_with_rule(work_item, source)

    if name is not None and not cfg.general.allow_manual_name_override:
        rprint("[red]Manual branch names are disabled (allowManualNameOverride = false).[/red]")
        raise typer.Exit(1)
    branch_name = name if name is not None else computed

    result = validate(branch_name, cfg.general.max_length)
    for message in result.warnings:
        rprint(f"[yellow]Warning:[/yellow] {message}")
    if not result.valid:
        for message in result.errors:
            rprint(f"[red]✗[/red] {message}")
        raise typer.Exit(1)

    service = BranchService(LocalGitHost(get_settings().git_dir))
    try:
        created = asyncio.run(service.create_branch(branch_name, source))
    except BranchPilotError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    if not created.success:
        _report_failure(created)
        raise typer.Exit(1)

    if created.branch_name != branch_name:
        # the -N suffix can push a valid name over a limit
        final = validate(created.branch_name, cfg.general.max_length)
        for message in [*final.errors, *final.warnings]:
            rprint(f"[yellow]Warning:[/yellow] {message}")

    rprint(
        f"[green]✓[/green] Created [bold]{escape(created.branch_name)}[/bold] "
        f"from {escape(source)} ({escape(rule.matched_rule_name)})"
    )
    if rule.work_item_state is not None and rule.work_item_state.enabled:
        rprint(f"  Set work item #{work_item.id} state {_state_label(rule.work_item_state)}")


@app.command("config-show")
def config_show(config: ConfigOpt = None, repo: RepoOpt = None) -> None:
    """Show the resolved configuration."""
    cfg = _load_config(config, repo)

    table = Table(title="BranchPilot Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("config file", str(resolve_config_path(config)))
    table.add_row("lowercase", str(cfg.general.lowercase))
    table.add_row("nonAlnumReplacement", repr(cfg.general.non_alnum_replacement))
    table.add_row("maxLength", str(cfg.general.max_length))
    table.add_row("allowManualNameOverride", str(cfg.general.allow_manual_name_override))
    table.add_row("language", cfg.general.language)
    table.add_row("defaults.template", cfg.defaults.template)
    table.add_row("defaults.workItemState", _state_label(cfg.defaults.work_item_state))
    table.add_row("repoOverrides", ", ".join(cfg.repo_overrides) or "[dim](none)[/dim]")
    table.add_row("rulesBySourceBranch", str(len(cfg.rules_by_source_branch)))
    table.add_row("rulesByWorkItemType", str(len(cfg.rules_by_work_item_type)))

    rprint(table)


@app.command("config-init")
def config_init(
    config: ConfigOpt = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing config file")] = False,
) -> None:
    """Write the default configuration to the config file."""
    target = resolve_config_path(config)
    if target.exists() and not force:
        rprint(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(0)

    if target.exists():
        target.unlink()
    save_config(BranchPilotConfig.model_validate(DEFAULT_CONFIG), target)
    rprint(f"[green]✓[/green] Wrote default config to {target}")
