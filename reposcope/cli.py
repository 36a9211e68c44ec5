"""CLI entry point for RepoScope."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from reposcope.cache.models import RepositoryAnalysis
from reposcope.config import RepoScopeConfig, load_config
from reposcope.config.loader import DEFAULT_CONFIG_TEMPLATE
from reposcope.errors import RepoScopeError
from reposcope.identity import parse_repository_url
from reposcope.logconfig import configure_logging
from reposcope.runtime import AppContext, build_context
from reposcope.vcs import create_source_host
from reposcope.vcs.issues import list_filtered_issues

app = typer.Typer(
    name="reposcope",
    help="Analyze GitHub repositories: architecture, routes and execution traces.",
)

config_app = typer.Typer(help="Manage RepoScope configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: RepoScopeConfig | None = None


def _get_config() -> RepoScopeConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to reposcope.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    _config = load_config(config)
    configure_logging(_config.log_level, _config.log_format)


def _context(cfg: RepoScopeConfig) -> AppContext:
    try:
        return build_context(cfg)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _token(cfg: RepoScopeConfig) -> str | None:
    return os.environ.get(cfg.vcs.token_env) or None


def _display_analysis(analysis: RepositoryAnalysis, cached: bool) -> None:
    m = analysis.metadata
    status = analysis.repo_status
    topics_str = ", ".join(m.topics) if m.topics else "none"
    panel_text = (
        f"[bold]{m.full_name}[/bold]\n"
        f"{m.description or '(no description)'}\n\n"
        f"[dim]Language:[/dim]  {m.language or '-'}\n"
        f"[dim]Stars:[/dim]     {m.stars}   [dim]Forks:[/dim] {m.forks}\n"
        f"[dim]Branch:[/dim]    {m.default_branch}\n"
        f"[dim]Topics:[/dim]    {topics_str}\n"
        f"[dim]Commits:[/dim]   ~{analysis.commits.total}   "
        f"[dim]Contributors:[/dim] {len(analysis.contributors)}\n"
        f"[dim]Issues:[/dim]    {status.open_issues} open / {status.closed_issues} closed   "
        f"[dim]PRs:[/dim] {status.open_prs} open / {status.closed_prs} closed\n"
        f"[dim]Analyzed:[/dim]  {analysis.analyzed_at.isoformat()}"
        + ("  [yellow](cached)[/yellow]" if cached else "")
    )
    rprint(Panel(panel_text, title="Repository", border_style="blue"))

    stack = Tree("[bold]Tech Stack[/bold]")
    for side, category in (
        ("Frontend", analysis.tech_stack.frontend),
        ("Backend", analysis.tech_stack.backend),
    ):
        if category is None:
            continue
        branch = stack.add(f"[green]{side}[/green] ({category.source})")
        deps = [*category.dependencies, *category.dev_dependencies]
        branch.add(", ".join(deps[:20]) + (" ..." if len(deps) > 20 else ""))
    rprint(stack)

    llm = analysis.llm_analysis
    rprint(Panel(escape(llm.overall_flow) or "(none)", title="Overall Flow", border_style="green"))
    rprint(Syntax(llm.architecture_diagram, "text"))

    table = Table(title=f"Routes ({len(llm.routes)})")
    table.add_column("#", justify="right")
    table.add_column("Method", style="magenta")
    table.add_column("Path", style="cyan")
    table.add_column("Role", style="yellow")
    table.add_column("Functionality")
    for i, route in enumerate(llm.routes):
        table.add_row(
            str(i), route.method, escape(route.path), route.lifecycle_role, escape(route.functionality)
        )
    rprint(table)


@app.command()
def analyze(
    repo_url: str = typer.Argument(..., help="https://github.com/owner/repo"),
    force: bool = typer.Option(False, "--force", help="Bypass the cache and re-run"),
) -> None:
    """Analyze a repository (architecture diagram and route catalog)."""
    cfg = _get_config()
    ctx = _context(cfg)
    rprint(f"[bold]Analyzing[/bold] {repo_url} ...")
    try:
        result = asyncio.run(
            ctx.repository_analyzer.analyze(repo_url, token=_token(cfg), force_refresh=force)
        )
    except RepoScopeError as e:
        rprint(f"[red]Error ({e.code}):[/red] {e.message}")
        raise typer.Exit(1)
    _display_analysis(result.analysis, result.cached)


@app.command()
def status(
    repo_url: str = typer.Argument(..., help="https://github.com/owner/repo"),
) -> None:
    """Show whether a repository has a cached analysis."""
    cfg = _get_config()
    ctx = _context(cfg)
    try:
        summary = ctx.repository_analyzer.check(repo_url)
    except RepoScopeError as e:
        rprint(f"[red]Error ({e.code}):[/red] {e.message}")
        raise typer.Exit(1)
    if summary is None:
        rprint(f"[yellow]Not analyzed:[/yellow] {repo_url}")
        raise typer.Exit(0)
    rprint(
        f"[green]Cached:[/green] {summary.repo_url} "
        f"(analyzed {summary.analyzed_at.isoformat()})"
    )


@app.command()
def route(
    repo_url: str = typer.Argument(..., help="https://github.com/owner/repo"),
    route_path: str = typer.Argument(..., help="Route path, e.g. /api/users"),
    index: int = typer.Option(0, "--index", help="Route position (selects the credential)"),
    force: bool = typer.Option(False, "--force", help="Bypass the route cache"),
) -> None:
    """Deep-dive one route: flowchart and line-referenced execution trace."""
    cfg = _get_config()
    ctx = _context(cfg)
    try:
        outcome = asyncio.run(
            ctx.route_analyzer.analyze(
                repo_url, route_path, route_index=index, token=_token(cfg), force_reload=force
            )
        )
    except RepoScopeError as e:
        rprint(f"[red]Error ({e.code}):[/red] {e.message}")
        raise typer.Exit(1)

    if outcome.is_exhausted:
        rprint(
            "[yellow]Model rate limit exhausted.[/yellow] "
            "Come back later or add more API keys."
        )
        raise typer.Exit(2)

    result = outcome.result
    title = f"{route_path}" + (" (cached)" if outcome.cached else "")
    rprint(Panel(Syntax(result.flow_visualization, "markdown"), title=title))
    if not outcome.steps:
        rprint(Syntax(result.execution_trace, "markdown"))
        return
    for step in outcome.steps:
        body = f"[dim]Location:[/dim] {escape(step.location)}\n\n{escape(step.explanation)}"
        rprint(Panel(body, title=f"Step {step.number}: {escape(step.title)}", border_style="cyan"))
        if step.code:
            rprint(Syntax(step.code, step.language, line_numbers=False))


@app.command()
def issues(
    repo_url: str = typer.Argument(..., help="https://github.com/owner/repo"),
    label: list[str] = typer.Option([], "--label", "-l", help="Label filter (repeatable)"),
    type_: str = typer.Option("issue", "--type", help="issue or pr"),
    sort: str = typer.Option(
        "created-desc", "--sort", help="created-desc, created-asc or comments-desc"
    ),
) -> None:
    """List filtered issues or pull requests."""
    cfg = _get_config()
    if type_ not in ("issue", "pr"):
        rprint(f"[red]Error:[/red] Invalid type '{type_}'. Choose issue or pr.")
        raise typer.Exit(1)
    if sort not in ("created-desc", "created-asc", "comments-desc"):
        rprint(f"[red]Error:[/red] Invalid sort '{sort}'.")
        raise typer.Exit(1)
    try:
        identity = parse_repository_url(repo_url, cfg.vcs.host)
    except RepoScopeError as e:
        rprint(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    host = create_source_host(cfg.vcs, _token(cfg))
    found = asyncio.run(list_filtered_issues(host, identity, label or None, type_, sort))
    if not found:
        rprint("[yellow]No matching issues.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"{identity.slug} ({len(found)})")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Title")
    table.add_column("State")
    table.add_column("Author", style="green")
    table.add_column("Labels", style="yellow")
    table.add_column("Comments", justify="right")
    for issue in found:
        table.add_row(
            str(issue.number),
            escape(issue.title),
            issue.state,
            issue.user.login,
            ", ".join(lbl.name for lbl in issue.labels) or "-",
            str(issue.comments),
        )
    rprint(table)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Bind port"),
) -> None:
    """Run the HTTP service."""
    from reposcope.service import run_service

    cfg = _get_config()
    updates = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
    if updates:
        cfg = cfg.model_copy(update={"service": cfg.service.model_copy(update=updates)})
    rprint(f"[bold]Serving[/bold] on http://{cfg.service.host}:{cfg.service.port}")
    run_service(cfg)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default reposcope.yaml in current directory."""
    target = Path("reposcope.yaml")
    if target.exists() and not force:
        rprint("[yellow]reposcope.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
