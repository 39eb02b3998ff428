"""Scaffolding CLI commands - new, plans, show, validate."""
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from stencil.cli_support import (
    confirm_action,
    handle_cli_error,
    is_mock,
    parse_variables,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_file_logging,
)
from stencil.config.loader import PlanLoader
from stencil.core.template_loader import DEFAULT_PLAN, TemplateLoader
from stencil.models.plan import PlanError
from stencil.scaffold.core import ScaffoldManager
from stencil.scaffold.filesystem import FilesystemError
from stencil.scaffold.templates import TemplateEngine
from stencil.services.git_manager import VcsError

# Module-level instances (will be set by register function)
console: Console = Console()
template_loader: TemplateLoader = TemplateLoader()

ACTION_STYLES = {
    "create": "green",
    "unchanged": "dim",
    "overwrite": "yellow",
    "conflict": "red",
}


def new(
    root: Path = typer.Argument(Path("."), help="Target directory (created if missing)"),
    plan: Optional[str] = typer.Option(None, "--plan", "-p", help="Bundled plan name or path to a plan YAML file"),
    var: Optional[List[str]] = typer.Option(None, "--var", help="Override a plan variable (KEY=VALUE, repeatable)"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing files whose content differs"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation when --force is set"),
    no_git: bool = typer.Option(False, "--no-git", help="Write files only, skip git init and commit"),
    reuse_repo: bool = typer.Option(False, "--reuse-repo", help="Commit into an existing git repository"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Override the plan's commit message"),
    remote: Optional[str] = typer.Option(None, "--remote", help="Register this URL as 'origin' after committing"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be written without touching disk"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging and tracebacks"),
):
    """Scaffold a project from a plan and make the initial commit.

    Examples:
        stencil new                          # wasm-demo plan into the current directory
        stencil new ./demo --no-git          # files only
        stencil new ./lib -p python-lib --var project_name=acme
        stencil new ./demo -p my-plan.yml --force --yes
    """
    if log_file or verbose:
        setup_file_logging(log_file=log_file, verbose=verbose)

    dry_run = dry_run or is_mock()

    try:
        scaffold_plan = template_loader.resolve(plan)
        scaffold_plan = TemplateEngine().render_plan(scaffold_plan, parse_variables(var))
        if message:
            scaffold_plan = scaffold_plan.model_copy(update={'commit_message': message})

        manager = ScaffoldManager()

        if dry_run:
            _show_preview(manager, scaffold_plan, root, overwrite=force, git=not no_git, reuse_repo=reuse_repo)
            return

        if force and any(root.iterdir() if root.is_dir() else []):
            if not confirm_action(f"Overwrite differing files in {root}?", yes_flag=yes):
                console.print("[yellow]Cancelled[/yellow]")
                return

        result = manager.scaffold(
            scaffold_plan,
            root,
            overwrite=force,
            git=not no_git,
            reuse_repo=reuse_repo,
            remote=remote,
        )
    except (PlanError, FilesystemError, VcsError) as e:
        handle_cli_error(e, console, verbose=verbose)

    print_success(console, f"Scaffolded '{scaffold_plan.name}' into {result.root}")
    console.print(
        f"  {len(result.written)} written, {len(result.unchanged)} unchanged, "
        f"{len(result.directories)} directories"
    )
    if result.commit:
        print_success(console, f"Committed {result.commit[:7]}: {scaffold_plan.commit_message}")
    if remote:
        print_info(console, f"Remote 'origin' set to {remote} (not pushed)")


def _show_preview(
    manager: ScaffoldManager,
    scaffold_plan,
    root: Path,
    overwrite: bool,
    git: bool,
    reuse_repo: bool,
) -> None:
    """Print the dry-run table for ``new``, flagging steps the real run would refuse."""
    actions = manager.preview(scaffold_plan, root, overwrite=overwrite)

    table = Table(title=f"Plan '{scaffold_plan.name}' → {root}", show_header=True, header_style="bold cyan")
    table.add_column("Action")
    table.add_column("Path")
    for path, action in actions:
        style = ACTION_STYLES.get(action, "white")
        table.add_row(f"[{style}]{action}[/{style}]", path)
    console.print(table)

    conflicts = [path for path, action in actions if action == "conflict"]
    if conflicts:
        print_error(
            console,
            f"{len(conflicts)} existing path(s) differ from the plan; "
            f"the run would stop at '{conflicts[0]}' (use --force to overwrite files)",
        )

    if git:
        if manager.git.repo_exists(root) and not reuse_repo:
            print_error(console, f"A git repository already exists in {root} (use --reuse-repo to commit into it)")
        else:
            console.print(f"[dim]Would commit: {scaffold_plan.commit_message}[/dim]")
    print_warning(console, "Dry run - nothing written")


def plans():
    """List bundled plans."""
    names = template_loader.list_plans()
    if not names:
        console.print("[yellow]No bundled plans found[/yellow]")
        return

    table = Table(title="Bundled Plans", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name in names:
        marker = " (default)" if name == DEFAULT_PLAN else ""
        table.add_row(f"{name}{marker}", template_loader.get_plan_info(name))
    console.print(table)
    console.print("\n[dim]Use 'stencil new --plan <name>' to scaffold from a plan[/dim]")


def show(
    plan: str = typer.Argument(DEFAULT_PLAN, help="Bundled plan name or path to a plan YAML file"),
    var: Optional[List[str]] = typer.Option(None, "--var", help="Override a plan variable (KEY=VALUE, repeatable)"),
    entry: Optional[str] = typer.Option(None, "--entry", "-e", help="Print the rendered text of one entry"),
):
    """Show the entries a plan would write."""
    try:
        scaffold_plan = template_loader.resolve(plan)
        scaffold_plan = TemplateEngine().render_plan(scaffold_plan, parse_variables(var))
    except PlanError as e:
        handle_cli_error(e, console)

    if entry:
        found = scaffold_plan.get_entry(entry)
        if found is None:
            handle_cli_error(PlanError(f"Plan '{scaffold_plan.name}' has no entry '{entry}'"), console)
        console.out(found.content, end="", highlight=False)
        return

    console.print(f"[bold]{scaffold_plan.name}[/bold] - {scaffold_plan.description or 'No description'}")
    console.print(f"[dim]Commit message: {scaffold_plan.commit_message}[/dim]\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Path")
    table.add_column("Bytes", justify="right")
    table.add_column("Mode")
    for index, item in enumerate(scaffold_plan.entries, start=1):
        table.add_row(
            str(index),
            item.path,
            str(len(item.content.encode("utf-8"))),
            oct(item.mode)[2:],
        )
    console.print(table)

    if scaffold_plan.directories:
        console.print("\n[bold]Directories:[/bold]")
        for directory in scaffold_plan.directories:
            console.print(f"  {directory}/")
    if scaffold_plan.variables:
        console.print("\n[bold]Variables:[/bold]")
        for key, value in scaffold_plan.variables.items():
            console.print(f"  {key} = {value}")


def validate(
    plan_file: Path = typer.Argument(..., help="Plan YAML file to check"),
):
    """Validate a plan file without writing anything."""
    try:
        scaffold_plan = PlanLoader(str(plan_file)).load()
        TemplateEngine().render_plan(scaffold_plan)
    except PlanError as e:
        handle_cli_error(e, console)

    print_success(
        console,
        f"{plan_file} is valid: {len(scaffold_plan.entries)} files, "
        f"{len(scaffold_plan.directories)} extra directories",
    )


def register_scaffold_commands(
    app: typer.Typer,
    shared_console: Console,
    shared_template_loader: Optional[TemplateLoader] = None,
):
    """Register scaffolding commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
        shared_template_loader: Preconfigured template loader from main CLI (optional)
    """
    global console, template_loader
    console = shared_console
    if shared_template_loader is not None:
        template_loader = shared_template_loader

    app.command()(new)
    app.command()(plans)
    app.command()(show)
    app.command()(validate)
