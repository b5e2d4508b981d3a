"""regtrack CLI — all commands."""

import logging
from typing import Annotated

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from regtrack import changeset
from regtrack.backends.github import token_from_settings
from regtrack.errors import RegtrackError
from regtrack.issues import IssueHandler, setup
from regtrack.models import LifecycleAction
from regtrack.settings import get_settings

app = typer.Typer(help="regtrack: one GitHub issue per performance regression", no_args_is_help=True)

TrackerOpt = Annotated[
    str | None,
    typer.Option("--tracker", "-k", help="Profile name from ~/.config/regtrack/config.toml"),
]
DryRunOpt = Annotated[
    bool,
    typer.Option("--dry-run", help="Log backend calls instead of making them"),
]

_ACTION_LABEL = {
    LifecycleAction.CREATED: "[green]created[/green]",
    LifecycleAction.REOPENED: "[yellow]reopened[/yellow]",
    LifecycleAction.COMMENTED: "[cyan]commented on[/cyan]",
    LifecycleAction.SKIPPED: "[dim]already tracking[/dim]",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every backend call")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


# ---------------------------------------------------------------------------
# Handler factory
# ---------------------------------------------------------------------------


def get_handler(tracker: str | None = None, dry_run: bool = False) -> IssueHandler:
    settings = get_settings(tracker=tracker)
    if dry_run:
        settings = settings.model_copy(update={"dry_run": True})
    try:
        return setup(token_from_settings(settings), settings.operation_config(), templates=settings.templates())
    except RegtrackError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("add-issue")
def add_issue(
    test_name: Annotated[str, typer.Argument(help="Name of the regressing test")],
    description: Annotated[str, typer.Argument(help="Regression description posted as a comment")],
    tracker: TrackerOpt = None,
    dry_run: DryRunOpt = False,
) -> None:
    """Report a regression: create, reopen or comment on the test's issue."""
    handler = get_handler(tracker, dry_run)
    title = handler.templates.render_title(test_name)
    try:
        action = handler.add_issue(test_name, description)
    except RegtrackError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    prefix = "[dim](dry run)[/dim] " if handler.config.dry_run else ""
    where = f"{handler.config.org}/{handler.config.repo}"
    rprint(f"{prefix}{_ACTION_LABEL[action]} [bold]{escape(title)}[/bold] in {where}")


@app.command("close-issue")
def close_issue(
    number: Annotated[int, typer.Argument(help="Issue number")],
    tracker: TrackerOpt = None,
    dry_run: DryRunOpt = False,
) -> None:
    """Close a tracked issue."""
    handler = get_handler(tracker, dry_run)
    try:
        handler.close_issue(number)
    except RegtrackError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    prefix = "[dim](dry run)[/dim] " if handler.config.dry_run else ""
    rprint(f"{prefix}[green]✓[/green] Closed #{number} in {handler.config.org}/{handler.config.repo}")


@app.command("commit")
def commit_cmd(
    full: Annotated[bool, typer.Option("--full", help="Print the full 40-character commit ID")] = False,
) -> None:
    """Print the commit ID baked into the image via KO_DATA_PATH (no trailing newline)."""
    try:
        commit_id = changeset.get_full() if full else changeset.get()
    except RegtrackError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1) from exc
    # No trailing newline — designed for shell substitution: $(regtrack commit)
    typer.echo(commit_id, nl=False)


@app.command("config-show")
def config_show(tracker: TrackerOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(tracker=tracker)

    def mask(val: str | None, prefix: str = "") -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"{prefix}...{val[-5:]}"

    table = Table(title="regtrack Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_tracker", settings.default_tracker or "[dim](not set)[/dim]")
    table.add_row("repository", f"{settings.org}/{settings.repo}")
    table.add_row(
        "github_token",
        mask(
            settings.github_token.get_secret_value() if settings.github_token else None,
            prefix="ghp_",
        ),
    )
    table.add_row("github_auth", settings.github_auth)
    table.add_row("label", settings.label)
    table.add_row("stale_after_days", str(settings.stale_after_days))
    table.add_row("dry_run", str(settings.dry_run))
    table.add_row("dry_run_scope", settings.dry_run_scope.value)

    rprint(table)
