"""
Mirror command for repomirror.

Replaces the content of a destination repository with the current
content of every branch of a source repository, through the GitHub API.
"""

import click
import json
import sys
from typing import Optional, Tuple

from ..api import create_service
from ..config import load_config, configure_logging, resolve_token
from ..domain.event import LogEntry, Severity
from ..domain.operation import MirrorResult
from ..errors import MirrorError, MissingArgument
from ..exit_codes import PARTIAL_SUCCESS, get_exit_code_for_exception
from ..services.mirror_service import MirrorService


SEVERITY_STYLES = {
    Severity.INFO: "white",
    Severity.SUCCESS: "green",
    Severity.WARN: "yellow",
    Severity.ERROR: "red",
}


@click.command('mirror')
@click.argument('source_url')
@click.argument('dest_url')
@click.option('--source-token', envvar='REPOMIRROR_SOURCE_TOKEN',
              help='Token for the source repository (env: REPOMIRROR_SOURCE_TOKEN)')
@click.option('--dest-token', envvar='REPOMIRROR_DEST_TOKEN',
              help='Token for the destination repository (env: REPOMIRROR_DEST_TOKEN)')
@click.option('--concurrency', '-c', type=click.IntRange(min=1),
              help='Files copied in parallel per batch (default: from config, 10)')
@click.option('--branch', '-b', 'branches', multiple=True,
              help='Only copy these secondary branches (repeatable)')
@click.option('--dry-run', is_flag=True, help='Validate and list files without writing anything')
@click.option('--yes', '-y', is_flag=True, help='Do not ask before wiping the destination')
# Output options
@click.option('--json', 'output_json', is_flag=True, help='Output log entries as JSONL')
@click.option('--pretty', is_flag=True, help='Display progress with rich formatting')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def mirror_handler(
    source_url: str,
    dest_url: str,
    source_token: Optional[str],
    dest_token: Optional[str],
    concurrency: Optional[int],
    branches: Tuple[str, ...],
    dry_run: bool,
    yes: bool,
    output_json: bool,
    pretty: bool,
    debug: bool,
):
    """
    Mirror SOURCE_URL into DEST_URL.

    Every file of the source default branch is copied to the destination
    default branch as one new commit, after the destination is cleared.
    Other source branches are copied as one commit each. History, tags
    and authorship are not preserved (see `repomirror script` for that).

    Both repositories must be public.

    Examples:

        # Mirror with tokens from the environment
        export REPOMIRROR_SOURCE_TOKEN=ghp_... REPOMIRROR_DEST_TOKEN=ghp_...
        repomirror mirror https://github.com/me/app https://github.com/me/app-copy

        # Preview without touching the destination
        repomirror mirror https://github.com/me/app https://github.com/me/app-copy --dry-run

        # Only the 'dev' branch besides the default one, no prompt
        repomirror mirror SRC DEST --branch dev --yes --pretty
    """
    config = load_config()
    configure_logging(config, debug=debug)

    source_token = resolve_token(config, 'source', source_token)
    dest_token = resolve_token(config, 'dest', dest_token)

    if not source_token or not dest_token:
        _fail(MissingArgument("Both --source-token and --dest-token are required"), output_json)

    if not dry_run and not yes:
        click.confirm(
            f"All content of {dest_url} will be permanently replaced by {source_url}, "
            "including every branch. Continue?",
            abort=True,
            err=True,
        )

    service = create_service(
        source_token,
        dest_token,
        config=config,
        concurrency=concurrency,
        branches=list(branches) if branches else None,
        dry_run=dry_run or None,
    )

    if pretty:
        _mirror_pretty(service, source_url, dest_url)
    elif output_json:
        _mirror_json(service, source_url, dest_url)
    else:
        _mirror_simple(service, source_url, dest_url)


def _fail(error: MirrorError, output_json: bool):
    if output_json:
        print(json.dumps({'error': error.message, 'type': type(error).__name__}), file=sys.stderr)
    else:
        print(f"Error: {error.message}", file=sys.stderr)
    sys.exit(get_exit_code_for_exception(error))


def _finish(result: Optional[MirrorResult]):
    """Exit non-zero when secondary branches failed."""
    if result and result.failed_branches:
        sys.exit(PARTIAL_SUCCESS)


def _mirror_simple(service: MirrorService, source_url: str, dest_url: str):
    """Simple text output for mirror."""
    try:
        for entry in service.mirror(source_url, dest_url):
            print(str(entry), file=sys.stderr)
    except MirrorError as e:
        sys.exit(get_exit_code_for_exception(e))

    _finish(service.last_result)


def _mirror_json(service: MirrorService, source_url: str, dest_url: str):
    """JSONL output for mirror."""
    try:
        for entry in service.mirror(source_url, dest_url):
            print(entry.to_jsonl(), flush=True)
    except MirrorError as e:
        print(json.dumps({'type': 'error', 'error': e.message, 'kind': type(e).__name__}), flush=True)
        sys.exit(get_exit_code_for_exception(e))

    result = service.last_result
    if result:
        for branch in result.branches:
            print(json.dumps(branch.to_dict()), flush=True)
        print(json.dumps(result.to_dict()), flush=True)

    _finish(result)


def _print_entry(console, entry: LogEntry):
    style = SEVERITY_STYLES[entry.severity]
    console.print(
        f"[dim]{entry.timestamp.strftime('%H:%M:%S')}[/dim] [{style}]{entry.message}[/{style}]",
        highlight=False,
    )


def _mirror_pretty(service: MirrorService, source_url: str, dest_url: str):
    """Rich formatted output for mirror."""
    from rich.console import Console
    from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
    from rich.table import Table

    console = Console(stderr=True)
    mode = "[bold yellow]DRY RUN[/bold yellow] " if service.options.dry_run else ""

    console.print(f"\n{mode}[bold]Source:[/bold] {source_url}")
    console.print(f"[bold]Destination:[/bold] {dest_url}")
    console.print()

    failed = None
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Starting mirror...", total=None)
        try:
            for entry in service.mirror(source_url, dest_url):
                # Progress entries drive the bar, everything else is printed
                if entry.progress:
                    progress.update(
                        task,
                        completed=entry.progress.completed,
                        total=entry.progress.total,
                        description=entry.message,
                    )
                else:
                    _print_entry(progress.console, entry)
                    progress.update(task, description=entry.message)
        except MirrorError as e:
            failed = e

    if failed is not None:
        console.print(f"\n[red]✗ Mirror failed:[/red] {failed.message}")
        sys.exit(get_exit_code_for_exception(failed))

    result = service.last_result
    if not result:
        console.print("[red]Mirror failed - no result[/red]")
        sys.exit(1)

    table = Table(title=f"{mode}Mirror Summary", show_header=True)
    table.add_column("Branch", style="cyan")
    table.add_column("Status")
    table.add_column("Files", justify="right", style="green")

    for branch in result.branches:
        status = branch.status.value if branch.ok else f"[red]{branch.status.value}[/red]"
        table.add_row(branch.name, status, str(branch.files))

    console.print(table)

    if result.failed_branches:
        console.print(f"\n[yellow]Branches not copied ({len(result.failed_branches)}):[/yellow]")
        for branch in result.failed_branches:
            console.print(f"  [yellow]•[/yellow] {branch.name}: {branch.error}")
        sys.exit(PARTIAL_SUCCESS)

    console.print(f"\n[bold green]✓[/bold green] Mirror complete: {result.destination}")
