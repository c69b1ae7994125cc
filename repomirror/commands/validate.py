"""
Validate command for repomirror.

Checks that a repository URL resolves, that the token is accepted, and
reports visibility and default branch.
"""

import click
import json
import sys
from typing import Optional

from ..config import load_config, configure_logging, resolve_token
from ..errors import MirrorError
from ..exit_codes import get_exit_code_for_exception
from ..infra.github_client import GitHubClient, DEFAULT_API_URL
from ..services.validator import RepositoryValidator


@click.command('validate')
@click.argument('url')
@click.option('--token', envvar='REPOMIRROR_SOURCE_TOKEN',
              help='Token used for the lookup (env: REPOMIRROR_SOURCE_TOKEN)')
@click.option('--require-public', is_flag=True, help='Fail unless the repository is public')
@click.option('--pretty', is_flag=True, help='Display as a table')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def validate_handler(url: str, token: Optional[str], require_public: bool, pretty: bool, debug: bool):
    """
    Validate a repository URL and token.

    Examples:

        repomirror validate https://github.com/me/app
        repomirror validate https://github.com/me/app --require-public --pretty
    """
    config = load_config()
    configure_logging(config, debug=debug)

    github = config.get('github', {})
    client = GitHubClient(
        resolve_token(config, 'source', token),
        api_url=github.get('api_url', DEFAULT_API_URL),
        timeout=github.get('timeout_seconds', 30),
    )
    validator = RepositoryValidator(client, host=github.get('host', 'github.com'))

    try:
        info = validator.validate_url(url)
        if require_public:
            validator.require_public(info)
    except MirrorError as e:
        print(json.dumps({'error': e.message, 'type': type(e).__name__}), file=sys.stderr)
        sys.exit(get_exit_code_for_exception(e))

    if pretty:
        from rich.console import Console
        from rich.table import Table

        table = Table(title=info.full_name, show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("URL", info.locator.url)
        table.add_row("Visibility", info.visibility)
        table.add_row("Default branch", info.default_branch)
        Console().print(table)
    else:
        print(json.dumps(info.to_dict()))
