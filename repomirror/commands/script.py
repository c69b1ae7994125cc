"""
Script command for repomirror.

Prints a bash script that mirrors with git itself, keeping history,
tags and authorship that the API-based mirror drops.
"""

import click
import sys
from pathlib import Path
from typing import Optional

from ..config import load_config
from ..domain.locator import parse_locator
from ..errors import InvalidLocator
from ..exit_codes import get_exit_code_for_exception
from ..services.script_service import generate_mirror_script


@click.command('script')
@click.argument('source_url')
@click.argument('dest_url')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the script to a file')
def script_handler(source_url: str, dest_url: str, output: Optional[str]):
    """
    Generate a full-history mirror script (git clone/push --mirror).

    Examples:

        repomirror script https://github.com/me/app https://github.com/me/app-copy > mirror.sh
        repomirror script SRC DEST -o mirror.sh && SOURCE_TOKEN=... DEST_TOKEN=... bash mirror.sh
    """
    host = load_config().get('github', {}).get('host', 'github.com')

    try:
        source = parse_locator(source_url, host=host)
        dest = parse_locator(dest_url, host=host)
    except InvalidLocator as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(get_exit_code_for_exception(e))

    text = generate_mirror_script(source, dest)

    if output:
        path = Path(output)
        path.write_text(text)
        path.chmod(0o755)
        print(f"Script written to {path}", file=sys.stderr)
    else:
        click.echo(text, nl=False)
