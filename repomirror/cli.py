#!/usr/bin/env python3

import click

from repomirror.commands.mirror import mirror_handler
from repomirror.commands.validate import validate_handler
from repomirror.commands.script import script_handler
from repomirror.commands.config import config_cmd


@click.group()
@click.version_option(package_name='repomirror')
def cli():
    """repomirror - Mirror a GitHub repository through the git-object API.

    Copies the files of every branch of a source repository into a
    destination repository without a local clone.
    """
    pass


cli.add_command(mirror_handler, name='mirror')
cli.add_command(validate_handler, name='validate')
cli.add_command(script_handler, name='script')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
