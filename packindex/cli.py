#!/usr/bin/env python3

import click

from packindex import __version__
from packindex.config import load_config, configure_logging
from packindex.commands.init import init_handler
from packindex.commands.list import list_handler
from packindex.commands.remove import remove_handler
from packindex.commands.export import export_handler
from packindex.commands.status import status_handler
from packindex.commands.config import config_cmd


@click.group()
@click.version_option(version=__version__, prog_name="packindex")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging on stderr')
@click.pass_context
def cli(ctx, verbose):
    """packindex - Maintain a local mirror of a package index.

    Export package archives into your fork of the index, remove entries,
    and publish every change as one squashed commit on top of the
    index's root commit, ready to force-push.
    """
    config = load_config()
    configure_logging(config, verbose=verbose)
    ctx.ensure_object(dict)['config'] = config


# Store commands
cli.add_command(init_handler, name='init')
cli.add_command(list_handler, name='list')
cli.add_command(remove_handler, name='remove')
cli.add_command(export_handler, name='export')
cli.add_command(status_handler, name='status')

# Command groups
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
