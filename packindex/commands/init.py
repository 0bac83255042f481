"""
Handles the 'init' command: clones the operator's fork of the index.
"""

import click

from .. import render
from ..cli_utils import standard_command, get_config, get_store
from ..exit_codes import AlreadyInitialized


@click.command('init')
@click.option('--url', 'fork_url', help='URL of your fork (prompted for when omitted)')
@click.pass_context
@standard_command
def init_handler(ctx, fork_url):
    """Initialize your indexer.

    Clones your fork of the package index into the local store. The
    store is created once; there is no command to tear it down.
    """
    config = get_config(ctx)
    store = get_store(ctx)

    # Checked before prompting so the operator isn't asked for a URL in vain
    if store.is_initialized():
        raise AlreadyInitialized(str(store.path))

    if not fork_url:
        render.info("Welcome to the Indexer Setup. Here, we will set up your indexer "
                    "to be compatible with the package index.")
        render.info(f"Before continuing, make a github fork of {config['general']['upstream_url']}.")
        fork_url = click.prompt("Enter your forked URL").strip()

    path = store.init(fork_url)
    render.done(f"Successfully initialized {path}")
