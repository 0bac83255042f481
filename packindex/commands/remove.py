"""
Handles the 'remove' command: deletes an entry and squashes the history.
"""

import click

from .. import render
from ..cli_utils import standard_command, get_store, print_json


@click.command('remove')
@click.argument('entry')
@click.option('--json', 'json_output', is_flag=True, help='Output result as JSON')
@click.pass_context
@standard_command
def remove_handler(ctx, entry, json_output):
    """Remove an entry from your indexer.

    ENTRY is the entry directory name exactly as shown by 'list',
    e.g. geode.loader@4.
    """
    store = get_store(ctx)
    result = store.remove_entry(entry)

    if json_output:
        print_json(result.to_dict())
        return

    render.done(f"Successfully removed {result.entry}\n")
    render.render_push_reminder(result.store_path)
