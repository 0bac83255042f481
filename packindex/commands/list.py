"""
Handles the 'list' command: shows the entries held by the store.
"""

import click

from ..cli_utils import standard_command, get_store, print_json
from ..domain.package import split_entry_name
from ..render import render_entry_list


@click.command('list')
@click.option('--json', 'json_output', is_flag=True, help='Output as JSONL')
@click.pass_context
@standard_command
def list_handler(ctx, json_output):
    """List all entries in your indexer.

    An entry is a directory of the store holding a package artifact;
    other directories are ignored.
    """
    store = get_store(ctx)
    store.require_initialized()

    if not json_output:
        render_entry_list(store.entries())
        return

    for name in sorted(store.entries()):
        package_id, major = split_entry_name(name)
        print_json({
            'name': name,
            'id': package_id,
            'major_version': major,
            'path': str(store.entry_path(name)),
        })
