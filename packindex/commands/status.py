"""
Handles the 'status' command: summarizes the local store.
"""

import click

from ..cli_utils import standard_command, get_store, print_json
from ..exit_codes import VcsOperationFailed
from ..infra.git_client import GitCommandError
from ..render import render_status


@click.command('status')
@click.option('--json', 'json_output', is_flag=True, help='Output as JSON')
@click.pass_context
@standard_command
def status_handler(ctx, json_output):
    """Show the store location, branch, history depth and entry count.

    After every export or remove the history is two commits deep: the
    root commit and the squashed update.
    """
    store = get_store(ctx)
    store.require_initialized()
    path = str(store.path)

    try:
        branch = store.git.symbolic_head(path)
        commits = store.git.log(path, limit=1)
        remote = store.git.remote_url(path)
    except GitCommandError as e:
        raise VcsOperationFailed("read repository status", str(e)) from e

    status = {
        'store': path,
        'remote': remote,
        'branch': branch.replace('refs/heads/', '', 1) if branch else None,
        'history_depth': store.history_depth(),
        'entries': sum(1 for _ in store.entries()),
        'last_commit': commits[0].message if commits else None,
    }

    if json_output:
        print_json(status)
    else:
        render_status(status)
