"""
Handles the 'export' command: adds or updates an entry from a package archive.
"""

from pathlib import Path

import click

from .. import render
from ..cli_utils import standard_command, get_config, get_store, print_json
from ..domain.package import PackageMetadata
from ..exit_codes import SourceNotFound
from ..infra.archive import ArchiveReader


@click.command('export')
@click.argument('package', type=click.Path(path_type=Path))
@click.option('--json', 'json_output', is_flag=True, help='Output result as JSON')
@click.pass_context
@standard_command
def export_handler(ctx, package, json_output):
    """Export a package to your indexer, updating it if it already exists.

    PACKAGE is the path to the package archive. Its metadata decides the
    entry it lands in: {id}@{major version}.
    """
    config = get_config(ctx)
    store = get_store(ctx)
    store.require_initialized()

    if not package.exists():
        raise SourceNotFound(str(package))

    reader = ArchiveReader(config['package']['metadata_filename'])
    metadata = PackageMetadata.from_document(reader.read_metadata(package))

    result = store.export_entry(metadata.id, metadata.major_version, package)

    if json_output:
        result.metadata['version'] = metadata.version
        print_json(result.to_dict())
        return

    render.done(f"Successfully exported {result.entry} to your indexer\n")
    render.render_push_reminder(result.store_path)
