"""
Local cache commands for modulehub.

- fetch:  download and extract a ref into the cache
- local:  list refs already extracted
- remove: delete a cached ref
"""

import click

from ..cli_utils import standard_command, add_common_options, build_manager, resolve_ref
from ..exit_codes import NoCompatibleRefError
from ..render import render_local_table


@click.command('fetch')
@click.argument('repository')
@click.option('--tag', help='Tag to fetch')
@click.option('--branch', help='Branch to fetch')
@click.option('--latest', is_flag=True, help='Fetch the newest compatible tag')
@click.option('--overwrite', is_flag=True, help='Replace an existing extraction')
@add_common_options('installed', 'cache_root', 'verbose', 'quiet')
@standard_command
def fetch_handler(repository, tag, branch, latest, overwrite, installed_version, cache_root,
                  verbose, quiet):
    """
    Download a ref's archive and extract it into the cache.

    An existing extraction is reused unless --overwrite is given.

    \b
    Examples:
        modulehub fetch https://github.com/Magic-Loupe/PetStore.git --tag 0.4.1
        modulehub fetch https://github.com/Magic-Loupe/PetStore.git --latest --installed 0.4.0
        modulehub fetch https://github.com/Magic-Loupe/PetStore.git --branch main --overwrite
    """
    manager = build_manager(repository, installed_version, cache_root)
    manager.scan_local_cache()

    if latest:
        if tag or branch:
            raise click.UsageError("--latest cannot be combined with --tag or --branch")
        if not manager.refresh():
            raise manager.last_refresh_error
        info = manager.latest_compatible_ref()
        if info is None:
            raise NoCompatibleRefError(f"No tag of {repository} is compatible with {installed_version}")
        ref = info.ref
    else:
        ref = resolve_ref(tag, branch)

    path = manager.download_and_extract(ref, overwrite=overwrite)
    return {
        'repository': repository,
        'ref': ref.to_dict(),
        'path': str(path),
    }


@click.command('local')
@click.argument('repository')
@add_common_options('cache_root', 'pretty', 'verbose', 'quiet')
@standard_command
def local_handler(repository, cache_root, pretty, verbose, quiet):
    """
    List the refs of a repository extracted in the local cache.

    \b
    Examples:
        modulehub local https://github.com/Magic-Loupe/PetStore.git --pretty
    """
    manager = build_manager(repository, cache_root=cache_root)
    manager.scan_local_cache()

    entries = [
        {**ref.to_dict(), 'path': str(path)}
        for ref, path in sorted(manager.local_versions.items(), key=lambda item: str(item[0]))
    ]
    if pretty:
        render_local_table(entries)
        return None
    return entries


@click.command('remove')
@click.argument('repository')
@click.option('--tag', help='Tag to remove')
@click.option('--branch', help='Branch to remove')
@add_common_options('cache_root', 'verbose', 'quiet')
@standard_command
def remove_handler(repository, tag, branch, cache_root, verbose, quiet):
    """
    Delete a cached ref.

    \b
    Examples:
        modulehub remove https://github.com/Magic-Loupe/PetStore.git --tag 0.4.1
    """
    ref = resolve_ref(tag, branch)
    manager = build_manager(repository, cache_root=cache_root)
    manager.scan_local_cache()
    path = manager.local_path_for(ref)
    manager.remove_local(ref)
    return {
        'repository': repository,
        'ref': ref.to_dict(),
        'removed': str(path),
    }
