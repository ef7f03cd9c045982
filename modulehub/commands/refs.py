"""
Ref discovery commands for modulehub.

- refs:   list published tags (plus named branches) with compatibility
- latest: the newest tag compatible with the installed version
- url:    feed and archive URLs derived for a repository
"""

import click

from ..cli_utils import standard_command, add_common_options, build_manager, resolve_ref
from ..domain import Ref, RefInfo
from ..exit_codes import NoCompatibleRefError
from ..render import render_refs_table


def _ref_entry(manager, info: RefInfo) -> dict:
    entry = info.to_dict()
    entry['compatible'] = manager.is_compatible(info.ref)
    entry['local'] = manager.is_local(info.ref)
    return entry


@click.command('refs')
@click.argument('repository')
@click.option('--branch', 'branches', multiple=True,
              help='Branch to list alongside the tags (repeatable)')
@click.option('--compatible', 'compatible_only', is_flag=True,
              help='Only show tags compatible with the installed version')
@add_common_options('installed', 'cache_root', 'pretty', 'verbose', 'quiet')
@standard_command
def refs_handler(repository, branches, compatible_only, installed_version, cache_root,
                 pretty, verbose, quiet):
    """
    List the refs a repository publishes.

    Tags come from the forge's tag feed. Branches are not published in
    the feed, so name the ones you care about with --branch.

    \b
    Examples:
        modulehub refs https://github.com/Magic-Loupe/PetStore.git
        modulehub refs https://github.com/Magic-Loupe/PetStore.git --installed 0.4.0 --compatible
        modulehub refs https://gitea.example.com/org/repo.git --branch main --pretty
    """
    manager = build_manager(repository, installed_version, cache_root)
    manager.scan_local_cache()
    if not manager.refresh():
        raise manager.last_refresh_error

    if compatible_only:
        infos = manager.compatible_refs()
    else:
        infos = manager.remote_refs
        infos.extend(RefInfo(Ref.branch(name)) for name in branches)

    entries = [_ref_entry(manager, info) for info in infos]

    if pretty:
        render_refs_table(entries, title=f"Refs for {repository}")
        return None
    return entries


@click.command('latest')
@click.argument('repository')
@add_common_options('installed', 'cache_root', 'pretty', 'verbose', 'quiet')
@standard_command
def latest_handler(repository, installed_version, cache_root, pretty, verbose, quiet):
    """
    Show the newest tag compatible with the installed version.

    A tag is compatible when it has the same major version as the
    installed version and the same or a newer minor version.

    \b
    Examples:
        modulehub latest https://github.com/Magic-Loupe/PetStore.git --installed 0.4.0
    """
    manager = build_manager(repository, installed_version, cache_root)
    manager.scan_local_cache()
    if not manager.refresh():
        raise manager.last_refresh_error

    latest = manager.latest_compatible_ref()
    if latest is None:
        baseline = installed_version or 'an unknown installed version'
        raise NoCompatibleRefError(f"No tag of {repository} is compatible with {baseline}")

    entry = _ref_entry(manager, latest)
    if pretty:
        render_refs_table([entry], title="Latest compatible ref")
        return None
    return entry


@click.command('url')
@click.argument('repository')
@click.option('--tag', help='Tag name')
@click.option('--branch', help='Branch name')
@add_common_options('verbose', 'quiet')
@standard_command
def url_handler(repository, tag, branch, verbose, quiet):
    """
    Show the feed and archive URLs for a repository ref.

    URLs are derived from the repository host and are not checked.

    \b
    Examples:
        modulehub url https://gitlab.com/Org/Repo.git --tag 1.0.0
        modulehub url https://github.com/Org/Repo.git --branch main
    """
    from ..services import ModuleSource

    ref = resolve_ref(tag, branch)
    source = ModuleSource(repository)
    return {
        'repository': repository,
        'forge': source.forge.name,
        'ref': ref.to_dict(),
        'feed_url': source.feed_url,
        'archive_url': source.archive_url(ref),
    }
