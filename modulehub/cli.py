#!/usr/bin/env python3

import click

from modulehub.commands.refs import refs_handler, latest_handler, url_handler
from modulehub.commands.cache import fetch_handler, local_handler, remove_handler
from modulehub.commands.config import config_cmd


@click.group()
@click.version_option(package_name='modulehub')
def cli():
    """modulehub - Fetch and cache versioned modules from git forges.

    Lists the tags a GitHub, GitLab or Gitea repository publishes, picks
    the newest one compatible with an installed version, and keeps
    extracted archives in a local per-ref cache.
    """
    pass


# Ref discovery
cli.add_command(refs_handler, name='refs')
cli.add_command(latest_handler, name='latest')
cli.add_command(url_handler, name='url')

# Local cache
cli.add_command(fetch_handler, name='fetch')
cli.add_command(local_handler, name='local')
cli.add_command(remove_handler, name='remove')

# Command groups
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
