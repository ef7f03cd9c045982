"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Any, Generator
from .config import configure_logging, load_config
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Log level from config, DEBUG with --verbose
    - Clean JSONL output on stdout
    - --quiet to suppress data output
    - Consistent error handling with POSIX exit codes
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.get('verbose', False)
        quiet = kwargs.get('quiet', False)

        configure_logging(load_config(), verbose=verbose)

        try:
            result = func(*args, **kwargs)

            if quiet:
                # In quiet mode, consume the generator but don't output
                if isinstance(result, Generator):
                    for _ in result:
                        pass
            elif result is not None:
                output_result(result)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            click.echo(f"Error: {e}", err=True)
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__,
                    "exit_code": e.exit_code
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            click.echo(f"Command failed: {e}", err=True)
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def output_result(result: Any):
    """
    Standard output handler for results.

    Args:
        result: The result to output (dict, list, or generator)
    """
    if isinstance(result, (Generator, list, tuple)):
        for item in result:
            print(json.dumps(item, ensure_ascii=False), flush=True)
    elif isinstance(result, dict):
        print(json.dumps(result, ensure_ascii=False), flush=True)
    else:
        print(result, flush=True)


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                           help='Show debug logging'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                         help='Suppress data output'),
    'pretty': click.option('--pretty', is_flag=True,
                          help='Display as a formatted table instead of JSONL'),
    'installed': click.option('--installed', 'installed_version', metavar='VERSION',
                             help='Installed version used as the compatibility baseline'),
    'cache_root': click.option('--cache-root', type=click.Path(file_okay=False),
                              help='Cache folder for this repository (default: from config)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'pretty')
        def my_command(verbose, pretty):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator


def build_manager(repository: str, installed_version=None, cache_root=None):
    """Create the ModuleManager a command operates on."""
    from .api import create_manager
    return create_manager(
        repository,
        installed_version=installed_version,
        cache_root=cache_root,
    )


def resolve_ref(tag, branch):
    """
    Turn --tag/--branch options into a Ref.

    Raises:
        click.UsageError: Unless exactly one of them is given, or the
            name cannot be a ref
    """
    from .domain import Ref
    if bool(tag) == bool(branch):
        raise click.UsageError("Specify exactly one of --tag or --branch")
    try:
        return Ref.tag(tag) if tag else Ref.branch(branch)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--tag' if tag else '--branch') from e
