"""
Infrastructure layer for modulehub.

Contains abstractions for external systems:
- Forge strategies: per-host feed and archive URL conventions
- Atom feed parsing: forge tag feeds into feed/entry records
- Archive helpers: streaming downloads and zip extraction

These provide clean interfaces that can be mocked for testing.
"""

from .forge import Forge, GitHubForge, GitLabForge, GiteaForge, forge_for, is_host
from .atom_feed import AtomFeed, AtomEntry, AtomLink, parse_atom_feed
from .archive import download_file, extract_zip

__all__ = [
    'Forge',
    'GitHubForge',
    'GitLabForge',
    'GiteaForge',
    'forge_for',
    'is_host',
    'AtomFeed',
    'AtomEntry',
    'AtomLink',
    'parse_atom_feed',
    'download_file',
    'extract_zip',
]
