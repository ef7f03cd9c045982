"""
modulehub - Fetch and cache versioned module bundles from git forges.

Modules are published as tags (and branches) of a repository on a
GitHub-, GitLab- or Gitea-style forge. modulehub lists the published
tags, picks the newest one compatible with an installed version, and
keeps extracted archives in a per-ref cache folder.

Quick Start:
    import modulehub

    manager = modulehub.create_manager(
        "https://github.com/Magic-Loupe/PetStore.git",
        installed_version="0.4.0",
    )
    manager.refresh()
    latest = manager.latest_compatible_ref()
    path = manager.download_and_extract(latest.ref)

Domain Objects:
    Ref - A tag or branch
    RefInfo - A Ref with its publication time
    SemVer - Semantic version with minor-compatibility checks

Services:
    ModuleSource - Feed/archive URLs and tag discovery for one repository
    ModuleManager - Local cache of a repository's refs
"""

__version__ = "0.3.0"

# High-level API
from .api import create_manager

# Domain objects
from .domain import (
    Ref,
    RefKind,
    RefInfo,
    SemVer,
    ManagerEvent,
)

# Services
from .services import ModuleSource, ModuleManager

# Errors
from .errors import ModuleHubError, NetworkError, FeedParseError, ExtractionError

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "create_manager",
    # Domain objects
    "Ref",
    "RefKind",
    "RefInfo",
    "SemVer",
    "ManagerEvent",
    # Services
    "ModuleSource",
    "ModuleManager",
    # Errors
    "ModuleHubError",
    "NetworkError",
    "FeedParseError",
    "ExtractionError",
    # Configuration
    "load_config",
    "save_config",
]
