"""
Service layer for modulehub.

Contains the logic that orchestrates domain objects and infrastructure:
- ModuleSource: Feed and archive URLs for one repository, tag discovery
- ModuleManager: Local cache of a repository's refs

Services are the primary API for commands to use.
"""

from .module_source import ModuleSource
from .module_manager import ModuleManager

__all__ = [
    'ModuleSource',
    'ModuleManager',
]
