"""
Domain layer for modulehub.

Contains pure domain objects with no I/O or side effects:
- Ref: A tag or branch of a repository
- RefInfo: A Ref with its publication time
- SemVer: Parsed semantic version with minor-compatibility checks
- ManagerEvent: A change notification emitted by the module manager

These objects are immutable and provide serialization methods
for JSONL output.
"""

from .ref import Ref, RefKind, RefInfo, is_valid_ref_name
from .semver import SemVer
from .event import ManagerEvent, REMOTE_REFS_CHANGED, LOCAL_VERSIONS_CHANGED

__all__ = [
    'Ref',
    'RefKind',
    'RefInfo',
    'is_valid_ref_name',
    'SemVer',
    'ManagerEvent',
    'REMOTE_REFS_CHANGED',
    'LOCAL_VERSIONS_CHANGED',
]
