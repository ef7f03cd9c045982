"""
Ref domain objects for modulehub.

A Ref names a repository state published by a forge:
- Tags: "1.2.0", "v2.0.0" (immutable)
- Branches: "main", "develop" (mutable heads)

RefInfo pairs a Ref with the time the forge says it was published.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .semver import SemVer


def is_valid_ref_name(name: str) -> bool:
    """
    Check that a name can address a cache folder.

    Rejects empty names, backslashes, NUL, and any empty segment or one
    starting with "." (which rules out ".", ".." and absolute names, and
    keeps cache folders visible to scans). Slashes between other
    segments are allowed ("feature/login").
    """
    if not name or '\\' in name or '\x00' in name:
        return False
    return all(segment and not segment.startswith('.') for segment in name.split('/'))


class RefKind(Enum):
    """Kind of ref. The value doubles as the cache folder name."""
    TAG = "tag"
    BRANCH = "branch"


@dataclass(frozen=True)
class Ref:
    """
    A tag or branch of a repository.

    Examples:
        Ref.tag("1.2.0")            -> Ref(kind=RefKind.TAG, name="1.2.0")
        Ref.parse("branch", "main") -> Ref(kind=RefKind.BRANCH, name="main")
        Ref.parse("commit", "abc")  -> None

    Attributes:
        kind: Tag or branch
        name: Raw tag or branch name (see is_valid_ref_name)
    """

    kind: RefKind
    name: str

    def __post_init__(self):
        if not is_valid_ref_name(self.name):
            raise ValueError(f"Invalid ref name {self.name!r}")

    @classmethod
    def tag(cls, name: str) -> 'Ref':
        return cls(RefKind.TAG, name)

    @classmethod
    def branch(cls, name: str) -> 'Ref':
        return cls(RefKind.BRANCH, name)

    @classmethod
    def parse(cls, kind: str, name: str) -> Optional['Ref']:
        """
        Build a Ref from a kind string and a name.

        Args:
            kind: "tag" or "branch"
            name: Tag or branch name

        Returns:
            Ref, or None if the kind is unknown or the name is not valid
        """
        try:
            ref_kind = RefKind(kind)
        except ValueError:
            return None
        if not is_valid_ref_name(name):
            return None
        return cls(ref_kind, name)

    @property
    def type(self) -> str:
        """Kind as a string ("tag" or "branch")."""
        return self.kind.value

    @property
    def is_tag(self) -> bool:
        return self.kind is RefKind.TAG

    @property
    def semver(self) -> Optional[SemVer]:
        """The tag name as a SemVer, or None for branches and non-version tags."""
        if not self.is_tag:
            return None
        return SemVer.parse(self.name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        semver = self.semver
        return {
            'kind': self.type,
            'name': self.name,
            'version': str(semver) if semver else None,
        }

    def __str__(self) -> str:
        return f"{self.type}:{self.name}"


@dataclass(frozen=True)
class RefInfo:
    """
    A Ref together with its publication time.

    published_at is None for refs that have no feed entry, such as
    branches supplied by the caller.
    """

    ref: Ref
    published_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = self.ref.to_dict()
        data['published_at'] = self.published_at.isoformat() if self.published_at else None
        return data
