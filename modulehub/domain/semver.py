"""
Semantic version value object for modulehub.

Tags like "1.2.3", "v1.2.3" or "release-2.0.0.rc1" are parsed into
comparable SemVer objects. Anything else is simply "not a version":
parse() returns None rather than raising, since most repositories
carry a few tags that are not versions at all.
"""

import re
import sys
from dataclasses import dataclass, field
from typing import Optional, Tuple

# optional non-digit prefix, three numeric fields, then any number of
# dot-separated numeric or alphanumeric components
_SEMVER_RE = re.compile(
    r'^(?P<prefix>[^\d.\s]*)'
    r'(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)'
    r'(?P<extra>(?:\.[0-9A-Za-z]+)*)$'
)


def _component_key(component: str) -> Tuple[int, object]:
    """Numeric components sort numerically and before alphanumeric ones."""
    if component.isdigit():
        return (0, int(component))
    return (1, component)


@dataclass(frozen=True, eq=False)
class SemVer:
    """
    A parsed semantic version.

    Examples:
        SemVer.parse("1.2.3")        -> SemVer(1, 2, 3)
        SemVer.parse("v2.0.1")       -> SemVer(2, 0, 1, prefix="v")
        SemVer.parse("1.0.0.beta")   -> SemVer(1, 0, 0, extra=("beta",))
        SemVer.parse("main")         -> None

    Equality and ordering ignore the prefix, so "v1.2.3" == "1.2.3".

    Attributes:
        major: Major version
        minor: Minor version
        patch: Patch version
        extra: Further dot-separated components, in order
        prefix: Non-digit text preceding the version (display only)
    """

    major: int
    minor: int
    patch: int
    extra: Tuple[str, ...] = ()
    prefix: str = ''
    is_max: bool = field(default=False, repr=False)

    # SemVer.MAX is assigned after the class body
    MAX = None  # type: SemVer

    @classmethod
    def parse(cls, text: str) -> Optional['SemVer']:
        """
        Parse a version string.

        Args:
            text: Raw version or tag name

        Returns:
            SemVer, or None if the string is not a version
        """
        if not text:
            return None

        match = _SEMVER_RE.match(text.strip())
        if not match:
            return None

        extra = match.group('extra')
        return cls(
            major=int(match.group('major')),
            minor=int(match.group('minor')),
            patch=int(match.group('patch')),
            extra=tuple(extra[1:].split('.')) if extra else (),
            prefix=match.group('prefix'),
        )

    def _key(self) -> tuple:
        if self.is_max:
            return (1,)
        return (
            0,
            self.major,
            self.minor,
            self.patch,
            tuple(_component_key(c) for c in self.extra),
        )

    def minor_compatible(self, other: 'SemVer') -> bool:
        """
        Check whether this version can stand in for ``other``.

        True when both share the same major version and this version's
        minor is the same or newer. Patch and extra components are ignored.
        The MAX sentinel is only compatible with itself.

        Args:
            other: The baseline version

        Returns:
            True if minor-compatible
        """
        if self.is_max or other.is_max:
            return self.is_max and other.is_max
        return self.major == other.major and self.minor >= other.minor

    def __eq__(self, other) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() >= other._key()

    def __str__(self) -> str:
        if self.is_max:
            return 'max'
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.extra:
            base += '.' + '.'.join(self.extra)
        return base

    def __repr__(self) -> str:
        if self.is_max:
            return 'SemVer.MAX'
        return f"SemVer({str(self)!r})"


SemVer.MAX = SemVer(sys.maxsize, sys.maxsize, sys.maxsize, is_max=True)
