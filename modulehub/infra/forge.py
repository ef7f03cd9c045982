"""
Forge URL conventions for modulehub.

Each forge family publishes tag feeds and ref archives at different URLs:

GitHub:
    repository: https://github.com/ORG/REPO.git
    tag feed:   https://github.com/ORG/REPO/tags.atom
    tag zip:    https://github.com/ORG/REPO/archive/refs/tags/TAG.zip
    branch zip: https://github.com/ORG/REPO/archive/refs/heads/BRANCH.zip

GitLab (same shape for tags and branches):
    repository: https://gitlab.com/ORG/REPO.git
    zip:        https://gitlab.com/ORG/REPO/-/archive/NAME/REPO-NAME.zip

Gitea (same shape for tags and branches, the fallback for unknown hosts):
    repository: https://try.gitea.io/ORG/REPO.git
    tag feed:   https://try.gitea.io/ORG/REPO/tags.atom
    zip:        https://try.gitea.io/ORG/REPO/archive/NAME.zip

forge_for() picks exactly one strategy per repository URL.
"""

from typing import List, Optional, Sequence
from urllib.parse import quote, urlsplit

from ..domain.ref import Ref

GIT_SUFFIX = '.git'


def strip_git_suffix(repository: str) -> str:
    """
    Base URL for a repository: trailing slashes and ".git" removed.

    https://github.com/ORG/REPO.git -> https://github.com/ORG/REPO
    """
    base = repository.rstrip('/')
    if base.endswith(GIT_SUFFIX):
        base = base[:-len(GIT_SUFFIX)]
    return base


def repository_host(repository: str) -> str:
    """Lowercased host of a repository URL ('' if there is none)."""
    return (urlsplit(repository).hostname or '').lower()


def repository_path_components(repository: str) -> List[str]:
    """Path segments of the repository URL, with ".git" removed."""
    path = urlsplit(strip_git_suffix(repository)).path
    return [part for part in path.split('/') if part]


def is_host(repository: str, domain: str) -> bool:
    """
    Check if a repository is hosted on ``domain`` or one of its subdomains.

    Matches "github.com" and "www.github.com" but not "notgithub.com".
    """
    host = repository_host(repository)
    return ('.' + host).endswith('.' + domain.lower())


class Forge:
    """
    URL derivation strategy for one forge family.

    Subclasses set ``name`` and ``domain`` and implement archive_url().
    """

    name = ''
    domain: Optional[str] = None

    def matches(self, repository: str) -> bool:
        return self.domain is not None and is_host(repository, self.domain)

    def url(self, repository: str, relative: str) -> str:
        return f"{strip_git_suffix(repository)}/{relative}"

    def feed_url(self, repository: str) -> str:
        """URL of the tag feed."""
        return self.url(repository, 'tags.atom')

    def archive_url(self, repository: str, ref: Ref) -> str:
        """URL of the zip archive for ``ref``."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GitHubForge(Forge):
    name = 'github'
    domain = 'github.com'

    def archive_url(self, repository: str, ref: Ref) -> str:
        folder = 'tags' if ref.is_tag else 'heads'
        return self.url(repository, f"archive/refs/{folder}/{quote(ref.name)}.zip")


class GitLabForge(Forge):
    name = 'gitlab'
    domain = 'gitlab.com'

    def archive_url(self, repository: str, ref: Ref) -> str:
        components = repository_path_components(repository)
        short_name = components[1] if len(components) > 1 else ''
        name = quote(ref.name)
        return self.url(repository, f"-/archive/{name}/{quote(short_name)}-{name}.zip")


class GiteaForge(Forge):
    name = 'gitea'

    def archive_url(self, repository: str, ref: Ref) -> str:
        return self.url(repository, f"archive/{quote(ref.name)}.zip")


FORGES: List[Forge] = [GitHubForge(), GitLabForge()]
DEFAULT_FORGE: Forge = GiteaForge()


def forge_for(repository: str, forges: Optional[Sequence[Forge]] = None) -> Forge:
    """
    Select the URL strategy for a repository.

    Args:
        repository: Repository URL
        forges: Strategies to try in order (defaults to FORGES)

    Returns:
        The first matching strategy, or the Gitea-style default
    """
    for forge in (FORGES if forges is None else forges):
        if forge.matches(repository):
            return forge
    return DEFAULT_FORGE
