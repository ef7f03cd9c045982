"""
Module source service for modulehub.

A ModuleSource is bound to one repository URL. It derives feed and
archive URLs through the repository's forge strategy and fetches the
tag feed. It never caches: every refs() call goes to the network, and
callers (ModuleManager) decide what to keep.
"""

import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urlsplit

import requests

from ..domain.ref import Ref, RefInfo
from ..domain.semver import SemVer
from ..errors import NetworkError
from ..infra.atom_feed import parse_atom_feed
from ..infra.forge import Forge, forge_for, repository_host

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
USER_AGENT = 'modulehub'


class ModuleSource:
    """
    Tags and archives of a single forge-hosted repository.

    Example:
        source = ModuleSource("https://github.com/Magic-Loupe/PetStore.git")
        for info in source.refs():
            print(info.ref.name, info.published_at)
        url = source.archive_url(Ref.tag("0.0.2"))
    """

    def __init__(
        self,
        repository: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
    ):
        """
        Initialize ModuleSource.

        Args:
            repository: Repository URL (e.g., https://github.com/ORG/REPO.git)
            session: HTTP session to use (a new one by default)
            timeout: HTTP request timeout in seconds
            user_agent: User-Agent header for new sessions
        """
        self.repository = repository
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers.update({'User-Agent': user_agent})
        self.session = session
        self._forge = forge_for(repository)

    @property
    def forge(self) -> Forge:
        """URL strategy for this repository's host."""
        return self._forge

    @property
    def feed_url(self) -> str:
        return self._forge.feed_url(self.repository)

    def archive_url(self, ref: Ref) -> str:
        """
        URL of the zip archive for a tag or branch.

        Args:
            ref: Tag or branch

        Returns:
            Archive URL (constructed, not verified)
        """
        return self._forge.archive_url(self.repository, ref)

    def refs(self) -> List[RefInfo]:
        """
        Fetch the tags the forge currently publishes.

        Only tags are discovered this way; branches have no feed and
        must be supplied by the caller.

        Returns:
            RefInfo for every feed entry, in feed order (entries whose
            title cannot name a cache folder are skipped with a warning)

        Raises:
            NetworkError: If the feed cannot be fetched
            FeedParseError: If the feed body cannot be parsed
        """
        url = self.feed_url
        logger.debug(f"Fetching tag feed {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            raise NetworkError(f"Tag feed request failed for {url}: {e}", url=url, status_code=status) from e
        except requests.RequestException as e:
            raise NetworkError(f"Tag feed request failed for {url}: {e}", url=url) from e

        feed = parse_atom_feed(response.content)
        refs = []
        for entry in feed.entries:
            ref = Ref.parse('tag', entry.title)
            if ref is None:
                logger.warning(f"Skipping tag with unusable name {entry.title!r} in {url}")
                continue
            refs.append(RefInfo(ref, entry.updated))
        logger.debug(f"Found {len(refs)} tags for {self.repository}")
        return refs

    def tag_versions(self) -> List[SemVer]:
        """All published tags that parse as semantic versions, in feed order."""
        versions = []
        for info in self.refs():
            semver = info.ref.semver
            if semver is not None:
                versions.append(semver)
        return versions

    def default_cache_root(self, base: Path) -> Path:
        """
        Per-repository cache folder under ``base``.

        Tagged versions of https://github.com/Magic-Loupe/PetStore.git end up in
        BASE/github.com/Magic-Loupe/PetStore.git/tag/TAG/.

        Args:
            base: Root folder shared by all repositories

        Returns:
            BASE/HOST/REPOSITORY-PATH
        """
        host = repository_host(self.repository) or 'host'
        path = unquote(urlsplit(self.repository).path)
        parts = [part for part in path.split('/') if part and part not in ('.', '..')]
        return Path(base).joinpath(host, *parts)

    def __repr__(self) -> str:
        return f"ModuleSource({self.repository!r}, forge={self._forge.name!r})"
