"""
Module cache manager for modulehub.

Owns the local cache of one repository's refs:

    CACHE_ROOT/tag/1.2.0/       extracted archive of tag 1.2.0
    CACHE_ROOT/branch/main/     extracted archive of branch main
    CACHE_ROOT/branch/feature%2Fx/  branch "feature/x" (one folder per ref name)

The manager keeps two pieces of observable state:
- remote_refs: the last successfully fetched tag list
- local_versions: Ref -> directory for every ref found on disk

A ref only counts as local once its archive has been downloaded and
fully extracted. Extraction happens in a hidden staging folder that is
renamed into place at the end, so interrupted downloads never show up
in a scan.
"""

import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Union
from urllib.parse import quote, unquote

from ..domain.event import LOCAL_VERSIONS_CHANGED, REMOTE_REFS_CHANGED, ManagerEvent
from ..domain.ref import Ref, RefInfo
from ..domain.semver import SemVer
from ..errors import ModuleHubError
from ..infra.archive import DEFAULT_CHUNK_SIZE, download_file, extract_zip
from .module_source import ModuleSource

logger = logging.getLogger(__name__)

STAGING_PREFIX = '.staging-'

Subscriber = Callable[[ManagerEvent], None]


def _published_key(info: RefInfo) -> tuple:
    # refs without a timestamp sort before dated ones
    if info.published_at is None:
        return (0, 0.0)
    return (1, info.published_at.timestamp())


class ModuleManager:
    """
    Local cache of the tags and branches of one repository.

    State is guarded by a lock, and downloads are serialized per ref,
    so a manager can be shared between threads. Nothing is retried:
    failures surface to the caller.

    Example:
        source = ModuleSource("https://github.com/Magic-Loupe/PetStore.git")
        manager = ModuleManager(source, cache_root, installed_version="0.4.0")
        manager.scan_local_cache()
        manager.refresh()
        latest = manager.latest_compatible_ref()
        if latest:
            path = manager.download_and_extract(latest.ref)
    """

    def __init__(
        self,
        source: ModuleSource,
        cache_root: Path,
        installed_version: Optional[Union[SemVer, str]] = None,
        relative_path: Optional[str] = None,
        download_timeout: float = 60,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize ModuleManager.

        Args:
            source: Source for the repository's refs and archives
            cache_root: Folder holding this repository's extracted refs
            installed_version: Baseline version for compatibility checks
                (a SemVer or a version string; unparsable strings count as unknown)
            relative_path: Path of the module inside an extracted ref
            download_timeout: Archive request timeout in seconds
            chunk_size: Bytes per download chunk
        """
        if isinstance(installed_version, str):
            parsed = SemVer.parse(installed_version)
            if parsed is None:
                logger.debug(f"Installed version {installed_version!r} is not a semantic version")
            installed_version = parsed

        self.source = source
        self.cache_root = Path(cache_root)
        self.installed_version: Optional[SemVer] = installed_version
        self.relative_path = relative_path
        self.download_timeout = download_timeout
        self.chunk_size = chunk_size

        self._remote_refs: List[RefInfo] = []
        self._local_versions: Dict[Ref, Path] = {}
        self.last_refresh_error: Optional[ModuleHubError] = None

        self._state_lock = threading.RLock()
        self._ref_locks: Dict[Ref, threading.Lock] = {}
        self._ref_locks_guard = threading.Lock()
        self._subscribers: List[Subscriber] = []

    # -- observable state --------------------------------------------------

    @property
    def repository(self) -> str:
        return self.source.repository

    @property
    def remote_refs(self) -> List[RefInfo]:
        """Last fetched refs (empty until the first successful refresh)."""
        with self._state_lock:
            return list(self._remote_refs)

    @property
    def local_versions(self) -> Dict[Ref, Path]:
        """Refs extracted on disk, as of the last scan."""
        with self._state_lock:
            return dict(self._local_versions)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for state changes.

        Args:
            callback: Called with a ManagerEvent after each change

        Returns:
            Function that removes the subscription
        """
        with self._state_lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._state_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self, event_type: str, data: dict) -> None:
        with self._state_lock:
            subscribers = list(self._subscribers)
        event = ManagerEvent(type=event_type, repository=self.repository, data=data)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber failed handling {event_type}")

    def _emit_local_versions(self, versions: Dict[Ref, Path]) -> None:
        self._emit(LOCAL_VERSIONS_CHANGED, {
            'refs': sorted(str(ref) for ref in versions),
        })

    # -- remote refs -------------------------------------------------------

    def refresh(self) -> bool:
        """
        Fetch the current ref list from the source.

        On failure the previous ref list is kept, the error is logged and
        stored in ``last_refresh_error``.

        Returns:
            True if the refs were fetched
        """
        logger.debug(f"Refreshing refs for {self.repository}")
        try:
            refs = self.source.refs()
        except ModuleHubError as e:
            logger.warning(f"Could not refresh refs for {self.repository}: {e}")
            self.last_refresh_error = e
            return False

        self.last_refresh_error = None
        with self._state_lock:
            changed = refs != self._remote_refs
            self._remote_refs = list(refs)

        logger.debug(f"Available refs: {[info.ref.name for info in refs]}")
        if changed:
            self._emit(REMOTE_REFS_CHANGED, {'count': len(refs)})
        return True

    @property
    def baseline(self) -> SemVer:
        """Version that refs must be minor-compatible with."""
        return self.installed_version or SemVer.MAX

    def is_compatible(self, ref: Ref) -> bool:
        """Check if a ref is a version tag minor-compatible with the baseline."""
        semver = ref.semver
        return semver is not None and semver.minor_compatible(self.baseline)

    def compatible_refs(self) -> List[RefInfo]:
        """
        Remote refs compatible with the baseline, oldest first.

        Ordered by version; equal versions are ordered by publication
        time, then by their position in the feed.
        """
        with self._state_lock:
            refs = list(self._remote_refs)

        candidates = [
            (info.ref.semver, _published_key(info), index, info)
            for index, info in enumerate(refs)
            if self.is_compatible(info.ref)
        ]
        candidates.sort(key=lambda item: item[:3])
        return [item[3] for item in candidates]

    def latest_compatible_ref(self) -> Optional[RefInfo]:
        """The newest compatible remote ref, or None."""
        compatible = self.compatible_refs()
        return compatible[-1] if compatible else None

    # -- local cache -------------------------------------------------------

    def local_path_for(self, ref: Ref) -> Path:
        """
        Extraction folder for a ref, whether or not it exists.

        The ref name is percent-encoded into a single folder name, so
        "feature/x" maps to CACHE_ROOT/branch/feature%2Fx.

        Raises:
            ValueError: If the folder would not sit directly in CACHE_ROOT/KIND
        """
        base = self.cache_root / ref.type
        path = base / quote(ref.name, safe='')
        if os.path.dirname(os.path.normpath(path)) != os.path.normpath(base):
            raise ValueError(f"Ref name {ref.name!r} escapes {base}")
        return path

    def local_dynamic_path(self, ref: Ref) -> Optional[Path]:
        """Module folder inside the extracted ref, if a relative path is set."""
        if not self.relative_path:
            return None
        return self.local_path_for(ref) / self.relative_path

    def is_local(self, ref: Ref) -> bool:
        with self._state_lock:
            return ref in self._local_versions

    def scan_local_cache(self) -> bool:
        """
        Rebuild local_versions from the cache folder.

        Lists CACHE_ROOT/KIND/NAME/ folders, decoding NAME back into the
        ref name; hidden entries, files, unknown kind folders and names
        that are not valid refs are skipped. Subscribers are only notified
        when the result differs from the previous scan.

        Returns:
            True if local_versions changed
        """
        # listing and swapping under one lock keeps overlapping scans ordered
        with self._state_lock:
            versions = self._list_cache()
            if versions == self._local_versions:
                return False
            self._local_versions = versions
        self._emit_local_versions(versions)
        return True

    def _list_cache(self) -> Dict[Ref, Path]:
        versions: Dict[Ref, Path] = {}
        if not self.cache_root.is_dir():
            logger.debug(f"No cache folder at {self.cache_root}")
            return versions

        for base in sorted(self.cache_root.iterdir()):
            if base.name.startswith('.') or not base.is_dir():
                continue
            for sub in sorted(base.iterdir()):
                if sub.name.startswith('.') or not sub.is_dir():
                    continue
                ref = Ref.parse(base.name, unquote(sub.name))
                if ref is not None:
                    versions[ref] = sub
        return versions

    def _rescan_after_download(self) -> None:
        # must not mask the error of the download it follows
        try:
            self.scan_local_cache()
        except OSError as e:
            logger.warning(f"Could not rescan {self.cache_root}: {e}")

    @contextmanager
    def _ref_lock(self, ref: Ref) -> Iterator[None]:
        with self._ref_locks_guard:
            lock = self._ref_locks.setdefault(ref, threading.Lock())
        with lock:
            yield

    def download_and_extract(self, ref: Ref, overwrite: bool = False) -> Path:
        """
        Download the archive for a ref and extract it into the cache.

        An existing folder is returned as-is unless ``overwrite`` is set,
        in which case it is deleted and fetched again. The cache is always
        rescanned after a download attempt, successful or not.

        Args:
            ref: Tag or branch to fetch
            overwrite: Replace an existing extraction

        Returns:
            Folder holding the extracted repository files

        Raises:
            NetworkError: If the archive cannot be downloaded
            ExtractionError: If the archive cannot be extracted
            OSError: If an existing folder cannot be replaced
        """
        with self._ref_lock(ref):
            target = self.local_path_for(ref)
            if target.exists():
                if not overwrite:
                    logger.debug(f"Returning existing folder {target}")
                    return target
                logger.debug(f"Removing {target}")
                shutil.rmtree(target)

            try:
                url = self.source.archive_url(ref)
                logger.info(f"Downloading {ref} from {url}")
                self.cache_root.mkdir(parents=True, exist_ok=True)
                staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self.cache_root))
                try:
                    archive = staging / 'archive.zip'
                    size = download_file(
                        self.source.session,
                        url,
                        archive,
                        timeout=self.download_timeout,
                        chunk_size=self.chunk_size,
                    )
                    logger.debug(f"Downloaded {size} bytes for {ref}")
                    extracted = extract_zip(archive, staging / 'root', trim_base_path=True)
                    target.parent.mkdir(parents=True, exist_ok=True)
                    extracted.rename(target)
                finally:
                    shutil.rmtree(staging, ignore_errors=True)
            finally:
                self._rescan_after_download()

            logger.info(f"Extracted {ref} to {target}")
            return target

    def remove_local(self, ref: Ref) -> None:
        """
        Delete the cached folder of a ref.

        Only the removed ref's entry is dropped from local_versions; no
        rescan happens. If deletion fails the entry is kept.

        Raises:
            OSError: If the folder cannot be deleted
            ValueError: If the ref does not map to a cache folder
        """
        with self._ref_lock(ref):
            path = self.local_path_for(ref)
            logger.debug(f"Removing folder {path}")
            shutil.rmtree(path)

            with self._state_lock:
                if ref not in self._local_versions:
                    return
                versions = dict(self._local_versions)
                del versions[ref]
                self._local_versions = versions
            self._emit_local_versions(versions)

    def __repr__(self) -> str:
        return f"ModuleManager({self.repository!r}, cache_root={str(self.cache_root)!r})"
