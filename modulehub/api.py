"""
High-level Python API for modulehub.

Example:
    import modulehub

    manager = modulehub.create_manager(
        "https://github.com/Magic-Loupe/PetStore.git",
        installed_version="0.4.0",
    )
    manager.scan_local_cache()
    manager.refresh()

    latest = manager.latest_compatible_ref()
    if latest:
        path = manager.download_and_extract(latest.ref)

    # Branches are not listed by forges' tag feeds; name them explicitly
    manager.download_and_extract(modulehub.Ref.branch("main"))
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from .config import get_cache_base, load_config
from .domain import SemVer
from .services import ModuleManager, ModuleSource

logger = logging.getLogger(__name__)


def create_manager(
    repository: str,
    installed_version: Optional[Union[SemVer, str]] = None,
    cache_root: Optional[Path] = None,
    relative_path: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
) -> ModuleManager:
    """
    Create a ModuleManager for a repository using configured defaults.

    Args:
        repository: Repository URL
        installed_version: Baseline version for compatibility checks
        cache_root: Cache folder for this repository
            (default: CACHE_BASE/HOST/REPOSITORY-PATH)
        relative_path: Module path inside extracted refs
        config: Config dict (default: load_config())

    Returns:
        ModuleManager for the repository
    """
    config = config or load_config()
    http = config.get('http', {})

    source = ModuleSource(
        repository,
        timeout=http.get('timeout_seconds', 30),
        user_agent=http.get('user_agent', 'modulehub'),
    )
    if cache_root is None:
        cache_root = source.default_cache_root(get_cache_base(config))
    logger.debug(f"Cache for {repository} at {cache_root}")

    return ModuleManager(
        source,
        Path(cache_root),
        installed_version=installed_version,
        relative_path=relative_path,
        download_timeout=http.get('download_timeout_seconds', 120),
        chunk_size=http.get('chunk_size', 65536),
    )
