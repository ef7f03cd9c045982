"""
Archive download and extraction for modulehub.

Forge archives wrap the repository in a single top-level folder
(e.g. "PetStore-0.0.2/"). extract_zip() strips that folder so the
destination directly holds the repository files.
"""

import logging
import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import List, Optional

import requests

from ..errors import ExtractionError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def download_file(
    session: requests.Session,
    url: str,
    dest: Path,
    timeout: float = 60,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Stream a URL to a local file.

    Redirects are followed (GitHub archive URLs redirect to codeload.github.com).

    Args:
        session: HTTP session
        url: URL to download
        dest: File to write
        timeout: Request timeout in seconds
        chunk_size: Bytes per chunk

    Returns:
        Number of bytes written

    Raises:
        NetworkError: On transport failure or an HTTP error status
    """
    written = 0
    try:
        with session.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(dest, 'wb') as f:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else 0
        raise NetworkError(f"Download failed for {url}: {e}", url=url, status_code=status) from e
    except requests.RequestException as e:
        raise NetworkError(f"Download failed for {url}: {e}", url=url) from e

    logger.debug(f"Downloaded {written} bytes from {url}")
    return written


def common_base(names: List[str]) -> Optional[str]:
    """
    The single top-level folder shared by every member, if there is one.

    Args:
        names: Archive member names

    Returns:
        Folder name, or None if members do not share exactly one root folder
    """
    roots = set()
    for name in names:
        parts = PurePosixPath(name).parts
        if not parts:
            continue
        # a top-level file means there is no wrapper folder
        if len(parts) == 1 and not name.endswith('/'):
            return None
        roots.add(parts[0])
    if len(roots) == 1:
        return roots.pop()
    return None


def extract_zip(archive: Path, dest: Path, trim_base_path: bool = True) -> Path:
    """
    Extract a zip archive into a directory.

    Args:
        archive: Zip file to extract
        dest: Destination directory (created if missing)
        trim_base_path: Strip the single top-level wrapper folder

    Returns:
        The destination directory

    Raises:
        ExtractionError: If the archive is invalid or a member would
            escape the destination
    """
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    dest_resolved = dest.resolve()

    try:
        with zipfile.ZipFile(archive) as zf:
            infos = zf.infolist()
            base = common_base([info.filename for info in infos]) if trim_base_path else None

            for info in infos:
                parts = PurePosixPath(info.filename).parts
                if base is not None:
                    parts = parts[1:]
                if not parts:
                    continue

                target = dest.joinpath(*parts)
                if not target.resolve().is_relative_to(dest_resolved):
                    raise ExtractionError(
                        f"Archive member {info.filename!r} resolves outside {dest}"
                    )

                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, 'wb') as out:
                    shutil.copyfileobj(src, out)
    except (zipfile.BadZipFile, zlib.error) as e:
        raise ExtractionError(f"Invalid zip archive {archive}: {e}") from e
    except OSError as e:
        raise ExtractionError(f"Failed to extract {archive}: {e}") from e

    logger.debug(f"Extracted {archive} to {dest} (base folder: {base})")
    return dest
