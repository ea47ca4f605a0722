"""Download of the static GTFS archive."""

import io
import logging
import shutil
import zipfile
from pathlib import Path
from typing import List

import requests

from .config import DOWNLOAD_TIMEOUT, MTA_GTFS_URL, REQUIRED_TABLES
from .exceptions import DownloadError

logger = logging.getLogger(__name__)


def download_gtfs(dest_dir, url: str = MTA_GTFS_URL, timeout: int = DOWNLOAD_TIMEOUT) -> List[Path]:
    """
    Download the static GTFS zip and extract the required tables.

    Args:
        dest_dir: Directory the tables are written to (created if needed).
        url: Archive URL.
        timeout: Request timeout in seconds.

    Returns:
        Paths of the extracted tables.

    Raises:
        DownloadError: If the request fails or a required table is missing
            from the archive.
    """
    dest = Path(dest_dir)
    logger.info(f"Downloading GTFS data from {url}")

    buffer = io.BytesIO()
    try:
        with requests.get(url, timeout=timeout, stream=True) as response:
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=1 << 16):
                if chunk:
                    buffer.write(chunk)
    except requests.exceptions.RequestException as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    logger.info(f"Downloaded {buffer.tell() / 1024 / 1024:.1f} MB")

    try:
        archive = zipfile.ZipFile(buffer)
    except zipfile.BadZipFile as e:
        raise DownloadError(f"{url} is not a zip archive") from e

    with archive:
        members = {Path(name).name: name for name in archive.namelist() if not name.endswith("/")}
        missing = [table for table in REQUIRED_TABLES if table not in members]
        if missing:
            raise DownloadError(f"Archive from {url} is missing {', '.join(missing)}")

        dest.mkdir(parents=True, exist_ok=True)
        extracted = []
        for table in REQUIRED_TABLES:
            target = dest / table
            with archive.open(members[table]) as src, open(target, "wb") as out:
                shutil.copyfileobj(src, out)
            extracted.append(target)
            logger.debug(f"Extracted {table} to {target}")

    logger.info(f"Extracted {len(extracted)} tables to {dest}")
    return extracted
