"""Build configuration for stationlines."""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

# MTA GTFS static data URL
MTA_GTFS_URL = "https://rrgtfsfeeds.s3.amazonaws.com/gtfs_subway.zip"
DOWNLOAD_TIMEOUT = 120  # seconds; the archive is tens of MB

REQUIRED_TABLES: Tuple[str, ...] = ("stops.txt", "routes.txt", "trips.txt", "stop_times.txt")

# GTFS route_type 1 is subway/metro
SUBWAY_ROUTE_TYPE = "1"

DEFAULT_GTFS_DIR = "./gtfs"
DEFAULT_OUT_FILE = "./stations-lines.json"


@dataclass(frozen=True)
class BuildConfig:
    """Settings for a single station-line build."""
    gtfs_dir: Path = Path(DEFAULT_GTFS_DIR)
    out_file: Path = Path(DEFAULT_OUT_FILE)
    only_subway: bool = False
    subway_route_type: str = SUBWAY_ROUTE_TYPE
    chunksize: int = 200_000
    parallel_load: bool = True
    progress_every: int = 1_000_000

    def table_path(self, table: str) -> Path:
        """Return the path of a GTFS table inside the source directory."""
        return Path(self.gtfs_dir) / table
