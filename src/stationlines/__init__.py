"""stationlines - Derive the lines serving each station from GTFS static data."""

__version__ = "0.1.0"

from .models import Stop, Route, Station, BuildSummary, Stage
from .exceptions import StationLinesError, MissingFileError, DownloadError
from .config import BuildConfig
from .table_reader import TableReader
from .gtfs_loader import GTFSLoader, StopResolver, RouteCatalog, TripRouteIndex
from .aggregator import StationLineAggregator
from .assembler import assemble, natural_key, write_json
from .pipeline import StationLinesBuilder

__all__ = [
    "StationLinesBuilder",
    "GTFSLoader",
    "StopResolver",
    "RouteCatalog",
    "TripRouteIndex",
    "StationLineAggregator",
    "TableReader",
    "BuildConfig",
    "assemble",
    "natural_key",
    "write_json",
    "Stop",
    "Route",
    "Station",
    "BuildSummary",
    "Stage",
    "StationLinesError",
    "MissingFileError",
    "DownloadError",
]
