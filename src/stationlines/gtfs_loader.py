"""GTFS static reference-table loaders."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Mapping, Optional

from .config import REQUIRED_TABLES, BuildConfig
from .exceptions import MissingFileError
from .models import LoadStats, Route, Stop
from .table_reader import TableReader

logger = logging.getLogger(__name__)

STOP_FIELDS = ("stop_id", "stop_name", "parent_station")
ROUTE_FIELDS = ("route_id", "route_short_name", "route_long_name", "route_type")
TRIP_FIELDS = ("trip_id", "route_id")
STOP_TIME_FIELDS = ("trip_id", "stop_id")


class StopResolver:
    """Maps every stop_id to its station and every station to a display name."""

    def __init__(self):
        self.stop_to_station: Dict[str, str] = {}
        self.station_names: Dict[str, str] = {}
        self.stats = LoadStats("stops.txt")

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, str]]) -> "StopResolver":
        """Build the resolver in a single pass over stops.txt rows."""
        resolver = cls()
        for row in records:
            resolver.stats.rows += 1
            stop_id = row.get("stop_id", "")
            if not stop_id:
                resolver.stats.malformed += 1
                continue
            resolver.add(Stop(stop_id, row.get("stop_name", ""), row.get("parent_station", "")))
        return resolver

    def add(self, stop: Stop) -> None:
        station_id = stop.station_id
        self.stop_to_station[stop.stop_id] = station_id

        # A parent-less row is the station itself, so its own non-empty name wins.
        # Any other name only fills in until something better shows up.
        if (stop.is_station and stop.name) or station_id not in self.station_names:
            self.station_names[station_id] = stop.name

    def station_for(self, stop_id: str) -> Optional[str]:
        return self.stop_to_station.get(stop_id)

    def name_for(self, station_id: str) -> str:
        return self.station_names.get(station_id) or station_id

    def __len__(self) -> int:
        return len(self.stop_to_station)


class RouteCatalog:
    """Maps route_id to its display code and mode classification."""

    def __init__(self):
        self.routes: Dict[str, Route] = {}
        self.stats = LoadStats("routes.txt")

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, str]]) -> "RouteCatalog":
        catalog = cls()
        for row in records:
            catalog.stats.rows += 1
            route_id = row.get("route_id", "")
            if not route_id:
                catalog.stats.malformed += 1
                continue
            catalog.routes[route_id] = Route(
                route_id=route_id,
                short_code=row.get("route_short_name") or route_id,
                long_name=row.get("route_long_name", ""),
                route_type=row.get("route_type", ""),
            )
        return catalog

    def short_code(self, route_id: str) -> str:
        """Return the display code for a route, or the raw id if unknown."""
        route = self.routes.get(route_id)
        return route.short_code if route else route_id

    def route_type(self, route_id: str) -> str:
        route = self.routes.get(route_id)
        return route.route_type if route else ""

    def is_excluded(self, route_id: str, subway_route_type: str) -> bool:
        """True only when the route's classification is known and is not subway."""
        route_type = self.route_type(route_id)
        return bool(route_type) and route_type != subway_route_type

    def __len__(self) -> int:
        return len(self.routes)


class TripRouteIndex:
    """Maps trip_id to route_id."""

    def __init__(self):
        self.trip_to_route: Dict[str, str] = {}
        self.stats = LoadStats("trips.txt")

    @classmethod
    def from_records(
        cls, records: Iterable[Mapping[str, str]], progress_every: int = 200_000
    ) -> "TripRouteIndex":
        index = cls()
        loaded = 0
        for row in records:
            index.stats.rows += 1
            trip_id = row.get("trip_id", "")
            route_id = row.get("route_id", "")
            if not trip_id or not route_id:
                index.stats.malformed += 1
                continue
            index.trip_to_route[trip_id] = route_id
            loaded += 1
            if progress_every and loaded % progress_every == 0:
                logger.info(f"Loaded trips: {loaded:,}")
        logger.info(f"Loaded trips total: {loaded:,}")
        return index

    def route_for(self, trip_id: str) -> Optional[str]:
        return self.trip_to_route.get(trip_id)

    def __len__(self) -> int:
        return len(self.trip_to_route)


class ReferenceTables:
    """The three fully built indices the aggregator joins against."""

    def __init__(self, stops: StopResolver, routes: RouteCatalog, trips: TripRouteIndex):
        self.stops = stops
        self.routes = routes
        self.trips = trips


class GTFSLoader:
    """Loads and indexes the GTFS reference tables from a local directory."""

    def __init__(self, config: BuildConfig):
        self.config = config

    def check_tables(self) -> None:
        """
        Verify that every required table exists.

        Raises:
            MissingFileError: Naming the first missing table.
        """
        for table in REQUIRED_TABLES:
            path = self.config.table_path(table)
            if not path.is_file():
                raise MissingFileError(path, table)

    def _reader(self, table: str, fields) -> TableReader:
        return TableReader(self.config.table_path(table), fields, chunksize=self.config.chunksize)

    def load_stops(self) -> StopResolver:
        resolver = StopResolver.from_records(self._reader("stops.txt", STOP_FIELDS))
        logger.info(f"Loaded stops: {len(resolver):,} (stop->station mappings)")
        return resolver

    def load_routes(self) -> RouteCatalog:
        catalog = RouteCatalog.from_records(self._reader("routes.txt", ROUTE_FIELDS))
        logger.info(f"Loaded routes: {len(catalog):,}")
        return catalog

    def load_trips(self) -> TripRouteIndex:
        index = TripRouteIndex.from_records(self._reader("trips.txt", TRIP_FIELDS))
        logger.info(f"Trip->route map size: {len(index):,}")
        return index

    def open_stop_times(self) -> TableReader:
        return self._reader("stop_times.txt", STOP_TIME_FIELDS)

    def load_reference_tables(self) -> ReferenceTables:
        """
        Build the stop, route and trip indices.

        All required tables are checked before any of them is read. With
        parallel_load the three tables stream on separate threads; this method
        returns only once every index is complete.
        """
        self.check_tables()

        if not self.config.parallel_load:
            return ReferenceTables(self.load_stops(), self.load_routes(), self.load_trips())

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="gtfs-load") as executor:
            stops = executor.submit(self.load_stops)
            routes = executor.submit(self.load_routes)
            trips = executor.submit(self.load_trips)
            return ReferenceTables(stops.result(), routes.result(), trips.result())
