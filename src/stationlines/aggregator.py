"""Station-line aggregation over the stop_times table."""

import logging
from typing import Dict

import pandas as pd

from .config import SUBWAY_ROUTE_TYPE
from .gtfs_loader import RouteCatalog, StopResolver, TripRouteIndex
from .models import BuildSummary, Station
from .table_reader import TableReader

logger = logging.getLogger(__name__)


class StationLineAggregator:
    """
    Accumulates the set of routes observed at each station.

    stop_times.txt is folded block by block and never held in memory, so peak
    memory is bounded by stations x routes rather than by row count. For each
    row, in order:
    - rows with a blank trip_id or stop_id are counted as malformed
    - trips missing from the trip index are counted as orphan trips
    - stops missing from the stop resolver are counted as orphan stops
    - with only_subway, routes whose route_type is known and not subway are
      dropped; routes with no route_type are kept
    - the route is added to the station's route set
    """

    def __init__(
        self,
        stops: StopResolver,
        trips: TripRouteIndex,
        routes: RouteCatalog,
        only_subway: bool = False,
        subway_route_type: str = SUBWAY_ROUTE_TYPE,
        progress_every: int = 1_000_000,
    ):
        self.stops = stops
        self.trips = trips
        self.routes = routes
        self.only_subway = only_subway
        self.subway_route_type = subway_route_type
        self.progress_every = progress_every

        self.stations: Dict[str, Station] = {}
        self.summary = BuildSummary()

        # Series lookups so each block joins with a single vectorised map
        self._trip_routes = pd.Series(trips.trip_to_route, dtype=object)
        self._stop_stations = pd.Series(stops.stop_to_station, dtype=object)
        self._route_types = pd.Series(
            {route_id: route.route_type for route_id, route in routes.routes.items()}, dtype=object
        )

    def consume(self, chunk: pd.DataFrame) -> None:
        """Fold one block of stop_times rows (columns trip_id, stop_id) into the accumulator."""
        rows_before = self.summary.stop_time_rows
        self.summary.stop_time_rows += len(chunk)
        if chunk.empty:
            return

        trip_ids = chunk["trip_id"]
        stop_ids = chunk["stop_id"]

        malformed = (trip_ids == "") | (stop_ids == "")
        route_ids = trip_ids.map(self._trip_routes)
        orphan_trips = ~malformed & route_ids.isna()
        station_ids = stop_ids.map(self._stop_stations)
        orphan_stops = ~malformed & ~orphan_trips & station_ids.isna()
        keep = ~(malformed | orphan_trips | orphan_stops)

        self.summary.malformed_rows += int(malformed.sum())
        self.summary.orphan_trips += int(orphan_trips.sum())
        self.summary.orphan_stops += int(orphan_stops.sum())

        if self.only_subway:
            route_types = route_ids.map(self._route_types).fillna("")
            filtered = keep & (route_types != "") & (route_types != self.subway_route_type)
            self.summary.filtered_rows += int(filtered.sum())
            keep &= ~filtered

        pairs = pd.DataFrame(
            {"station_id": station_ids[keep], "route_id": route_ids[keep]}
        ).drop_duplicates()
        for station_id, route_id in pairs.itertuples(index=False, name=None):
            self.add(station_id, route_id)

        if self.progress_every and (
            rows_before // self.progress_every != self.summary.stop_time_rows // self.progress_every
        ):
            logger.info(
                f"Processed stop_times: {self.summary.stop_time_rows:,} | stations: {len(self.stations):,}"
            )

    def add(self, station_id: str, route_id: str) -> None:
        station = self.stations.get(station_id)
        if station is None:
            station = Station(station_id=station_id, name=self.stops.name_for(station_id))
            self.stations[station_id] = station
        station.route_ids.add(route_id)

    def consume_table(self, reader: TableReader) -> "StationLineAggregator":
        """Stream an entire stop_times table through the accumulator."""
        for chunk in reader.chunks():
            self.consume(chunk)

        summary = self.summary
        logger.info(f"Processed stop_times total: {summary.stop_time_rows:,}")
        if summary.malformed_rows:
            logger.warning(f"stop_times rows missing trip_id or stop_id: {summary.malformed_rows:,}")
        if summary.orphan_trips:
            logger.warning(f"stop_times rows with unknown trip_id: {summary.orphan_trips:,}")
        if summary.orphan_stops:
            logger.warning(f"stop_times rows with unknown stop_id: {summary.orphan_stops:,}")
        if summary.filtered_rows:
            logger.info(f"stop_times rows on non-subway routes skipped: {summary.filtered_rows:,}")
        return self

    def merge(self, other: "StationLineAggregator") -> "StationLineAggregator":
        """
        Union another accumulator into this one.

        Per-station route sets are unioned and counters summed, so merging
        shard-local aggregators gives the same result in any order.
        """
        for station_id, station in other.stations.items():
            mine = self.stations.get(station_id)
            if mine is None:
                mine = Station(station_id=station_id, name=station.name)
                self.stations[station_id] = mine
            mine.route_ids |= station.route_ids

        self.summary.stop_time_rows += other.summary.stop_time_rows
        self.summary.malformed_rows += other.summary.malformed_rows
        self.summary.orphan_trips += other.summary.orphan_trips
        self.summary.orphan_stops += other.summary.orphan_stops
        self.summary.filtered_rows += other.summary.filtered_rows
        return self
