"""Station-line build pipeline."""

import logging
from typing import List, Optional

from .aggregator import StationLineAggregator
from .assembler import assemble, write_json
from .config import BuildConfig
from .gtfs_loader import GTFSLoader, ReferenceTables
from .models import BuildSummary, Stage, Station

logger = logging.getLogger(__name__)


class StationLinesBuilder:
    """
    Derives the lines serving each station from a GTFS static feed.

    A run moves through LOADING_REFERENCE_TABLES, AGGREGATING, ASSEMBLING and
    DONE without going back. Any error moves it to FAILED and is re-raised;
    nothing is written unless the whole pass succeeds.
    """

    def __init__(self, config: BuildConfig):
        self.config = config
        self.loader = GTFSLoader(config)
        self.stage = Stage.PENDING
        self.summary: Optional[BuildSummary] = None

    def _enter(self, stage: Stage) -> None:
        logger.debug(f"Stage {self.stage.value} -> {stage.value}")
        self.stage = stage

    def build(self) -> List[Station]:
        """
        Run the pipeline and return the ordered stations without writing them.

        Raises:
            MissingFileError: If a required table is missing. Raised before any
                table is read.
        """
        try:
            self._enter(Stage.LOADING_REFERENCE_TABLES)
            tables = self.loader.load_reference_tables()

            self._enter(Stage.AGGREGATING)
            aggregator = self._aggregate(tables)

            self._enter(Stage.ASSEMBLING)
            stations = assemble(aggregator.stations.values(), tables.routes)
        except Exception:
            self._enter(Stage.FAILED)
            raise

        summary = aggregator.summary
        summary.stations = len(stations)
        summary.table_stats = [tables.stops.stats, tables.routes.stats, tables.trips.stats]
        self.summary = summary
        self._log_summary(summary)
        return stations

    def _aggregate(self, tables: ReferenceTables) -> StationLineAggregator:
        aggregator = StationLineAggregator(
            stops=tables.stops,
            trips=tables.trips,
            routes=tables.routes,
            only_subway=self.config.only_subway,
            subway_route_type=self.config.subway_route_type,
            progress_every=self.config.progress_every,
        )
        return aggregator.consume_table(self.loader.open_stop_times())

    def run(self) -> List[Station]:
        """Build the stations and write them to config.out_file."""
        logger.info(f"GTFS dir: {self.config.gtfs_dir}")
        logger.info(f"Output:   {self.config.out_file}")
        if self.config.only_subway:
            logger.info(f"Filter:   only subway routes (route_type == {self.config.subway_route_type})")

        stations = self.build()
        try:
            write_json(stations, self.config.out_file)
        except Exception:
            self._enter(Stage.FAILED)
            raise

        self._enter(Stage.DONE)
        return stations

    @staticmethod
    def _log_summary(summary: BuildSummary) -> None:
        for stats in summary.table_stats:
            if stats.malformed:
                logger.warning(f"{stats.table}: skipped {stats.malformed:,} of {stats.rows:,} rows missing key fields")
        logger.info(
            f"Summary: {summary.stations:,} stations from {summary.stop_time_rows:,} stop_times rows "
            f"(malformed {summary.malformed_rows:,}, orphan trips {summary.orphan_trips:,}, "
            f"orphan stops {summary.orphan_stops:,}, filtered {summary.filtered_rows:,})"
        )
