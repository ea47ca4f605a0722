"""Data models for the station-line builder."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set


@dataclass(frozen=True)
class Stop:
    """Represents a physical boarding point from stops.txt."""
    stop_id: str
    name: str = ""
    parent_station: str = ""  # Empty when this stop is itself a station

    @property
    def is_station(self) -> bool:
        return not self.parent_station

    @property
    def station_id(self) -> str:
        return self.parent_station or self.stop_id


@dataclass(frozen=True)
class Route:
    """Represents a transit line from routes.txt."""
    route_id: str
    short_code: str
    long_name: str = ""
    route_type: str = ""  # GTFS route_type as text, empty when unknown


@dataclass
class Station:
    """A logical station and the lines serving it."""
    station_id: str
    name: str
    route_ids: Set[str] = field(default_factory=set)  # Filled while streaming stop_times
    lines: List[str] = field(default_factory=list)  # Display codes, filled once at assembly

    def to_record(self) -> Dict[str, object]:
        return {"id": self.station_id, "name": self.name, "lines": list(self.lines)}


@dataclass
class LoadStats:
    """Row counts for one reference table."""
    table: str
    rows: int = 0
    malformed: int = 0


@dataclass
class BuildSummary:
    """Diagnostic counters for a complete run."""
    stop_time_rows: int = 0
    malformed_rows: int = 0
    orphan_trips: int = 0
    orphan_stops: int = 0
    filtered_rows: int = 0
    stations: int = 0
    table_stats: List[LoadStats] = field(default_factory=list)


class Stage(Enum):
    """Pipeline stages, entered strictly in declaration order."""
    PENDING = "pending"
    LOADING_REFERENCE_TABLES = "loading_reference_tables"
    AGGREGATING = "aggregating"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"
