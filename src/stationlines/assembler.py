"""Turns accumulated route sets into the ordered station list."""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from .gtfs_loader import RouteCatalog
from .models import Station

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def _current_umask() -> int:
    # os.umask can only be read by setting it
    mask = os.umask(0)
    os.umask(mask)
    return mask


def natural_key(text: str) -> Tuple:
    """
    Sort key comparing digit runs by value and everything else case-insensitively.

    "7" sorts before "10", and numbered lines sort ahead of lettered ones.
    """
    parts = _DIGITS.split(text.casefold())
    # split() puts text at even indexes and digit runs at odd ones
    return tuple((0, int(part), part) if i % 2 else (1, 0, part) for i, part in enumerate(parts) if part)


def assemble(stations: Iterable[Station], routes: RouteCatalog) -> List[Station]:
    """
    Resolve route ids to display codes and order the stations.

    Stations without any route are dropped. Each station's lines are unique
    and naturally sorted; stations are sorted by name, case-insensitively,
    with the station id breaking ties.
    """
    result = []
    for station in stations:
        if not station.route_ids:
            continue
        codes = {routes.short_code(route_id) for route_id in station.route_ids}
        codes.discard("")
        station.lines = sorted(codes, key=lambda code: (natural_key(code), code))
        result.append(station)

    result.sort(key=lambda s: (s.name.casefold(), natural_key(s.station_id), s.station_id))
    return result


def write_json(stations: Iterable[Station], out_file: Union[str, Path]) -> int:
    """
    Write stations as a pretty-printed JSON array of {id, name, lines}.

    The file is written next to the destination and renamed into place, so a
    failed run never leaves partial output behind.

    Returns:
        Number of stations written.
    """
    out_path = Path(out_file)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    records = [station.to_record() for station in stations]

    fd, tmp_name = tempfile.mkstemp(prefix=f".{out_path.name}.", dir=str(out_path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, out_path)
    except BaseException:
        os.unlink(tmp_name)
        raise

    logger.info(f"Wrote {len(records):,} stations to {out_path}")
    return len(records)
