"""Streaming reader for GTFS text tables."""

import csv
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Sequence

import pandas as pd

from .exceptions import MissingFileError

logger = logging.getLogger(__name__)


class TableReader:
    """
    Streams a delimited GTFS table in fixed-size blocks.

    Only the requested columns are kept, every value is a trimmed string, and
    blank or missing values read as "". Rows with fewer columns than the header
    are padded, rows with more are cut to the header width, so a slightly
    ragged file never aborts a scan.
    """

    def __init__(self, path, fields: Sequence[str], chunksize: int = 200_000):
        """
        Args:
            path: Path to the table (e.g. gtfs/stop_times.txt).
            fields: Column names to keep, in output order.
            chunksize: Rows per block yielded by chunks().

        Raises:
            MissingFileError: If the file does not exist.
        """
        self.path = Path(path)
        if not self.path.is_file():
            raise MissingFileError(self.path, self.path.name)
        self.fields: List[str] = list(fields)
        self.chunksize = chunksize

    def _read_header(self) -> List[str]:
        with open(self.path, "r", newline="", encoding="utf-8-sig", errors="replace") as f:
            return next(csv.reader(f), [])

    def chunks(self) -> Iterator[pd.DataFrame]:
        """Yield the table as DataFrames of string columns, in file order."""
        if not self._read_header():
            logger.warning(f"{self.path} has no header row")
            return

        # index_col=False pins the row width to the header: the python engine
        # pads short rows with NaN and drops fields past the last column.
        # That tolerance costs throughput, roughly 4-5 s per million rows
        # against well under a second for the C engine. Undecodable bytes
        # become U+FFFD instead of failing the scan.
        with pd.read_csv(
            self.path,
            dtype=str,
            keep_default_na=False,
            index_col=False,
            engine="python",
            encoding="utf-8-sig",
            encoding_errors="replace",
            skipinitialspace=True,
            chunksize=self.chunksize,
        ) as reader:
            for chunk in reader:
                yield self._select(chunk)

    def _select(self, chunk: pd.DataFrame) -> pd.DataFrame:
        chunk.columns = [str(name).strip() for name in chunk.columns]
        frame = chunk.reindex(columns=self.fields).fillna("")
        for name in self.fields:
            frame[name] = frame[name].astype(str).str.strip()
        return frame

    def records(self) -> Iterator[Dict[str, str]]:
        """Yield one {field: value} mapping per data row."""
        for chunk in self.chunks():
            for row in chunk.itertuples(index=False, name=None):
                yield dict(zip(self.fields, row))

    def __iter__(self) -> Iterator[Dict[str, str]]:
        return self.records()
