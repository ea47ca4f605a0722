"""Exceptions raised by stationlines."""


class StationLinesError(Exception):
    """Base class for all stationlines errors."""


class MissingFileError(StationLinesError, FileNotFoundError):
    """A required GTFS table does not exist."""

    def __init__(self, path, table=None):
        self.path = str(path)
        self.table = table or self.path
        super().__init__(f"Missing {self.table} at: {self.path}")


class DownloadError(StationLinesError):
    """The static GTFS archive could not be fetched or unpacked."""
