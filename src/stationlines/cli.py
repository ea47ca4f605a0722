"""Command-line entry point for building stations-lines.json."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_GTFS_DIR, DEFAULT_OUT_FILE, MTA_GTFS_URL, BuildConfig
from .exceptions import DownloadError, MissingFileError
from .fetcher import download_gtfs
from .pipeline import StationLinesBuilder


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="stationlines",
        description="Build a station -> lines JSON file from GTFS static tables.",
    )
    parser.add_argument("--gtfs", default=DEFAULT_GTFS_DIR,
                        help="Directory holding stops.txt, routes.txt, trips.txt, stop_times.txt")
    parser.add_argument("--out", default=DEFAULT_OUT_FILE, help="Output JSON file")
    parser.add_argument("--only-subway", action="store_true",
                        help="Only count routes whose route_type is subway (1)")
    parser.add_argument("--download", action="store_true",
                        help="Download the static GTFS archive into --gtfs before building")
    parser.add_argument("--url", default=MTA_GTFS_URL, help="Archive URL used with --download")
    parser.add_argument("--sequential", action="store_true",
                        help="Load reference tables one after another instead of in parallel")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = BuildConfig(
        gtfs_dir=Path(args.gtfs),
        out_file=Path(args.out),
        only_subway=args.only_subway,
        parallel_load=not args.sequential,
    )

    try:
        if args.download:
            download_gtfs(config.gtfs_dir, url=args.url)
        StationLinesBuilder(config).run()
    except MissingFileError as e:
        print(e, file=sys.stderr)
        return 1
    except DownloadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
