"""Main entry point - decode a station report or serve the web API."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from metar_decoder.config import AppConfig, LoggingConfig
from metar_decoder.describe import format_report
from metar_decoder.metar_parser import parse_metar
from metar_decoder.weather_sources import NoaaStationSource, ReportFetchError

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s:%(name)s:%(message)s'


def setup_logging(log_config: LoggingConfig, verbose: bool = False) -> None:
    """Configure logging to the configured file, or stderr."""
    level = logging.DEBUG if verbose else getattr(logging, log_config.level)
    if log_config.file:
        handler: logging.Handler = logging.FileHandler(log_config.file, encoding='utf-8')
    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[handler],
        force=True
    )

    # Reduce noise from aiohttp
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="metar-decoder",
        description="Fetch and decode METAR/SPECI weather reports",
    )
    parser.add_argument("station", nargs="?", help="ICAO station identifier, e.g. KSTL")
    parser.add_argument("-f", "--fahrenheit", action="store_true", help="Print temperature in Fahrenheit")
    parser.add_argument("-d", "--decode", metavar="RAW", help="Decode this report text instead of fetching")
    parser.add_argument("--serve", action="store_true", help="Run the web API")
    parser.add_argument("--config", type=Path, default=None, help="Configuration file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def fetch_report(config: AppConfig, station: str) -> str:
    """Fetch the raw report for a station."""
    source = NoaaStationSource(
        base_url=config.weather_source.base_url,
        cache_seconds=config.weather_source.cache_seconds,
        timeout_seconds=config.weather_source.timeout_seconds,
    )
    return asyncio.run(source.fetch_metar(station))


def run_server(config: AppConfig) -> None:
    """Run FastAPI server."""
    from metar_decoder import web_app

    web_app.configure(config)
    logger.info(f"Server will run on {config.web_ui.host}:{config.web_ui.port}")
    uvicorn.run(
        web_app.app,
        host=config.web_ui.host,
        port=config.web_ui.port,
        log_level="info",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = AppConfig.load(args.config)
    except Exception as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log, args.verbose)

    if args.serve:
        run_server(config)
        return 0

    if args.decode:
        metar_str = args.decode
    elif args.station:
        try:
            metar_str = fetch_report(config, args.station)
        except ReportFetchError as e:
            if e.status is not None:
                print(f"http_status = {e.status}", file=sys.stderr)
            else:
                print(str(e), file=sys.stderr)
            return 1
    else:
        print("usage: metar-decoder [options..] <station>", file=sys.stderr)
        return 1

    fahrenheit = args.fahrenheit or config.display.fahrenheit
    print(metar_str)
    print(format_report(parse_metar(metar_str), fahrenheit=fahrenheit))
    return 0


if __name__ == "__main__":
    sys.exit(main())
