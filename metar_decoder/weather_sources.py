"""Report source - fetches raw METAR text from station files."""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Tuple

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://tgftp.nws.noaa.gov/data/observations/metar/stations"


class ReportFetchError(Exception):
    """Raised when a station report cannot be retrieved."""

    def __init__(self, icao: str, status: Optional[int] = None, reason: str = ""):
        self.icao = icao
        self.status = status
        self.reason = reason
        detail = f"http_status = {status}" if status is not None else reason
        super().__init__(f"Failed to fetch METAR for {icao}: {detail}")


def station_url(base_url: str, icao: str) -> str:
    """Build the station file URL, e.g. <base>/KSTL.TXT."""
    return f"{base_url.rstrip('/')}/{icao.upper()}.TXT"


def extract_report_line(body: str) -> Optional[str]:
    """
    Extract the report from a station file.

    The file holds two lines: the observation date/time (UTC) and the
    raw report.
    """
    lines = body.split("\n")
    if len(lines) < 2:
        return None
    line = lines[1].strip()
    return line or None


class NoaaStationSource:
    """NOAA station file source."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, cache_seconds: int = 60, timeout_seconds: float = 10.0):
        """
        Initialize report source.

        Args:
            base_url: Directory URL holding <ICAO>.TXT files
            cache_seconds: Cache duration in seconds
            timeout_seconds: Total timeout per request
        """
        self.base_url = base_url
        self.cache_seconds = cache_seconds
        self.timeout_seconds = timeout_seconds
        self._cache: dict[str, tuple[str, float]] = {}  # icao -> (metar, timestamp)

    def _is_cache_valid(self, timestamp: float) -> bool:
        """Check if cache entry is still valid."""
        return (time.time() - timestamp) < self.cache_seconds

    async def fetch_text(self, url: str) -> Tuple[int, str]:
        """
        Fetch a URL.

        Returns:
            Tuple of (status code, body text)
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                return response.status, await response.text()

    async def fetch_metar(self, icao: str) -> str:
        """
        Fetch the raw METAR for one station.

        Raises:
            ReportFetchError: On HTTP failure, network failure or an empty file
        """
        icao_upper = icao.upper()
        if icao_upper in self._cache:
            metar, timestamp = self._cache[icao_upper]
            if self._is_cache_valid(timestamp):
                return metar
            del self._cache[icao_upper]

        url = station_url(self.base_url, icao_upper)
        logger.info(f"Fetching METAR for {icao_upper}: {url}")
        try:
            status, body = await self.fetch_text(url)
            if status != 200:
                # Retry once on failure
                await asyncio.sleep(1)
                status, body = await self.fetch_text(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error fetching METAR for {icao_upper}: {e}", exc_info=True)
            raise ReportFetchError(icao_upper, reason=str(e)) from e

        if status != 200:
            logger.error(f"METAR fetch for {icao_upper} failed with http_status = {status}")
            raise ReportFetchError(icao_upper, status=status)

        metar = extract_report_line(body)
        if metar is None:
            raise ReportFetchError(icao_upper, status=status, reason="no report line in station file")

        self._cache[icao_upper] = (metar, time.time())
        logger.info(f"METAR fetched for {icao_upper}: {metar[:80]}")
        return metar

    async def fetch_metars(self, icaos: List[str]) -> Dict[str, str]:
        """
        Fetch METAR reports for several stations.

        Stations that fail are logged and left out of the result.
        """
        results = await asyncio.gather(
            *(self.fetch_metar(icao) for icao in icaos),
            return_exceptions=True,
        )

        fetched: dict[str, str] = {}
        for icao, result in zip(icaos, results):
            if isinstance(result, ReportFetchError):
                logger.warning(str(result))
                continue
            if isinstance(result, BaseException):
                raise result
            fetched[icao.upper()] = result
        logger.info(f"METAR fetch complete: {len(fetched)}/{len(icaos)} stations")
        return fetched
