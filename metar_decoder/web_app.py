"""FastAPI web application."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from metar_decoder.config import AppConfig
from metar_decoder.describe import format_report
from metar_decoder.metar_parser import DecodedReport, is_icao, parse_metar
from metar_decoder.weather_sources import NoaaStationSource, ReportFetchError

logger = logging.getLogger(__name__)

app = FastAPI(title="METAR Decoder")

# Global state
config: Optional[AppConfig] = None
source: Optional[NoaaStationSource] = None


def configure(app_config: AppConfig) -> None:
    """Install configuration and build the report source."""
    global config, source
    config = app_config
    source = NoaaStationSource(
        base_url=app_config.weather_source.base_url,
        cache_seconds=app_config.weather_source.cache_seconds,
        timeout_seconds=app_config.weather_source.timeout_seconds,
    )
    logger.info(f"Web API configured with source {app_config.weather_source.base_url}")


def get_config() -> AppConfig:
    if config is None:
        configure(AppConfig())
    return config


def get_source() -> NoaaStationSource:
    if source is None:
        configure(get_config())
    return source


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Return HTTP errors as JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": True}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all exceptions and return JSON."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "error": True}
    )


class DecodeRequest(BaseModel):
    """Raw report to decode."""
    raw: str
    fahrenheit: Optional[bool] = None


def _report_payload(report: DecodedReport, fahrenheit: Optional[bool]) -> dict:
    if fahrenheit is None:
        fahrenheit = get_config().display.fahrenheit
    payload = report.to_dict()
    payload["summary"] = format_report(report, fahrenheit=fahrenheit)
    return payload


@app.get("/api/decode")
async def decode_query(raw: str, fahrenheit: Optional[bool] = None):
    """Decode a raw report passed as a query parameter."""
    return _report_payload(parse_metar(raw), fahrenheit)


@app.post("/api/decode")
async def decode_body(request: DecodeRequest):
    """Decode a raw report passed in the request body."""
    return _report_payload(parse_metar(request.raw), request.fahrenheit)


@app.get("/api/metar/{icao}")
async def get_metar(icao: str, fahrenheit: Optional[bool] = None):
    """Fetch and decode the latest report for a station."""
    if not is_icao(icao):
        raise HTTPException(status_code=400, detail=f"Invalid ICAO code: {icao}")

    try:
        raw = await get_source().fetch_metar(icao)
    except ReportFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return _report_payload(parse_metar(raw), fahrenheit)
