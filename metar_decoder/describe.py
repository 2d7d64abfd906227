"""Human-readable rendering of decoded reports."""

from typing import Dict, List

from metar_decoder.metar_parser import DecodedReport, DistanceUnit, SkyCondition
from metar_decoder.phenomena import Intensity, PhenomenonKind, PhenomenonOccurrence
from metar_decoder.utils import c_to_f, heat_index, relative_humidity, wind_chill, wind_speed_kph

DEG_SYMBOL = "°"

PHENOMENON_NAMES: Dict[PhenomenonKind, str] = {
    PhenomenonKind.MIST: "Mist",
    PhenomenonKind.DUST_STORM: "Dust Storm",
    PhenomenonKind.DUST: "Dust",
    PhenomenonKind.DRIZZLE: "Drizzle",
    PhenomenonKind.FUNNEL_CLOUD: "Funnel Cloud",
    PhenomenonKind.FOG: "Fog",
    PhenomenonKind.SMOKE: "Smoke",
    PhenomenonKind.HAIL: "Hail",
    PhenomenonKind.SMALL_HAIL: "Small Hail",
    PhenomenonKind.HAZE: "Haze",
    PhenomenonKind.ICE_CRYSTALS: "Ice Crystals",
    PhenomenonKind.ICE_PELLETS: "Ice Pellets",
    PhenomenonKind.DUST_SAND_WHORLS: "Dust/Sand Whorls",
    PhenomenonKind.SPRAY: "Spray",
    PhenomenonKind.RAIN: "Rain",
    PhenomenonKind.SAND: "Sand",
    PhenomenonKind.SNOW_GRAINS: "Snow Grains",
    PhenomenonKind.SHOWER: "Showers",
    PhenomenonKind.SNOW: "Snow",
    PhenomenonKind.SQUALLS: "Squalls",
    PhenomenonKind.SAND_STORM: "Sand Storm",
    PhenomenonKind.UNKNOWN_PRECIP: "Unknown Precipitation",
    PhenomenonKind.VOLCANIC_ASH: "Volcanic Ash",
    PhenomenonKind.SLEET: "Sleet",
    PhenomenonKind.THUNDERSTORM: "Thunderstorm",
}


def describe_phenomenon(p: PhenomenonOccurrence) -> str:
    """Describe a phenomenon, e.g. 'Light Thunderstorm Rain'."""
    parts: List[str] = []
    if p.intensity == Intensity.LIGHT:
        parts.append("Light")
    elif p.intensity == Intensity.HEAVY:
        parts.append("Heavy")

    for flag, word in (
        (p.recent, "Recent"),
        (p.vicinity, "Vicinity"),
        (p.shallow, "Shallow"),
        (p.partial, "Partial"),
        (p.patches, "Patches of"),
        (p.drifting, "Drifting"),
        (p.blowing, "Blowing"),
        (p.freezing, "Freezing"),
    ):
        if flag:
            parts.append(word)

    if p.thunderstorm and p.kind != PhenomenonKind.THUNDERSTORM:
        parts.append("Thunderstorm")

    name = PHENOMENON_NAMES[p.kind]
    if p.shower and p.kind != PhenomenonKind.SHOWER:
        name += " Showers"
    parts.append(name)

    return " ".join(parts)


def describe_layer(layer: SkyCondition) -> str:
    """Describe a cloud layer, e.g. 'OVC: 1500 feet (CB)'."""
    text = layer.cover.value
    if layer.has_altitude:
        text += f": {layer.altitude_ft} feet"
        if layer.has_cloud_type:
            text += f" ({layer.cloud_type.value})"
    return text


def format_temperature(celsius: float, fahrenheit: bool = False) -> str:
    """Format a temperature with one decimal."""
    if fahrenheit:
        return f"{c_to_f(celsius):.1f}{DEG_SYMBOL}F"
    return f"{celsius:.1f}{DEG_SYMBOL}C"


def format_report(report: DecodedReport, fahrenheit: bool = False) -> str:
    """
    Render a multi-line summary of a decoded report.

    The precise (remarks) temperature and dew point are preferred over the
    whole-degree values when both are present.
    """
    lines: List[str] = []
    if report.has_icao:
        lines.append(report.icao)

    temp = report.temperature_precise if report.has_temperature_precise else report.temperature
    dew = report.dew_point_precise if report.has_dew_point_precise else report.dew_point

    if temp is not None:
        lines.append(f"Temperature: {format_temperature(temp, fahrenheit)}")

        feels_like = temp
        if report.has_wind_speed:
            feels_like = wind_chill(temp, wind_speed_kph(report.wind_speed, report.wind_speed_unit))

        humidity = None
        if dew is not None:
            humidity = relative_humidity(temp, dew)
            if feels_like == temp:
                feels_like = heat_index(temp, humidity, celsius=True)

        if feels_like != temp:
            lines.append(f"Feels Like:  {format_temperature(feels_like, fahrenheit)}")
        if dew is not None:
            lines.append(f"Dew Point:   {format_temperature(dew, fahrenheit)}")
            lines.append(f"Humidity:    {humidity:.1f}%")

    if report.has_altimeter_inhg:
        lines.append(f"Pressure:    {report.altimeter_inhg:.2f} inHg")
    elif report.has_altimeter_hpa:
        lines.append(f"Pressure:    {report.altimeter_hpa} hPa")

    if report.has_wind_speed:
        direction = "VRB" if report.is_variable_direction else f"{report.wind_direction}{DEG_SYMBOL}"
        wind = f"Wind:        {direction} / {report.wind_speed}"
        if report.has_wind_gust:
            wind += f" ({report.wind_gust})"
        wind += f" {report.wind_speed_unit.value}"
        lines.append(wind)
        if report.has_min_wind_direction:
            lines.append(
                f"Variable:    {report.min_wind_direction}{DEG_SYMBOL}"
                f" - {report.max_wind_direction}{DEG_SYMBOL}"
            )

    if report.is_cavok:
        lines.append("Visibility:  CAVOK")
    elif report.has_visibility:
        units = "meters" if report.visibility_unit == DistanceUnit.METERS else "miles"
        prefix = "less than " if report.visibility_less_than else ""
        lines.append(f"Visibility:  {prefix}{report.visibility:.2f} {units}")

    if report.has_vertical_visibility:
        lines.append(f"Vertical Visibility: {report.vertical_visibility} feet")

    if report.num_cloud_layers or report.num_phenomena:
        lines.append("")
    for layer in report.cloud_layers:
        if not layer.is_temporary:
            lines.append(describe_layer(layer))
    for p in report.phenomena:
        lines.append(describe_phenomenon(p))

    return "\n".join(lines)
