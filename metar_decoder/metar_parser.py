"""METAR parser - ordered, token-by-token decoding of METAR/SPECI reports."""

import logging
import re
import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, NamedTuple, Optional, Tuple

from metar_decoder.phenomena import PhenomenonOccurrence, decode_phenomena, is_phenomenon_token

logger = logging.getLogger(__name__)

MAX_CLOUD_LAYERS = 3
REMARKS_MARKER = "RMK"
# Forecast groups appended to the observation
TREND_MARKERS = ("TEMPO", "BECMG", "NOSIG")


class MessageType(Enum):
    """Report type."""
    METAR = "METAR"
    SPECI = "SPECI"


class SpeedUnit(Enum):
    """Wind speed unit."""
    KNOTS = "KT"
    METERS_PER_SECOND = "MPS"
    KPH = "KPH"


class DistanceUnit(Enum):
    """Visibility unit."""
    METERS = "M"
    STATUTE_MILES = "SM"


class SkyCover(Enum):
    """Sky cover codes, in increasing coverage."""
    SKC = "SKC"
    CLR = "CLR"
    NSC = "NSC"
    FEW = "FEW"
    SCT = "SCT"
    BKN = "BKN"
    OVC = "OVC"


class CloudType(Enum):
    """Significant convective cloud types."""
    TCU = "TCU"
    CB = "CB"
    ACC = "ACC"


@dataclass(frozen=True)
class SkyCondition:
    """Represents a cloud layer."""
    cover: SkyCover
    altitude_ft: Optional[int] = None
    cloud_type: Optional[CloudType] = None
    is_temporary: bool = False

    @property
    def has_altitude(self) -> bool:
        return self.altitude_ft is not None

    @property
    def has_cloud_type(self) -> bool:
        return self.cloud_type is not None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "cover": self.cover.value,
            "altitude_ft": self.altitude_ft,
            "cloud_type": self.cloud_type.value if self.cloud_type else None,
            "is_temporary": self.is_temporary,
        }


def _field(name: str, doc: str) -> property:
    return property(lambda self: self._fields.get(name), doc=doc)


def _presence(name: str) -> property:
    return property(lambda self: name in self._fields, doc=f"True when {name} was decoded.")


def _flag(name: str, doc: str) -> property:
    return property(lambda self: self._fields.get(name, False), doc=doc)


class DecodedReport:
    """
    Decoded METAR/SPECI report.

    Built once by parse_metar() and read-only afterwards. Every optional
    field has a has_<field> predicate; accessors return None when the
    field was not decoded.
    """

    __slots__ = ("_raw", "_fields", "_cloud_layers", "_phenomena")

    def __init__(self, raw: str = ""):
        self._raw = raw
        self._fields: dict[str, Any] = {}
        self._cloud_layers: List[SkyCondition] = []
        self._phenomena: List[PhenomenonOccurrence] = []

    @classmethod
    def from_text(cls, raw: str) -> "DecodedReport":
        """Decode a raw report string."""
        return parse_metar(raw)

    def _set(self, name: str, value: Any) -> None:
        self._fields[name] = value

    @property
    def raw(self) -> str:
        return self._raw

    message_type = _field("message_type", "MessageType of the report.")
    has_message_type = _presence("message_type")

    icao = _field("icao", "4-letter station identifier.")
    has_icao = _presence("icao")

    day = _field("day", "Observation day of month.")
    has_day = _presence("day")
    hour = _field("hour", "Observation hour (UTC).")
    has_hour = _presence("hour")
    minute = _field("minute", "Observation minute.")
    has_minute = _presence("minute")

    wind_direction = _field("wind_direction", "Wind direction in degrees.")
    has_wind_direction = _presence("wind_direction")
    is_variable_direction = _flag("is_variable_direction", "True for VRB wind.")
    wind_speed = _field("wind_speed", "Wind speed in wind_speed_unit.")
    has_wind_speed = _presence("wind_speed")
    wind_gust = _field("wind_gust", "Gust speed in wind_speed_unit.")
    has_wind_gust = _presence("wind_gust")
    wind_speed_unit = _field("wind_speed_unit", "SpeedUnit of wind speed and gust.")
    has_wind_speed_unit = _presence("wind_speed_unit")
    min_wind_direction = _field("min_wind_direction", "Lower bound of a variable wind direction range.")
    has_min_wind_direction = _presence("min_wind_direction")
    max_wind_direction = _field("max_wind_direction", "Upper bound of a variable wind direction range.")
    has_max_wind_direction = _presence("max_wind_direction")

    visibility = _field("visibility", "Prevailing visibility in visibility_unit.")
    has_visibility = _presence("visibility")
    visibility_unit = _field("visibility_unit", "DistanceUnit of the visibility.")
    has_visibility_unit = _presence("visibility_unit")
    visibility_less_than = _flag("visibility_less_than", "True for 'M' (less than) visibility.")
    is_cavok = _flag("is_cavok", "True when the report carries CAVOK.")

    vertical_visibility = _field("vertical_visibility", "Vertical visibility in feet.")
    has_vertical_visibility = _presence("vertical_visibility")

    temperature = _field("temperature", "Temperature in whole degrees Celsius.")
    has_temperature = _presence("temperature")
    dew_point = _field("dew_point", "Dew point in whole degrees Celsius.")
    has_dew_point = _presence("dew_point")
    temperature_precise = _field("temperature_precise", "Temperature in tenths of degrees Celsius (remarks group).")
    has_temperature_precise = _presence("temperature_precise")
    dew_point_precise = _field("dew_point_precise", "Dew point in tenths of degrees Celsius (remarks group).")
    has_dew_point_precise = _presence("dew_point_precise")

    altimeter_inhg = _field("altimeter_inhg", "Altimeter setting in inches of mercury.")
    has_altimeter_inhg = _presence("altimeter_inhg")
    altimeter_hpa = _field("altimeter_hpa", "Altimeter setting (QNH) in hectopascals.")
    has_altimeter_hpa = _presence("altimeter_hpa")
    sea_level_pressure = _field("sea_level_pressure", "Sea-level pressure in hectopascals.")
    has_sea_level_pressure = _presence("sea_level_pressure")

    @property
    def cloud_layers(self) -> Tuple[SkyCondition, ...]:
        return tuple(self._cloud_layers)

    @property
    def num_cloud_layers(self) -> int:
        return len(self._cloud_layers)

    def layer(self, index: int) -> Optional[SkyCondition]:
        """Return cloud layer at index, or None when there is no such layer."""
        if 0 <= index < len(self._cloud_layers):
            return self._cloud_layers[index]
        return None

    @property
    def phenomena(self) -> Tuple[PhenomenonOccurrence, ...]:
        return tuple(self._phenomena)

    @property
    def num_phenomena(self) -> int:
        return len(self._phenomena)

    def phenomenon(self, index: int) -> Optional[PhenomenonOccurrence]:
        """Return phenomenon at index, or None when there is no such entry."""
        if 0 <= index < len(self._phenomena):
            return self._phenomena[index]
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        def code(value):
            return value.value if isinstance(value, Enum) else value

        return {
            "raw": self.raw,
            "message_type": code(self.message_type),
            "icao": self.icao,
            "day": self.day,
            "hour": self.hour,
            "minute": self.minute,
            "wind_direction": self.wind_direction,
            "is_variable_direction": self.is_variable_direction,
            "wind_speed": self.wind_speed,
            "wind_gust": self.wind_gust,
            "wind_speed_unit": code(self.wind_speed_unit),
            "min_wind_direction": self.min_wind_direction,
            "max_wind_direction": self.max_wind_direction,
            "visibility": self.visibility,
            "visibility_unit": code(self.visibility_unit),
            "visibility_less_than": self.visibility_less_than,
            "is_cavok": self.is_cavok,
            "cloud_layers": [layer.to_dict() for layer in self._cloud_layers],
            "vertical_visibility": self.vertical_visibility,
            "temperature": self.temperature,
            "dew_point": self.dew_point,
            "temperature_precise": self.temperature_precise,
            "dew_point_precise": self.dew_point_precise,
            "altimeter_inhg": self.altimeter_inhg,
            "altimeter_hpa": self.altimeter_hpa,
            "sea_level_pressure": self.sea_level_pressure,
            "phenomena": [p.to_dict() for p in self._phenomena],
        }


# Shape patterns: '#' matches a digit, '$' matches a letter, anything else itself.

def _match_char(pattern_char: str, c: str) -> bool:
    if pattern_char == "#":
        return c in string.digits
    if pattern_char == "$":
        return c in string.ascii_letters
    return pattern_char == c


def match(pattern: str, token: Optional[str]) -> bool:
    """Check that token has exactly the shape of pattern."""
    if token is None or len(token) != len(pattern):
        return False
    return all(_match_char(p, c) for p, c in zip(pattern, token))


def starts_with(pattern: str, token: Optional[str]) -> bool:
    """Check that token begins with the shape of pattern."""
    if token is None or len(token) < len(pattern):
        return False
    return all(_match_char(p, c) for p, c in zip(pattern, token))


_LEADING_INT = re.compile(r"[+-]?\d+")
_LEADING_FLOAT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)")


def _leading_int(text: str) -> int:
    """Integer value of the leading digits of text, 0 if there are none."""
    m = _LEADING_INT.match(text)
    return int(m.group()) if m else 0


def _leading_float(text: str) -> float:
    """Float value of the leading number in text, 0.0 if there is none."""
    m = _LEADING_FLOAT.match(text)
    return float(m.group()) if m else 0.0


def is_message_type(token: str) -> bool:
    return token in ("METAR", "SPECI")


def is_icao(token: str) -> bool:
    return match("$$$$", token)


def is_observation_time(token: str) -> bool:
    return match("######Z", token)


def is_wind(token: str) -> bool:
    return (
        starts_with("#####", token)
        or starts_with("#####G##", token)
        or starts_with("######G###", token)
        or starts_with("VRB", token)
    )


def is_variable_wind(token: str) -> bool:
    return match("###V###", token)


def is_visibility(token: str) -> bool:
    if token == "CAVOK":
        return True

    unit_pos = token.find(DistanceUnit.STATUTE_MILES.value)
    if unit_pos < 0:
        return match("####", token)

    if unit_pos != len(token) - 2:
        return False
    if not (token[0] in string.digits or token[0] == "M"):
        return False
    return all(c in string.digits or c == "/" for c in token[1:unit_pos])


def is_cloud_layer(token: str) -> bool:
    return any(token.startswith(cover.value) for cover in SkyCover)


def is_vertical_visibility(token: str) -> bool:
    return match("VV###", token)


def is_temperature(token: str) -> bool:
    return any(
        match(pattern, token)
        for pattern in ("##/##", "##/M##", "M##/##", "M##/M##", "##/", "M##/")
    )


def is_altimeter_inhg(token: str) -> bool:
    return match("A####", token)


def is_altimeter_hpa(token: str) -> bool:
    return match("Q####", token)


def is_sea_level_pressure(token: str) -> bool:
    return match("SLP###", token)


def is_precise_temperature(token: str) -> bool:
    return match("T########", token)


class _Cursor:
    """Tokenizer state carried between tokens."""

    def __init__(self):
        self.previous: Optional[str] = None
        self.in_trend_or_remarks = False


def _decode_message_type(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    report._set("message_type", MessageType(token))


def _decode_icao(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    report._set("icao", token)


def _decode_observation_time(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    report._set("day", _leading_int(token[0:2]))
    report._set("hour", _leading_int(token[2:4]))
    report._set("minute", _leading_int(token[4:]))


def _decode_wind(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    if SpeedUnit.METERS_PER_SECOND.value in token:
        unit = SpeedUnit.METERS_PER_SECOND
    elif SpeedUnit.KPH.value in token:
        unit = SpeedUnit.KPH
    else:
        unit = SpeedUnit.KNOTS
    report._set("wind_speed_unit", unit)

    if "VRB" in token:
        report._set("is_variable_direction", True)
    else:
        report._set("wind_direction", _leading_int(token[0:3]))

    report._set("wind_speed", _leading_int(token[3:6]))

    gust_pos = token.find("G")
    if gust_pos >= 0:
        report._set("wind_gust", _leading_int(token[gust_pos + 1:gust_pos + 4]))


def _decode_variable_wind(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    report._set("min_wind_direction", _leading_int(token[0:3]))
    report._set("max_wind_direction", _leading_int(token[4:]))


def _decode_visibility(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    if token == "CAVOK":
        report._set("is_cavok", True)
        return

    unit_pos = token.find(DistanceUnit.STATUTE_MILES.value)
    if unit_pos < 0:
        report._set("visibility", _leading_float(token))
        report._set("visibility_unit", DistanceUnit.METERS)
        return

    value_text = token[:unit_pos]
    less_than = value_text.startswith("M")
    if less_than:
        value_text = value_text[1:]

    if "/" not in value_text:
        value = _leading_float(value_text)
    else:
        numerator_text, denominator_text = value_text.split("/", 1)
        denominator = _leading_float(denominator_text)
        if denominator == 0:
            logger.debug(f"Skipping visibility with zero denominator: {token}")
            return
        value = _leading_float(numerator_text) / denominator
        # "2 1/2SM" arrives as two tokens
        if match("#", cursor.previous):
            value += _leading_int(cursor.previous)

    report._set("visibility", value)
    report._set("visibility_unit", DistanceUnit.STATUTE_MILES)
    if less_than:
        report._set("visibility_less_than", True)


def _decode_cloud_layer(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    cover = next(c for c in SkyCover if token.startswith(c.value))
    altitude_ft = None
    cloud_type = None
    if len(token) > 3:
        altitude_ft = _leading_int(token[3:]) * 100
        if len(token) > 6:
            cloud_type = next((t for t in CloudType if t.value == token[6:]), None)
    report._cloud_layers.append(SkyCondition(cover, altitude_ft, cloud_type))


def _decode_vertical_visibility(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    report._set("vertical_visibility", _leading_int(token[2:]) * 100)


def _celsius(text: str) -> int:
    if text.startswith("M"):
        return -_leading_int(text[1:])
    return _leading_int(text)


def _decode_temperature(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    temp_text, _, dew_text = token.partition("/")
    report._set("temperature", _celsius(temp_text))
    if dew_text:
        report._set("dew_point", _celsius(dew_text))


def _decode_altimeter(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    value = _leading_int(token[1:])
    if token[0] == "Q":
        report._set("altimeter_hpa", value)
    else:
        report._set("altimeter_inhg", value / 100.0)


def _decode_sea_level_pressure(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    # Literal formula: no attempt to tell 9xx hPa from 10xx hPa
    report._set("sea_level_pressure", _leading_float(token[3:]) / 10.0 + 1000.0)


def _tenths(group: str) -> float:
    # First digit is the sign flag
    if group[0] == "1":
        return -_leading_int(group[1:]) / 10.0
    return _leading_int(group) / 10.0


def _decode_precise_temperature(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    report._set("temperature_precise", _tenths(token[1:5]))
    report._set("dew_point_precise", _tenths(token[5:9]))


def _decode_weather(report: DecodedReport, token: str, cursor: _Cursor) -> None:
    report._phenomena.extend(decode_phenomena(token))


def _absent(name: str) -> Callable[[DecodedReport, _Cursor], bool]:
    return lambda report, cursor: name not in report._fields


class Rule(NamedTuple):
    """One dispatch entry: a shape check and the decoder for its field."""
    name: str
    pending: Callable[[DecodedReport, _Cursor], bool]
    matches: Callable[[str], bool]
    decode: Callable[[DecodedReport, str, _Cursor], None]


# Priority order matters: the first pending rule whose shape matches wins.
RULES: Tuple[Rule, ...] = (
    Rule("message_type", _absent("message_type"), is_message_type, _decode_message_type),
    Rule("icao", _absent("icao"), is_icao, _decode_icao),
    Rule("observation_time", _absent("minute"), is_observation_time, _decode_observation_time),
    Rule("wind", _absent("wind_speed"), is_wind, _decode_wind),
    Rule("variable_wind", _absent("min_wind_direction"), is_variable_wind, _decode_variable_wind),
    Rule(
        "visibility",
        lambda report, cursor: not report.has_visibility and not report.is_cavok,
        is_visibility,
        _decode_visibility,
    ),
    Rule(
        "cloud_layer",
        lambda report, cursor: report.num_cloud_layers < MAX_CLOUD_LAYERS,
        is_cloud_layer,
        _decode_cloud_layer,
    ),
    Rule("vertical_visibility", _absent("vertical_visibility"), is_vertical_visibility, _decode_vertical_visibility),
    Rule("temperature", _absent("temperature"), is_temperature, _decode_temperature),
    Rule(
        "altimeter_inhg",
        lambda report, cursor: not report.has_altimeter_inhg and not report.has_altimeter_hpa,
        is_altimeter_inhg,
        _decode_altimeter,
    ),
    Rule(
        "altimeter_hpa",
        lambda report, cursor: not report.has_altimeter_inhg and not report.has_altimeter_hpa,
        is_altimeter_hpa,
        _decode_altimeter,
    ),
    Rule("sea_level_pressure", _absent("sea_level_pressure"), is_sea_level_pressure, _decode_sea_level_pressure),
    Rule("precise_temperature", _absent("temperature_precise"), is_precise_temperature, _decode_precise_temperature),
    Rule("phenomena", lambda report, cursor: not cursor.in_trend_or_remarks, is_phenomenon_token, _decode_weather),
)


def dispatch(report: DecodedReport, token: str, cursor: _Cursor) -> Optional[str]:
    """
    Decode one token into report.

    Returns:
        Name of the rule that consumed the token, or None if it was skipped
    """
    for rule in RULES:
        if rule.pending(report, cursor) and rule.matches(token):
            rule.decode(report, token, cursor)
            return rule.name
    return None


def parse_metar(raw: str) -> DecodedReport:
    """
    Parse METAR string.

    Tokens are whitespace-delimited and examined once, in order. Tokens
    that match no pending rule (remarks, station flags, trend groups) are
    skipped; decoding never raises on malformed input. Weather groups are
    only taken from the observation itself, before RMK or a trend marker.
    """
    report = DecodedReport(raw)
    cursor = _Cursor()

    for token in raw.split():
        if token == REMARKS_MARKER or token in TREND_MARKERS:
            cursor.in_trend_or_remarks = True
        if dispatch(report, token, cursor) is None:
            logger.debug(f"Skipping token: {token}")
        cursor.previous = token

    return report
