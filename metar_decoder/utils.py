"""Utility functions - unit conversions and comfort indices."""

import math

from metar_decoder.metar_parser import SpeedUnit


def c_to_f(c: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return c * 9.0 / 5.0 + 32.0


def f_to_c(f: float) -> float:
    """Convert Fahrenheit to Celsius."""
    return (f - 32.0) * 5.0 / 9.0


def kts_to_kph(kts: float) -> float:
    """Convert knots to kilometers per hour."""
    return kts * 1.852


def mps_to_kph(mps: float) -> float:
    """Convert meters per second to kilometers per hour."""
    return mps * 3.6


def wind_speed_kph(speed: float, unit: SpeedUnit) -> float:
    """Convert a reported wind speed to kilometers per hour."""
    if unit == SpeedUnit.KNOTS:
        return kts_to_kph(speed)
    if unit == SpeedUnit.METERS_PER_SECOND:
        return mps_to_kph(speed)
    return float(speed)


def relative_humidity(t: float, td: float) -> float:
    """
    Relative humidity from temperature and dew point (Magnus formula).

    Args:
        t: Temperature (Celsius)
        td: Dew point (Celsius)

    Returns:
        Relative humidity in percent
    """
    a, b = 17.625, 243.04
    return 100.0 * math.exp(a * td / (b + td)) / math.exp(a * t / (b + t))


def wind_chill(temp: float, wind_kph: float) -> float:
    """
    Wind chill index (Celsius).

    Only defined at or below 10 C with wind above 4.8 km/h; outside that
    range the air temperature is returned unchanged.
    """
    if temp > 10.0 or wind_kph <= 4.8:
        return temp

    v = wind_kph ** 0.16
    return 13.12 + 0.6215 * temp - 11.37 * v + 0.3965 * temp * v


def heat_index(temp: float, humidity: float, celsius: bool = False) -> float:
    """
    Heat index (Rothfusz regression with NWS adjustments).

    Args:
        temp: Air temperature, Fahrenheit unless celsius is set
        humidity: Relative humidity in percent
        celsius: Temperature is given and returned in Celsius

    Returns:
        Apparent temperature; the input temperature below 80 F
    """
    t = c_to_f(temp) if celsius else temp
    if t < 80.0:
        return temp

    rh = humidity
    hi = (
        -42.379
        + 2.04901523 * t
        + 10.14333127 * rh
        - 0.22475541 * t * rh
        - 0.00683783 * t * t
        - 0.05481717 * rh * rh
        + 0.00122874 * t * t * rh
        + 0.00085282 * t * rh * rh
        - 0.00000199 * t * t * rh * rh
    )

    if rh < 13.0 and 80.0 <= t <= 112.0:
        hi -= ((13.0 - rh) / 4.0) * math.sqrt((17.0 - abs(t - 95.0)) / 17.0)
    elif rh > 85.0 and 80.0 <= t <= 87.0:
        hi += ((rh - 85.0) / 10.0) * ((87.0 - t) / 5.0)

    return f_to_c(hi) if celsius else hi
