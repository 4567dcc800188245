"""Solar position kernel — Julian date, declination and equation of time from low-order series."""

import math
from dataclasses import dataclass

_J2000 = 2451545.0


@dataclass(frozen=True)
class SolarPosition:
    """Sun position for a calendar day."""

    declination: float  # Degrees
    equation_of_time: float  # Hours, apparent minus mean solar time


def julian_date(year: int, month: int, day: int) -> float:
    """Julian date at 0h UT of a Gregorian calendar day.

    January and February are counted as months 13 and 14 of the previous year.
    The result ends in ``.5`` because Julian days begin at noon.
    """
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
    )


def solar_position(year: int, month: int, day: int) -> SolarPosition:
    """Compute declination and equation of time for a Gregorian date.

    Args:
        year: Gregorian year.
        month: Month 1-12.
        day: Day of month.

    Returns:
        SolarPosition with declination in degrees and equation of time in hours.
    """
    d = julian_date(year, month, day) - _J2000

    mean_longitude = (280.46646 + 0.9856474 * d) % 360.0
    mean_anomaly = math.radians((357.52911 + 0.98560028 * d) % 360.0)
    center = (
        1.9146 * math.sin(mean_anomaly)
        + 0.02 * math.sin(2 * mean_anomaly)
        + 0.0003 * math.sin(3 * mean_anomaly)
    )
    ecliptic_longitude = math.radians(mean_longitude + center)
    obliquity = math.radians(23.439 - 0.00000036 * d)

    declination = math.degrees(
        math.asin(math.sin(obliquity) * math.sin(ecliptic_longitude))
    )
    right_ascension = math.degrees(
        math.atan2(
            math.cos(obliquity) * math.sin(ecliptic_longitude),
            math.cos(ecliptic_longitude),
        )
    )

    # Mean longitude minus right ascension, folded into (-180, 180]
    eot_degrees = mean_longitude - right_ascension
    while eot_degrees > 180.0:
        eot_degrees -= 360.0
    while eot_degrees <= -180.0:
        eot_degrees += 360.0

    return SolarPosition(declination=declination, equation_of_time=eot_degrees / 15.0)
