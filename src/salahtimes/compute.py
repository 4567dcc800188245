"""Prayer time composer — turns coordinates + local day into a validated DailyPrayerTimes."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from pytz import UnknownTimeZoneError, timezone, utc

from salahtimes.errors import CalculationFailed, InvalidConfiguration
from salahtimes.hourangle import HourAngle, asr_hour_angle, horizon_hour_angle
from salahtimes.methods import IMSAK_LEAD_MINUTES, SUNRISE_SUNSET_ANGLE, parameters_for
from salahtimes.models import CalculationMethod, DailyPrayerTimes, GeoCoordinates, Madhab
from salahtimes.solar import solar_position

logger = logging.getLogger(__name__)

# Interval-based Isha may land after local midnight, up to the following day
_ISHA_LIMIT_HOURS = 48.0


@dataclass(frozen=True)
class _SolarDay:
    """Per-day solar frame: local clock offset, declination and the sun's horizon crossings."""

    day: date
    utc_offset: float  # Hours east of UTC at local noon
    declination: float
    dhuhr: float  # Local clock hours
    horizon: HourAngle  # Sunrise/sunset hour angle


def resolve_zone(tz: tzinfo | str) -> tzinfo:
    """Accept a tzinfo or an IANA zone name.

    Raises:
        CalculationFailed: When the name is not a known zone.
    """
    if isinstance(tz, tzinfo):
        return tz
    if isinstance(tz, str):
        try:
            return timezone(tz)
        except UnknownTimeZoneError:
            raise CalculationFailed(f"Unknown time zone: {tz!r}") from None
    raise CalculationFailed(f"Not a time zone: {tz!r}")


def _localize(zone: tzinfo, naive: datetime) -> datetime:
    # pytz zones need localize() to pick the right offset; others attach directly
    localize = getattr(zone, "localize", None)
    if localize is not None:
        return localize(naive)
    return naive.replace(tzinfo=zone)


def local_day(day: date | datetime, zone: tzinfo) -> date:
    """Calendar date of ``day`` in ``zone``. Aware datetimes are converted first."""
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            return day.astimezone(zone).date()
        return day.date()
    if isinstance(day, date):
        return day
    raise CalculationFailed(f"Cannot decompose {day!r} into a calendar date")


def _utc_offset_hours(zone: tzinfo, day: date) -> float:
    noon = _localize(zone, datetime(day.year, day.month, day.day, 12))
    offset = noon.utcoffset()
    if offset is None:
        raise CalculationFailed(f"No UTC offset for {day.isoformat()} in {zone}")
    return offset.total_seconds() / 3600.0


def _solar_day(coordinates: GeoCoordinates, day: date, zone: tzinfo) -> _SolarDay:
    offset = _utc_offset_hours(zone, day)
    sun = solar_position(day.year, day.month, day.day)
    dhuhr = 12.0 + offset - coordinates.longitude / 15.0 - sun.equation_of_time
    horizon = horizon_hour_angle(coordinates.latitude, sun.declination, SUNRISE_SUNSET_ANGLE)
    return _SolarDay(
        day=day,
        utc_offset=offset,
        declination=sun.declination,
        dhuhr=dhuhr,
        horizon=horizon,
    )


def _anchor(frame: _SolarDay, hours: float, zone: tzinfo) -> datetime:
    """Local midnight of the frame's day plus ``hours``, as an aware datetime in ``zone``."""
    midnight_utc = datetime(frame.day.year, frame.day.month, frame.day.day, tzinfo=utc)
    instant = midnight_utc + timedelta(hours=hours - frame.utc_offset)
    return instant.astimezone(zone)


def _validate(hours: dict[str, float]) -> None:
    for name in ("fajr", "sunrise", "dhuhr", "asr", "maghrib"):
        if not 0.0 < hours[name] < 24.0:
            raise CalculationFailed(f"{name} out of range: {hours[name]:.3f}h")
    if not 0.0 < hours["isha"] < _ISHA_LIMIT_HOURS:
        raise CalculationFailed(f"isha out of range: {hours['isha']:.3f}h")
    ordered = ("fajr", "sunrise", "dhuhr", "asr", "maghrib")
    for earlier, later in zip(ordered, ordered[1:]):
        if not hours[earlier] < hours[later]:
            raise CalculationFailed(f"{earlier} does not precede {later}")
    if hours["isha"] < hours["maghrib"]:
        raise CalculationFailed("isha precedes maghrib")


def compose(
    coordinates: GeoCoordinates,
    day: date | datetime,
    method: CalculationMethod | str,
    madhab: Madhab | str,
    tz: tzinfo | str,
    *,
    strict_twilight: bool = False,
) -> DailyPrayerTimes:
    """Compute every prayer and informational time for one local day.

    When the sun never sinks to the Fajr or Isha angle (high-latitude summer),
    that prayer falls back to solar midnight and a warning is logged.

    Args:
        coordinates: Observer position.
        day: Calendar date, or a datetime whose date in ``tz`` is used.
        method: Calculation convention for Fajr/Isha.
        madhab: School selecting the Asr shadow ratio.
        tz: Zone the times are expressed in (tzinfo or IANA name).
        strict_twilight: Fail instead of falling back to solar midnight when
            the Fajr or Isha angle is never reached.

    Returns:
        DailyPrayerTimes with tz-aware datetimes in ``tz``.

    Raises:
        CalculationFailed: Date cannot be decomposed, the sun never rises or
            sets, the Asr shadow length is never reached, or a time fails
            validation.
        InvalidConfiguration: Unknown method or madhab.
    """
    params = parameters_for(method)
    try:
        madhab = Madhab(madhab)
    except ValueError:
        raise InvalidConfiguration(f"Unknown madhab: {madhab!r}") from None

    zone = resolve_zone(tz)
    today = _solar_day(coordinates, local_day(day, zone), zone)
    lat = coordinates.latitude
    decl = today.declination

    fajr_angle = horizon_hour_angle(lat, decl, params.fajr_angle)
    asr_angle = asr_hour_angle(lat, decl, madhab.shadow_ratio)

    hours = {
        "dhuhr": today.dhuhr,
        "sunrise": today.dhuhr - today.horizon.hours,
        "sunset": today.dhuhr + today.horizon.hours,
        "fajr": today.dhuhr - fajr_angle.hours,
        "asr": today.dhuhr + asr_angle.hours,
    }
    hours["maghrib"] = hours["sunset"]

    isha_angle: HourAngle | None = None
    if params.isha_interval_minutes is not None:
        hours["isha"] = hours["maghrib"] + params.isha_interval_minutes / 60.0
    else:
        isha_angle = horizon_hour_angle(lat, decl, params.isha_angle)
        hours["isha"] = today.dhuhr + isha_angle.hours

    unsolved = [
        name
        for name, angle in (("sunrise/sunset", today.horizon), ("asr", asr_angle))
        if angle.clamped
    ]
    if unsolved:
        raise CalculationFailed(
            f"No solution for {', '.join(unsolved)} at lat={lat} on {today.day.isoformat()}"
        )

    # A clamped twilight angle resolves to solar midnight (dhuhr -/+ 12h)
    twilight = [
        name
        for name, angle in (("fajr", fajr_angle), ("isha", isha_angle))
        if angle is not None and angle.clamped
    ]
    if twilight:
        if strict_twilight:
            raise CalculationFailed(
                f"No solution for {', '.join(twilight)} at lat={lat} on {today.day.isoformat()}"
            )
        logger.warning(
            "Twilight angle never reached for %s at lat=%s on %s, using solar midnight",
            ", ".join(twilight),
            lat,
            today.day.isoformat(),
        )

    _validate(hours)

    fajr = _anchor(today, hours["fajr"], zone)
    sunrise = _anchor(today, hours["sunrise"], zone)
    sunset = _anchor(today, hours["sunset"], zone)

    midnight = first_third = last_third = None
    tomorrow = _solar_day(coordinates, today.day + timedelta(days=1), zone)
    if not tomorrow.horizon.clamped:
        next_sunrise = _anchor(tomorrow, tomorrow.dhuhr - tomorrow.horizon.hours, zone)
        night = next_sunrise - sunset
        if night > timedelta(0):
            midnight = sunset + night / 2
            first_third = sunset + night / 3
            last_third = sunset + night * 2 / 3

    times = DailyPrayerTimes(
        date=today.day,
        fajr=fajr,
        sunrise=sunrise,
        dhuhr=_anchor(today, hours["dhuhr"], zone),
        asr=_anchor(today, hours["asr"], zone),
        maghrib=_anchor(today, hours["maghrib"], zone),
        isha=_anchor(today, hours["isha"], zone),
        sunset=sunset,
        imsak=fajr - timedelta(minutes=IMSAK_LEAD_MINUTES),
        midnight=midnight,
        first_third=first_third,
        last_third=last_third,
    )
    logger.debug(
        "Composed %s at (%.4f, %.4f) method=%s madhab=%s",
        today.day.isoformat(),
        coordinates.latitude,
        coordinates.longitude,
        CalculationMethod(method).value,
        madhab.value,
    )
    return times


def compose_span(
    coordinates: GeoCoordinates,
    start: date,
    days: int,
    method: CalculationMethod | str,
    madhab: Madhab | str,
    tz: tzinfo | str,
    *,
    strict_twilight: bool = False,
) -> tuple[DailyPrayerTimes, ...]:
    """Compose ``days`` consecutive days starting at ``start``. Fails on the first bad day."""
    return tuple(
        compose(
            coordinates,
            start + timedelta(days=i),
            method,
            madhab,
            tz,
            strict_twilight=strict_twilight,
        )
        for i in range(days)
    )
