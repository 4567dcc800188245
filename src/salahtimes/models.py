"""Data model definitions — the values passed between the solar, compose, overlay and cache layers."""

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from salahtimes.errors import InvalidConfiguration


@dataclass(frozen=True)
class GeoCoordinates:
    """Observer position. Validated on construction."""

    latitude: float  # Decimal degrees, north positive
    longitude: float  # Decimal degrees, east positive

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise InvalidConfiguration(
                f"Coordinates must be finite: lat={self.latitude}, lng={self.longitude}"
            )
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidConfiguration(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidConfiguration(f"Longitude out of range: {self.longitude}")


class CalculationMethod(str, Enum):
    """Regional convention fixing the Fajr/Isha rules."""

    MUSLIM_WORLD_LEAGUE = "MuslimWorldLeague"
    ISNA = "ISNA"
    EGYPTIAN = "Egyptian"
    UMM_AL_QURA = "UmmAlQura"
    KARACHI = "Karachi"
    DUBAI = "Dubai"
    MOONSIGHTING_COMMITTEE = "MoonsightingCommittee"

    @property
    def short_name(self) -> str:
        return _METHOD_SHORT_NAMES[self]

    @property
    def region_description(self) -> str:
        """Where the convention is commonly followed."""
        return _METHOD_REGIONS[self]


_METHOD_SHORT_NAMES: dict[CalculationMethod, str] = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: "MWL",
    CalculationMethod.ISNA: "ISNA",
    CalculationMethod.EGYPTIAN: "Egyptian",
    CalculationMethod.UMM_AL_QURA: "Umm al-Qura",
    CalculationMethod.KARACHI: "Karachi",
    CalculationMethod.DUBAI: "Dubai",
    CalculationMethod.MOONSIGHTING_COMMITTEE: "Moonsighting",
}

_METHOD_REGIONS: dict[CalculationMethod, str] = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: "Europe, Far East, parts of America",
    CalculationMethod.ISNA: "North America (US & Canada)",
    CalculationMethod.EGYPTIAN: "Egypt, Syria, Lebanon, Malaysia",
    CalculationMethod.UMM_AL_QURA: "Saudi Arabia (Makkah)",
    CalculationMethod.KARACHI: "Pakistan, Bangladesh, India, Afghanistan",
    CalculationMethod.DUBAI: "Dubai, UAE",
    CalculationMethod.MOONSIGHTING_COMMITTEE: "Worldwide (follows closest sunrise/sunset)",
}


class Madhab(str, Enum):
    """Jurisprudential school selecting the Asr shadow ratio."""

    SHAFI = "Shafi"
    HANAFI = "Hanafi"

    @property
    def shadow_ratio(self) -> float:
        return 2.0 if self is Madhab.HANAFI else 1.0


class PrayerName(str, Enum):
    """The five ordinal prayers. Key space for adjustments."""

    FAJR = "Fajr"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"


class SpecialTimeType(str, Enum):
    """Informational markers. Never adjusted."""

    IMSAK = "Imsak"
    SUNRISE = "Sunrise"
    SUNSET = "Sunset"
    MIDNIGHT = "Midnight"
    FIRST_THIRD = "FirstThird"
    LAST_THIRD = "LastThird"


@dataclass(frozen=True)
class MethodParameters:
    """Horizon angles for one calculation method. Exactly one Isha rule is set."""

    fajr_angle: float  # Degrees below horizon
    isha_angle: float | None = None  # Degrees below horizon
    isha_interval_minutes: float | None = None  # Minutes after Maghrib

    def __post_init__(self) -> None:
        if not self.fajr_angle > 0:
            raise InvalidConfiguration(f"Fajr angle must be positive: {self.fajr_angle}")
        if (self.isha_angle is None) == (self.isha_interval_minutes is None):
            raise InvalidConfiguration(
                "Exactly one of isha_angle / isha_interval_minutes must be set"
            )


@dataclass(frozen=True)
class DailyPrayerTimes:
    """All times for one day at one place. Timezone-aware datetimes."""

    date: date
    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime
    sunset: datetime
    imsak: datetime | None = None
    midnight: datetime | None = None  # Islamic midnight, sunset + night/2
    first_third: datetime | None = None
    last_third: datetime | None = None

    def time_for(self, prayer: PrayerName) -> datetime:
        return getattr(self, prayer.name.lower())

    @property
    def prayer_times(self) -> tuple[tuple[PrayerName, datetime], ...]:
        """The five ordinal prayers, Fajr first."""
        return tuple((p, self.time_for(p)) for p in PrayerName)

    @property
    def special_times(self) -> tuple[tuple[SpecialTimeType, datetime], ...]:
        """Informational times that are present, in chronological order."""
        candidates = (
            (SpecialTimeType.IMSAK, self.imsak),
            (SpecialTimeType.SUNRISE, self.sunrise),
            (SpecialTimeType.SUNSET, self.sunset),
            (SpecialTimeType.MIDNIGHT, self.midnight),
            (SpecialTimeType.FIRST_THIRD, self.first_third),
            (SpecialTimeType.LAST_THIRD, self.last_third),
        )
        present = [(kind, t) for kind, t in candidates if t is not None]
        return tuple(sorted(present, key=lambda item: item[1]))

    @property
    def all_times_sorted(self) -> tuple[tuple[str, datetime], ...]:
        """Prayers and special times together, labelled by their enum value."""
        labelled = [(p.value, t) for p, t in self.prayer_times]
        labelled += [(s.value, t) for s, t in self.special_times]
        return tuple(sorted(labelled, key=lambda item: item[1]))


@dataclass(frozen=True)
class CachedResult:
    """A composed day held by the cache. Read-only to callers."""

    times: DailyPrayerTimes
    coordinates: GeoCoordinates
    method: CalculationMethod
    madhab: Madhab
    computed_at: datetime  # UTC, tz-aware
