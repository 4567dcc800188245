from datetime import date, datetime, timedelta

import pytest
from pytz import timezone, utc

from salahtimes.models import DailyPrayerTimes, GeoCoordinates

NEW_YORK = GeoCoordinates(latitude=40.7128, longitude=-74.0060)
LONDON = GeoCoordinates(latitude=51.5074, longitude=-0.1278)
MAKKAH = GeoCoordinates(latitude=21.3891, longitude=39.8579)


@pytest.fixture
def new_york() -> GeoCoordinates:
    return NEW_YORK


@pytest.fixture
def eastern():
    return timezone("America/New_York")


def make_day(
    day: date = date(2025, 11, 1),
    zone_name: str = "America/New_York",
    midnight: tuple[int, int] | None = (0, 30),
) -> DailyPrayerTimes:
    """Hand-built schedule with round times, for period tests."""
    zone = timezone(zone_name)

    def at(hour: int, minute: int = 0, next_day: bool = False) -> datetime:
        d = day + timedelta(days=1) if next_day else day
        return zone.localize(datetime(d.year, d.month, d.day, hour, minute))

    return DailyPrayerTimes(
        date=day,
        imsak=at(4, 45),
        fajr=at(5, 0),
        sunrise=at(6, 30),
        dhuhr=at(12, 30),
        asr=at(15, 30),
        sunset=at(17, 55),
        maghrib=at(18, 0),
        isha=at(20, 0),
        first_third=at(22, 0),
        midnight=at(*midnight, next_day=True) if midnight else None,
        last_third=at(2, 0, next_day=True),
    )


class FakeClock:
    def __init__(self) -> None:
        self.now = utc.localize(datetime(2024, 6, 21, 12, 0))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
