from datetime import date, datetime, timedelta

import pytest
from pytz import timezone

from salahtimes.models import PrayerName
from salahtimes.period import PeriodKind, current_period

from conftest import make_day

ZONE = timezone("America/New_York")
TODAY = date(2025, 11, 1)


def at(hour, minute=0, day=TODAY):
    return ZONE.localize(datetime(day.year, day.month, day.day, hour, minute))


@pytest.fixture
def today():
    return make_day(TODAY)


@pytest.fixture
def tomorrow():
    return make_day(TODAY + timedelta(days=1))


def test_before_fajr(today, tomorrow):
    period = current_period(today, tomorrow, at(3, 0))
    assert period.kind is PeriodKind.BEFORE_FAJR
    assert period.next_event == today.fajr
    assert period.next_prayer() == (PrayerName.FAJR, today.fajr)
    assert not period.is_active


def test_fajr_in_progress_until_sunrise(today, tomorrow):
    period = current_period(today, tomorrow, at(5, 30))
    assert period.kind is PeriodKind.IN_PROGRESS
    assert period.current is PrayerName.FAJR
    assert period.next_event == today.sunrise
    assert period.next_prayer() == (PrayerName.DHUHR, today.dhuhr)


def test_between_sunrise_and_dhuhr(today, tomorrow):
    period = current_period(today, tomorrow, at(9, 0))
    assert period.kind is PeriodKind.BETWEEN_PRAYERS
    assert period.previous is PrayerName.FAJR
    assert period.upcoming is PrayerName.DHUHR
    assert period.next_event == today.dhuhr
    assert period.next_prayer() == (PrayerName.DHUHR, today.dhuhr)


@pytest.mark.parametrize(
    ("hour", "minute", "prayer", "deadline"),
    [
        (13, 0, PrayerName.DHUHR, "asr"),
        (16, 0, PrayerName.ASR, "maghrib"),
        (18, 30, PrayerName.MAGHRIB, "isha"),
    ],
)
def test_prayer_lasts_until_next_prayer(today, tomorrow, hour, minute, prayer, deadline):
    period = current_period(today, tomorrow, at(hour, minute))
    assert period.current is prayer
    assert period.next_event == getattr(today, deadline)


def test_isha_lasts_until_islamic_midnight(today, tomorrow):
    period = current_period(today, tomorrow, at(23, 0))
    assert period.current is PrayerName.ISHA
    assert period.next_event == today.midnight
    assert period.next_prayer() == (PrayerName.FAJR, tomorrow.fajr)


def test_after_midnight_waits_for_tomorrows_fajr(today, tomorrow):
    period = current_period(today, tomorrow, at(1, 0, TODAY + timedelta(days=1)))
    assert period.kind is PeriodKind.AFTER_ISHA
    assert period.next_event == tomorrow.fajr


def test_isha_without_midnight_uses_tomorrows_fajr(tomorrow):
    today = make_day(TODAY, midnight=None)
    period = current_period(today, tomorrow, at(23, 0))
    assert period.current is PrayerName.ISHA
    assert period.next_event == tomorrow.fajr


def test_isha_without_midnight_or_tomorrow_gets_six_hours():
    today = make_day(TODAY, midnight=None)
    period = current_period(today, None, at(21, 0))
    assert period.current is PrayerName.ISHA
    assert period.next_event == today.isha + timedelta(hours=6)


def test_progress_and_countdown(today, tomorrow):
    period = current_period(today, tomorrow, at(14, 0))
    # Dhuhr 12:30 → Asr 15:30, halfway at 14:00
    assert period.progress() == pytest.approx(0.5)
    assert period.countdown() == "01:30:00"
    assert period.progress(at(16, 0)) == 1.0


def test_urgent_within_thirty_minutes_of_deadline(today, tomorrow):
    assert current_period(today, tomorrow, at(15, 10)).is_urgent()
    assert not current_period(today, tomorrow, at(14, 0)).is_urgent()
    assert not current_period(today, tomorrow, at(4, 50)).is_urgent()


def test_short_countdown_format(today, tomorrow):
    period = current_period(today, tomorrow, at(15, 10))
    assert period.countdown() == "20:00"
    assert period.countdown(at(16, 0)) == "00:00"
