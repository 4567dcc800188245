"""Prayer period tracking — which prayer window a given instant falls in."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from salahtimes.models import DailyPrayerTimes, PrayerName

URGENT_THRESHOLD = timedelta(minutes=30)

# Fallback deadlines when neither Islamic midnight nor tomorrow's Fajr is known
_AFTER_MIDNIGHT_GRACE = timedelta(hours=1)
_ISHA_FALLBACK_SPAN = timedelta(hours=6)


class PeriodKind(str, Enum):
    BEFORE_FAJR = "BeforeFajr"
    IN_PROGRESS = "InProgress"
    BETWEEN_PRAYERS = "BetweenPrayers"
    AFTER_ISHA = "AfterIsha"


@dataclass(frozen=True)
class PrayerPeriod:
    """Schedule state at ``calculated_at``.

    ``current`` is set while a prayer is in progress; ``previous`` and
    ``upcoming`` are set between prayers. ``next_event`` is the next prayer
    start or the current prayer's deadline.
    """

    kind: PeriodKind
    next_event: datetime
    calculated_at: datetime
    today: DailyPrayerTimes
    tomorrow: DailyPrayerTimes | None = None
    current: PrayerName | None = None
    previous: PrayerName | None = None
    upcoming: PrayerName | None = None

    @property
    def is_active(self) -> bool:
        return self.kind is PeriodKind.IN_PROGRESS

    def time_until_next_event(self, now: datetime | None = None) -> timedelta:
        return self.next_event - (now or self.calculated_at)

    def next_prayer(self) -> tuple[PrayerName, datetime] | None:
        if self.kind in (PeriodKind.BEFORE_FAJR, PeriodKind.AFTER_ISHA):
            return PrayerName.FAJR, self.next_event
        if self.kind is PeriodKind.BETWEEN_PRAYERS and self.upcoming is not None:
            return self.upcoming, self.next_event
        if self.current is None:
            return None
        prayers = self.today.prayer_times
        names = [name for name, _ in prayers]
        index = names.index(self.current)
        if index + 1 < len(prayers):
            return prayers[index + 1]
        if self.tomorrow is not None:
            return PrayerName.FAJR, self.tomorrow.fajr
        return None

    def progress(self, now: datetime | None = None) -> float:
        """Fraction of the current window elapsed, in [0, 1]. 0 outside any window."""
        if self.kind is PeriodKind.IN_PROGRESS:
            start = self.today.time_for(self.current)
        elif self.kind is PeriodKind.BETWEEN_PRAYERS:
            start = self.today.time_for(self.previous)
        else:
            return 0.0
        total = (self.next_event - start).total_seconds()
        if total <= 0:
            return 0.0
        elapsed = ((now or self.calculated_at) - start).total_seconds()
        return min(max(elapsed / total, 0.0), 1.0)

    def is_urgent(self, now: datetime | None = None) -> bool:
        return self.is_active and self.time_until_next_event(now) < URGENT_THRESHOLD

    def countdown(self, now: datetime | None = None) -> str:
        """Time left as "HH:MM:SS", or "MM:SS" under an hour."""
        seconds = max(int(self.time_until_next_event(now).total_seconds()), 0)
        hours, rest = divmod(seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours > 0:
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"


def _deadline(prayer: PrayerName, times: DailyPrayerTimes, next_start: datetime) -> datetime:
    if prayer is PrayerName.FAJR:
        return times.sunrise
    if prayer is PrayerName.ISHA:
        return times.midnight or next_start
    return next_start


def _isha_period(
    now: datetime, today: DailyPrayerTimes, tomorrow: DailyPrayerTimes | None
) -> PrayerPeriod:
    base = {"calculated_at": now, "today": today, "tomorrow": tomorrow}
    in_isha = {"kind": PeriodKind.IN_PROGRESS, "current": PrayerName.ISHA}
    tomorrow_fajr = tomorrow.fajr if tomorrow is not None else None

    if today.midnight is not None:
        if now < today.midnight:
            return PrayerPeriod(next_event=today.midnight, **in_isha, **base)
        if tomorrow_fajr is not None:
            return PrayerPeriod(kind=PeriodKind.AFTER_ISHA, next_event=tomorrow_fajr, **base)
        return PrayerPeriod(next_event=now + _AFTER_MIDNIGHT_GRACE, **in_isha, **base)

    if tomorrow_fajr is not None:
        if now < tomorrow_fajr:
            return PrayerPeriod(next_event=tomorrow_fajr, **in_isha, **base)
        return PrayerPeriod(kind=PeriodKind.AFTER_ISHA, next_event=tomorrow_fajr, **base)
    return PrayerPeriod(next_event=today.isha + _ISHA_FALLBACK_SPAN, **in_isha, **base)


def current_period(
    today: DailyPrayerTimes,
    tomorrow: DailyPrayerTimes | None,
    now: datetime,
) -> PrayerPeriod:
    """Classify ``now`` against today's schedule.

    Args:
        today: Times for the local day containing ``now``.
        tomorrow: Next day's times, used once Isha's window closes.
        now: Timezone-aware instant to classify.

    Returns:
        PrayerPeriod describing the window and its next event.
    """
    prayers = today.prayer_times
    if now < prayers[0][1]:
        return PrayerPeriod(
            kind=PeriodKind.BEFORE_FAJR,
            next_event=prayers[0][1],
            calculated_at=now,
            today=today,
            tomorrow=tomorrow,
        )

    for (name, start), (next_name, next_start) in zip(prayers, prayers[1:]):
        if start <= now < next_start:
            deadline = _deadline(name, today, next_start)
            if now < deadline:
                return PrayerPeriod(
                    kind=PeriodKind.IN_PROGRESS,
                    next_event=deadline,
                    calculated_at=now,
                    today=today,
                    tomorrow=tomorrow,
                    current=name,
                )
            return PrayerPeriod(
                kind=PeriodKind.BETWEEN_PRAYERS,
                next_event=next_start,
                calculated_at=now,
                today=today,
                tomorrow=tomorrow,
                previous=name,
                upcoming=next_name,
            )

    return _isha_period(now, today, tomorrow)
