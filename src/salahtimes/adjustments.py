"""Adjustment overlay — per-prayer minute offsets on top of composed times."""

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import timedelta
from types import MappingProxyType

from salahtimes.i18n import t
from salahtimes.models import DailyPrayerTimes, PrayerName
from salahtimes.store import JsonRecordStore

logger = logging.getLogger(__name__)

MIN_ADJUSTMENT = -30
MAX_ADJUSTMENT = 30

AdjustmentMap = Mapping[PrayerName, int]


def clamp_adjustment(minutes: int) -> int:
    return min(max(int(minutes), MIN_ADJUSTMENT), MAX_ADJUSTMENT)


def adjustment_map(values: Mapping[PrayerName | str, int] | None = None) -> AdjustmentMap:
    """Build a fully populated, read-only AdjustmentMap.

    Missing prayers default to 0, values are clamped, unknown keys and
    non-integer values are dropped.
    """
    result = {prayer: 0 for prayer in PrayerName}
    for key, minutes in (values or {}).items():
        try:
            prayer = PrayerName(key)
        except ValueError:
            logger.warning("Dropping adjustment for unknown prayer %r", key)
            continue
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            logger.warning("Dropping non-integer adjustment for %s: %r", prayer.value, minutes)
            continue
        result[prayer] = clamp_adjustment(minutes)
    return MappingProxyType(result)


def apply_adjustments(times: DailyPrayerTimes, adjustments: AdjustmentMap) -> DailyPrayerTimes:
    """Shift each ordinal prayer by its offset. Informational times are untouched.

    Returns a new DailyPrayerTimes; ``times`` is not modified.
    """
    shifted = {
        prayer.name.lower(): times.time_for(prayer) + timedelta(minutes=adjustments.get(prayer, 0))
        for prayer in PrayerName
    }
    return replace(times, **shifted)


def format_adjustment(minutes: int, lang: str = "en") -> str:
    """Short label such as "+5 min", "-10 min" or "No adjustment"."""
    if minutes == 0:
        return t("adjust_none", lang)
    if minutes > 0:
        return t("adjust_later", lang).format(minutes=minutes)
    return t("adjust_earlier", lang).format(minutes=abs(minutes))


def describe_adjustment(minutes: int, lang: str = "en") -> str:
    if minutes == 0:
        return t("adjust_desc_none", lang)
    direction = "later" if minutes > 0 else "earlier"
    if abs(minutes) == 1:
        return t(f"adjust_desc_{direction}_one", lang)
    return t(f"adjust_desc_{direction}", lang).format(minutes=abs(minutes))


class AdjustmentStore:
    """Owns the user's offsets, persists them, and announces changes.

    Readers get immutable snapshots; writers are serialised by a lock.
    Subscribers are called with no arguments after every change.
    """

    def __init__(self, store: JsonRecordStore | None = None) -> None:
        self._store = store
        self._lock = threading.RLock()
        self._subscribers: list[Callable[[], None]] = []
        raw = store.load() if store is not None else {}
        self._adjustments = adjustment_map(raw)
        active = {p.value: m for p, m in self._adjustments.items() if m != 0}
        if active:
            logger.info("Loaded prayer time adjustments: %s", active)

    def snapshot(self) -> AdjustmentMap:
        return self._adjustments

    def get(self, prayer: PrayerName) -> int:
        return self._adjustments[prayer]

    @property
    def has_adjustments(self) -> bool:
        return any(m != 0 for m in self._adjustments.values())

    @property
    def adjusted_count(self) -> int:
        return sum(1 for m in self._adjustments.values() if m != 0)

    def is_adjusted(self, prayer: PrayerName) -> bool:
        return self._adjustments[prayer] != 0

    def set_adjustment(self, prayer: PrayerName, minutes: int) -> int:
        """Store a clamped offset for one prayer and return the stored value."""
        prayer = PrayerName(prayer)
        clamped = clamp_adjustment(minutes)
        with self._lock:
            old = self._adjustments[prayer]
            if clamped == old:
                return clamped
            self._replace({**self._adjustments, prayer: clamped})
        logger.info("Adjusted %s: %s (%+d min)", prayer.value, format_adjustment(clamped), clamped - old)
        self._notify()
        return clamped

    def reset(self, prayer: PrayerName) -> None:
        with self._lock:
            self._replace({**self._adjustments, PrayerName(prayer): 0})
        logger.info("Reset %s adjustment to 0", PrayerName(prayer).value)
        self._notify()

    def reset_all(self) -> None:
        with self._lock:
            self._replace({})
        logger.info("Reset all prayer time adjustments")
        self._notify()

    def apply(self, times: DailyPrayerTimes) -> DailyPrayerTimes:
        return apply_adjustments(times, self._adjustments)

    def summary(self, lang: str = "en") -> dict[str, str]:
        """Prayer label → formatted offset, for every prayer."""
        return {
            t(f"prayer_{p.value}", lang): format_adjustment(m, lang)
            for p, m in self._adjustments.items()
        }

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _replace(self, values: Mapping[PrayerName, int]) -> None:
        self._adjustments = adjustment_map(values)
        if self._store is not None:
            self._store.save({p.value: m for p, m in self._adjustments.items()})

    def _notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception:
                logger.exception("Adjustment listener %r failed", callback)
