"""Stale-result cache — date-scoped composed days with age-based eviction."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, fields
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from pytz import FixedOffset, timezone, utc

from salahtimes.errors import InvalidConfiguration
from salahtimes.models import CachedResult, CalculationMethod, DailyPrayerTimes, GeoCoordinates, Madhab
from salahtimes.store import JsonRecordStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=7)
COORDINATE_PRECISION = 4  # ~11 m at the equator

_FIXED_PREFIX = "fixed:"


def zone_name(tz: tzinfo | str) -> str:
    """Stable name for ``tz`` that ``restore_zone`` can turn back into a zone.

    IANA zones keep their name; fixed-offset zones become ``fixed:<minutes>``.

    Raises:
        InvalidConfiguration: For a zone with neither a name nor a fixed offset.
    """
    if isinstance(tz, str):
        return tz
    name = getattr(tz, "zone", None) or getattr(tz, "key", None)
    if name:
        return name
    offset = tz.utcoffset(None)
    if offset is None:
        raise InvalidConfiguration(f"Cannot name time zone {tz!r}")
    return f"{_FIXED_PREFIX}{int(offset.total_seconds() // 60):+d}"


def restore_zone(name: str) -> tzinfo:
    if name.startswith(_FIXED_PREFIX):
        return FixedOffset(int(name[len(_FIXED_PREFIX):]))
    return timezone(name)


@dataclass(frozen=True)
class CacheKey:
    """Identity of one composed day."""

    latitude: float
    longitude: float
    day: date
    method: CalculationMethod
    madhab: Madhab
    zone: str

    @classmethod
    def for_request(
        cls,
        coordinates: GeoCoordinates,
        day: date,
        method: CalculationMethod,
        madhab: Madhab,
        tz: tzinfo | str,
    ) -> "CacheKey":
        return cls(
            latitude=round(coordinates.latitude, COORDINATE_PRECISION),
            longitude=round(coordinates.longitude, COORDINATE_PRECISION),
            day=day,
            method=CalculationMethod(method),
            madhab=Madhab(madhab),
            zone=zone_name(tz),
        )

    def as_string(self) -> str:
        return "|".join(
            (
                f"{self.latitude:.{COORDINATE_PRECISION}f}",
                f"{self.longitude:.{COORDINATE_PRECISION}f}",
                self.day.isoformat(),
                self.method.value,
                self.madhab.value,
                self.zone,
            )
        )

    @classmethod
    def from_string(cls, text: str) -> "CacheKey":
        lat, lng, day, method, madhab, zone = text.split("|")
        return cls(
            latitude=float(lat),
            longitude=float(lng),
            day=date.fromisoformat(day),
            method=CalculationMethod(method),
            madhab=Madhab(madhab),
            zone=zone,
        )


def _utcnow() -> datetime:
    return datetime.now(utc)


class PrayerTimeCache:
    """In-memory cache with optional JSON persistence.

    An entry is served only while younger than ``ttl``; expired entries are
    dropped when read and by ``sweep``. There is no size bound.

    Changes only mark the cache dirty. Nothing touches the store until
    ``flush`` is called, so reads and writes never wait on disk.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        store: JsonRecordStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = ttl
        self._store = store
        self._clock = clock
        self._lock = threading.RLock()
        self._flush_lock = threading.Lock()
        self._dirty = False
        self._entries: dict[CacheKey, CachedResult] = {}
        if store is not None:
            self._entries = _decode_entries(store.load())
            self.sweep()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def persistent(self) -> bool:
        return self._store is not None

    @property
    def needs_flush(self) -> bool:
        if self._store is None:
            return False
        return self._dirty or self._store.has_pending_write

    def get(self, key: CacheKey) -> CachedResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry, self._clock()):
                logger.debug("Evicting stale cache entry %s", key.as_string())
                del self._entries[key]
                self._dirty = True
                return None
            return entry

    def put(self, key: CacheKey, result: CachedResult) -> None:
        with self._lock:
            self._entries[key] = result
            self._dirty = True

    def invalidate_older_than(self, duration: timedelta) -> int:
        """Drop entries computed more than ``duration`` ago. Returns how many."""
        with self._lock:
            cutoff = self._clock() - duration
            stale = [k for k, v in self._entries.items() if v.computed_at < cutoff]
            for key in stale:
                del self._entries[key]
            if stale:
                logger.info("Evicted %d cached prayer-time entries", len(stale))
                self._dirty = True
            return len(stale)

    def sweep(self) -> int:
        return self.invalidate_older_than(self.ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries = {}
            self._dirty = True

    def flush(self) -> bool:
        """Write outstanding changes. True when the store holds the latest entries.

        A failed write is logged by the store and retried on the next flush.
        """
        if self._store is None:
            return True
        with self._flush_lock:
            with self._lock:
                records = None
                if self._dirty:
                    records = {k.as_string(): _encode_entry(v) for k, v in self._entries.items()}
                    self._dirty = False
            if records is None:
                return self._store.flush()
            return self._store.save(records)

    def _is_fresh(self, entry: CachedResult, now: datetime) -> bool:
        return now - entry.computed_at < self.ttl


_TIME_FIELDS = tuple(f.name for f in fields(DailyPrayerTimes) if f.name != "date")


def _encode_entry(entry: CachedResult) -> dict[str, Any]:
    times: dict[str, str | None] = {"date": entry.times.date.isoformat()}
    for name in _TIME_FIELDS:
        value = getattr(entry.times, name)
        times[name] = value.isoformat() if value is not None else None
    return {
        "times": times,
        "latitude": entry.coordinates.latitude,
        "longitude": entry.coordinates.longitude,
        "method": entry.method.value,
        "madhab": entry.madhab.value,
        "computed_at": entry.computed_at.isoformat(),
    }


def _decode_entry(record: dict[str, Any], zone_label: str) -> CachedResult:
    zone = restore_zone(zone_label)
    raw = record["times"]
    times = DailyPrayerTimes(
        date=date.fromisoformat(raw["date"]),
        **{
            name: (
                datetime.fromisoformat(raw[name]).astimezone(zone)
                if raw.get(name) is not None
                else None
            )
            for name in _TIME_FIELDS
        },
    )
    return CachedResult(
        times=times,
        coordinates=GeoCoordinates(record["latitude"], record["longitude"]),
        method=CalculationMethod(record["method"]),
        madhab=Madhab(record["madhab"]),
        computed_at=datetime.fromisoformat(record["computed_at"]),
    )


def _decode_entries(records: dict[str, Any]) -> dict[CacheKey, CachedResult]:
    entries: dict[CacheKey, CachedResult] = {}
    for text, record in records.items():
        try:
            key = CacheKey.from_string(text)
            entries[key] = _decode_entry(record, key.zone)
        except (KeyError, TypeError, ValueError, InvalidConfiguration) as e:
            logger.warning("Skipping unreadable cache record %r: %s", text, e)
    return entries
