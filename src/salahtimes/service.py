"""Service façade — composes, caches and adjusts prayer times for callers."""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, tzinfo

from pytz import utc
from timezonefinder import TimezoneFinder

from salahtimes.adjustments import AdjustmentStore
from salahtimes.cache import CacheKey, PrayerTimeCache
from salahtimes.compute import compose, local_day, resolve_zone
from salahtimes.config import Settings
from salahtimes.errors import InvalidConfiguration
from salahtimes.models import CachedResult, CalculationMethod, DailyPrayerTimes, GeoCoordinates, Madhab
from salahtimes.period import PrayerPeriod, current_period
from salahtimes.qibla import qibla_bearing
from salahtimes.store import JsonRecordStore

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = timedelta(hours=1)

_tf = TimezoneFinder()


def timezone_for(coordinates: GeoCoordinates) -> str:
    """IANA zone name at the given position.

    Raises:
        InvalidConfiguration: When no zone covers the position.
    """
    tz_str = _tf.timezone_at(lat=coordinates.latitude, lng=coordinates.longitude)
    if tz_str is None:
        raise InvalidConfiguration(
            f"Timezone not found: lat={coordinates.latitude}, lng={coordinates.longitude}"
        )
    return tz_str


class PrayerTimesService:
    """Owns the cache and adjustment store for one application.

    Cached entries hold unadjusted times; offsets are applied on every read,
    so changing an adjustment never requires a cache flush. Cache writes run
    on a background writer thread; call ``close`` (or use the service as a
    context manager) to wait for them.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: PrayerTimeCache | None = None,
        adjustments: AdjustmentStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._clock = clock or (lambda: datetime.now(utc))
        if cache is None:
            path = self.settings.cache_path
            cache = PrayerTimeCache(
                ttl=self.settings.cache_ttl,
                store=JsonRecordStore(path) if path else None,
                clock=self._clock,
            )
        if adjustments is None:
            path = self.settings.adjustments_path
            adjustments = AdjustmentStore(JsonRecordStore(path) if path else None)
        self.cache = cache
        self.adjustments = adjustments
        self._last_sweep = self._clock()
        self._writer: ThreadPoolExecutor | None = None
        self._writer_lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "PrayerTimesService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def daily_times(
        self,
        coordinates: GeoCoordinates,
        day: date | datetime,
        tz: tzinfo | str | None = None,
        method: CalculationMethod | str | None = None,
        madhab: Madhab | str | None = None,
    ) -> DailyPrayerTimes:
        """Adjusted times for one local day.

        Args:
            coordinates: Observer position.
            day: Calendar date (or datetime) to compute.
            tz: Zone for the results; looked up from ``coordinates`` when None.
            method: Overrides ``settings.method``.
            madhab: Overrides ``settings.madhab``.

        Returns:
            DailyPrayerTimes with the stored adjustments applied.

        Raises:
            CalculationFailed: Propagated from the composer.
            InvalidConfiguration: Unknown method, madhab or zone lookup failure.
        """
        return self.adjustments.apply(self._raw_times(coordinates, day, tz, method, madhab))

    def _raw_times(
        self,
        coordinates: GeoCoordinates,
        day: date | datetime,
        tz: tzinfo | str | None,
        method: CalculationMethod | str | None,
        madhab: Madhab | str | None,
    ) -> DailyPrayerTimes:
        try:
            method = CalculationMethod(method or self.settings.method)
            madhab = Madhab(madhab or self.settings.madhab)
        except ValueError as e:
            raise InvalidConfiguration(str(e)) from None
        zone = resolve_zone(tz if tz is not None else timezone_for(coordinates))
        the_day = local_day(day, zone)
        self._sweep_if_due()

        key = CacheKey.for_request(coordinates, the_day, method, madhab, zone)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key.as_string())
            return cached.times

        try:
            times = compose(
                coordinates,
                the_day,
                method,
                madhab,
                zone,
                strict_twilight=self.settings.strict_twilight,
            )
            self.cache.put(
                key,
                CachedResult(
                    times=times,
                    coordinates=coordinates,
                    method=method,
                    madhab=madhab,
                    computed_at=self._clock(),
                ),
            )
        finally:
            # Also picks up a stale entry evicted by the lookup above
            self._schedule_flush()
        return times

    def qibla(self, coordinates: GeoCoordinates) -> float:
        return qibla_bearing(coordinates)

    def period_at(
        self,
        coordinates: GeoCoordinates,
        now: datetime,
        tz: tzinfo | str | None = None,
        method: CalculationMethod | str | None = None,
        madhab: Madhab | str | None = None,
    ) -> PrayerPeriod:
        """Prayer window containing the aware instant ``now``."""
        zone = resolve_zone(tz if tz is not None else timezone_for(coordinates))
        today = local_day(now, zone)
        return current_period(
            self.daily_times(coordinates, today, zone, method, madhab),
            self.daily_times(coordinates, today + timedelta(days=1), zone, method, madhab),
            now,
        )

    def flush(self) -> bool:
        """Write pending cache changes now. True when nothing is left pending."""
        return self.cache.flush()

    def close(self) -> None:
        """Wait for background writes, then flush whatever is left."""
        with self._writer_lock:
            self._closed = True
            writer, self._writer = self._writer, None
        if writer is not None:
            writer.shutdown(wait=True)
        self.flush()

    def _sweep_if_due(self) -> None:
        now = self._clock()
        if now - self._last_sweep >= SWEEP_INTERVAL:
            self._last_sweep = now
            if self.cache.sweep():
                self._schedule_flush()

    def _schedule_flush(self) -> None:
        if not self.cache.needs_flush:
            return
        with self._writer_lock:
            if self._closed:
                return
            if self._writer is None:
                self._writer = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="salahtimes-cache-writer"
                )
            self._writer.submit(self.cache.flush)
