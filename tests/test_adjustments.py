import json
from datetime import date, timedelta

import pytest

from salahtimes.adjustments import (
    AdjustmentStore,
    adjustment_map,
    apply_adjustments,
    describe_adjustment,
    format_adjustment,
)
from salahtimes.compute import compose
from salahtimes.models import CalculationMethod, Madhab, PrayerName
from salahtimes.store import JsonRecordStore

from conftest import NEW_YORK


@pytest.fixture
def times():
    return compose(
        NEW_YORK, date(2024, 6, 21), CalculationMethod.MUSLIM_WORLD_LEAGUE, Madhab.SHAFI, "America/New_York"
    )


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "adjustments.json"


def test_default_map_is_fully_populated_with_zero():
    assert dict(adjustment_map()) == {p: 0 for p in PrayerName}


def test_map_is_read_only():
    with pytest.raises(TypeError):
        adjustment_map()[PrayerName.FAJR] = 5  # type: ignore[index]


def test_map_drops_unknown_and_malformed_entries():
    result = adjustment_map({"Fajr": 5, "Sunrise": 3, "Isha": "ten", "Asr": 99})
    assert result[PrayerName.FAJR] == 5
    assert result[PrayerName.ISHA] == 0
    assert result[PrayerName.ASR] == 30
    assert set(result) == set(PrayerName)


@pytest.mark.parametrize(("requested", "stored"), [(1000, 30), (-1000, -30), (7, 7), (-30, -30)])
def test_set_adjustment_clamps(requested, stored):
    adjustments = AdjustmentStore()
    assert adjustments.set_adjustment(PrayerName.DHUHR, requested) == stored
    assert adjustments.get(PrayerName.DHUHR) == stored


def test_apply_shifts_only_ordinal_prayers(times):
    adjustments = adjustment_map({p: 5 for p in PrayerName})
    shifted = apply_adjustments(times, adjustments)

    for prayer in PrayerName:
        assert shifted.time_for(prayer) - times.time_for(prayer) == timedelta(minutes=5)
    assert shifted.sunrise == times.sunrise
    assert shifted.sunset == times.sunset
    assert shifted.imsak == times.imsak
    assert shifted.midnight == times.midnight
    assert shifted.first_third == times.first_third
    assert shifted.last_third == times.last_third


def test_apply_does_not_mutate_original(times):
    before = times.fajr
    shifted = apply_adjustments(times, adjustment_map({"Fajr": -12}))
    assert shifted is not times
    assert times.fajr == before


def test_apply_then_subtract_round_trips(times):
    adjustments = adjustment_map({"Fajr": 30, "Dhuhr": -7, "Asr": 1, "Maghrib": -30, "Isha": 13})
    negated = adjustment_map({p: -m for p, m in adjustments.items()})
    assert apply_adjustments(apply_adjustments(times, adjustments), negated) == times


def test_subscribers_notified_only_on_change():
    adjustments = AdjustmentStore()
    calls = []
    adjustments.subscribe(lambda: calls.append("changed"))

    adjustments.set_adjustment(PrayerName.ASR, 4)
    adjustments.set_adjustment(PrayerName.ASR, 4)
    adjustments.reset(PrayerName.ASR)
    adjustments.reset_all()

    assert calls == ["changed"] * 3


def test_failing_subscriber_does_not_block_the_others(caplog):
    adjustments = AdjustmentStore()
    calls = []

    def broken():
        raise RuntimeError("scheduler offline")

    adjustments.subscribe(broken)
    adjustments.subscribe(lambda: calls.append("changed"))

    assert adjustments.set_adjustment(PrayerName.DHUHR, 5) == 5
    assert adjustments.get(PrayerName.DHUHR) == 5
    assert calls == ["changed"]
    assert "scheduler offline" in caplog.text


def test_unsubscribe_stops_notifications():
    adjustments = AdjustmentStore()
    calls = []
    unsubscribe = adjustments.subscribe(lambda: calls.append(1))
    unsubscribe()
    adjustments.set_adjustment(PrayerName.ISHA, 10)
    assert calls == []


def test_counts_and_flags():
    adjustments = AdjustmentStore()
    assert not adjustments.has_adjustments
    adjustments.set_adjustment(PrayerName.FAJR, 2)
    adjustments.set_adjustment(PrayerName.MAGHRIB, -3)
    assert adjustments.has_adjustments
    assert adjustments.adjusted_count == 2
    assert adjustments.is_adjusted(PrayerName.FAJR)
    assert not adjustments.is_adjusted(PrayerName.DHUHR)


def test_snapshot_is_unaffected_by_later_writes():
    adjustments = AdjustmentStore()
    snapshot = adjustments.snapshot()
    adjustments.set_adjustment(PrayerName.FAJR, 9)
    assert snapshot[PrayerName.FAJR] == 0
    assert adjustments.snapshot()[PrayerName.FAJR] == 9


def test_persisted_values_survive_reload(store_path):
    AdjustmentStore(JsonRecordStore(store_path)).set_adjustment(PrayerName.ISHA, -15)

    reloaded = AdjustmentStore(JsonRecordStore(store_path))
    assert reloaded.get(PrayerName.ISHA) == -15
    assert reloaded.get(PrayerName.FAJR) == 0


def test_partial_file_loads_with_defaults(store_path):
    store_path.write_text(json.dumps({"Dhuhr": 3}), encoding="utf-8")
    adjustments = AdjustmentStore(JsonRecordStore(store_path))
    assert dict(adjustments.snapshot()) == {**{p: 0 for p in PrayerName}, PrayerName.DHUHR: 3}


def test_corrupt_file_loads_defaults(store_path):
    store_path.write_text("{not json", encoding="utf-8")
    adjustments = AdjustmentStore(JsonRecordStore(store_path))
    assert not adjustments.has_adjustments


def test_write_failure_is_not_raised(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory should be", encoding="utf-8")
    store = JsonRecordStore(blocker / "adjustments.json")
    adjustments = AdjustmentStore(store)

    assert adjustments.set_adjustment(PrayerName.FAJR, 5) == 5
    assert adjustments.get(PrayerName.FAJR) == 5
    assert store.has_pending_write


def test_pending_write_is_retried(tmp_path):
    target_dir = tmp_path / "later"
    target_dir.write_text("temporarily a file", encoding="utf-8")
    store = JsonRecordStore(target_dir / "adjustments.json")
    AdjustmentStore(store).set_adjustment(PrayerName.ASR, 8)
    assert store.has_pending_write

    target_dir.unlink()
    assert store.flush()
    assert json.loads(store.path.read_text(encoding="utf-8"))["Asr"] == 8


def test_format_adjustment():
    assert format_adjustment(0) == "No adjustment"
    assert format_adjustment(5) == "+5 min"
    assert format_adjustment(-10) == "-10 min"
    assert format_adjustment(5, "ar") == "+5 د"


def test_describe_adjustment():
    assert describe_adjustment(0) == "Prayer time is not adjusted"
    assert describe_adjustment(1) == "Prayer time is 1 minute later than calculated"
    assert describe_adjustment(-4) == "Prayer time is 4 minutes earlier than calculated"


def test_summary_uses_prayer_labels():
    adjustments = AdjustmentStore()
    adjustments.set_adjustment(PrayerName.MAGHRIB, 3)
    summary = adjustments.summary()
    assert summary["Maghrib"] == "+3 min"
    assert summary["Fajr"] == "No adjustment"
    assert "المغرب" in adjustments.summary("ar")
