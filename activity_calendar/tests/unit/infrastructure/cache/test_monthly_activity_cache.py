"""
Unit tests for the monthly activity cache.

The frozen clock puts "now" in June 2024, so May 2024 (year 2024,
month 4) is a past, cacheable month.
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.cache.models import (
    CachedActivity,
    CacheCorrupt,
    CacheEntry,
    CacheHit,
    CacheMiss,
    CacheSettings,
    MissReason,
    MonthKey,
)
from activity_calendar.domain.shared.clock import FixedClock, epoch_millis
from activity_calendar.domain.shared.errors import ApiError, AuthenticationError, ValidationError
from activity_calendar.infrastructure.cache.monthly_activity_cache import MonthlyActivityCache
from activity_calendar.infrastructure.storage.in_memory_store import InMemoryKeyValueStore
from activity_calendar.infrastructure.storage.json_file_store import JsonFileKeyValueStore
from activity_calendar.tests.conftest import ActivityFactory

TTL_MS = 30 * 24 * 60 * 60 * 1000
MAY_KEY = "coros_activities_2024-05"


def _record(month_key: str, activities: list[Activity], timestamp: int) -> dict[str, Any]:
    return CacheEntry(
        month_key=month_key,
        activities=[CachedActivity.from_activity(a) for a in activities],
        timestamp=timestamp,
    ).to_record()


class TestCurrentMonth:
    """Test the always-fresh rule for the current month."""

    async def test_current_month_always_fetched(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
    ) -> None:
        """Test two loads of the current month call the remote source twice."""
        first = await monthly_cache.load_month(2024, 5)
        second = await monthly_cache.load_month(2024, 5)

        assert mock_source.fetch_activities.await_count == 2
        assert not first.was_cached
        assert not second.was_cached
        assert await store.list_keys() == []

    async def test_current_month_ignores_stored_entry(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
        make_activity: ActivityFactory,
    ) -> None:
        """Test a valid stored entry for the current month is not used."""
        stale = make_activity("stale", day=date(2024, 6, 1))
        await store.set("coros_activities_2024-06", _record("2024-06", [stale], epoch_millis(clock.now())))

        result = await monthly_cache.load_month(2024, 5)

        assert result.activities == []
        mock_source.fetch_activities.assert_awaited_once_with(2024, 5)


class TestPastMonth:
    """Test cache reads and writes for past months."""

    async def test_second_load_served_from_cache(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        sample_activities: list[Activity],
    ) -> None:
        """Test a past month is fetched once within the TTL."""
        mock_source.fetch_activities.return_value = sample_activities

        first = await monthly_cache.load_month(2024, 4)
        second = await monthly_cache.load_month(2024, 4)

        assert mock_source.fetch_activities.await_count == 1
        assert not first.was_cached
        assert second.was_cached
        assert second.activities == sample_activities
        assert second.month_key == MonthKey(2024, 4)

    async def test_entry_layout(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
        sample_activities: list[Activity],
    ) -> None:
        """Test stored record {activities, timestamp, monthKey, version}."""
        mock_source.fetch_activities.return_value = sample_activities

        await monthly_cache.load_month(2024, 4)

        record = await store.get(MAY_KEY)
        assert record["monthKey"] == "2024-05"
        assert record["timestamp"] == epoch_millis(clock.now())
        assert record["version"] == "1.0"
        assert len(record["activities"]) == 3

    async def test_reads_do_not_mutate(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
    ) -> None:
        """Test hits keep the timestamp and never evict, even over capacity."""
        timestamp = epoch_millis(clock.now()) - 1000
        for month in range(51):
            key = MonthKey(2019 + month // 12, month % 12)
            await store.set(f"coros_activities_{key.value}", _record(key.value, [], timestamp))
        before = await store.get("coros_activities_2019-01")

        for _ in range(3):
            result = await monthly_cache.load_month(2019, 0)
            assert result.was_cached

        assert await store.get("coros_activities_2019-01") == before
        assert len(await store.list_keys()) == 51
        mock_source.fetch_activities.assert_not_awaited()

    async def test_invalid_month_rejected(
        self, monthly_cache: MonthlyActivityCache, mock_source: AsyncMock
    ) -> None:
        """Test out-of-range month fails before any fetch."""
        with pytest.raises(ValidationError):
            await monthly_cache.load_month(2024, 12)
        mock_source.fetch_activities.assert_not_awaited()


class TestExpiry:
    """Test TTL handling."""

    async def test_expired_entry_refetched(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
        make_activity: ActivityFactory,
    ) -> None:
        """Test an entry older than 30 days triggers exactly one refetch."""
        old = make_activity("old", day=date(2024, 5, 2))
        fresh = make_activity("fresh", day=date(2024, 5, 3))
        await store.set(MAY_KEY, _record("2024-05", [old], epoch_millis(clock.now()) - TTL_MS - 1))
        mock_source.fetch_activities.return_value = [fresh]

        result = await monthly_cache.load_month(2024, 4)

        assert not result.was_cached
        assert result.activities == [fresh]
        mock_source.fetch_activities.assert_awaited_once_with(2024, 4)

        record = await store.get(MAY_KEY)
        assert record["timestamp"] == epoch_millis(clock.now())
        assert [a["id"] for a in record["activities"]] == ["fresh"]

    async def test_entry_at_ttl_still_valid(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
    ) -> None:
        """Test expiry requires age strictly greater than the TTL."""
        await store.set(MAY_KEY, _record("2024-05", [], epoch_millis(clock.now()) - TTL_MS))

        result = await monthly_cache.load_month(2024, 4)

        assert result.was_cached
        mock_source.fetch_activities.assert_not_awaited()

    async def test_expires_as_clock_advances(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        clock: FixedClock,
    ) -> None:
        """Test an entry written now expires 31 days later."""
        await monthly_cache.load_month(2023, 0)
        clock.advance(timedelta(days=31))

        result = await monthly_cache.load_month(2023, 0)

        assert not result.was_cached
        assert mock_source.fetch_activities.await_count == 2

    async def test_lookup_reports_expired(
        self,
        monthly_cache: MonthlyActivityCache,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
    ) -> None:
        """Test lookup result and deletion of the expired entry."""
        await store.set(MAY_KEY, _record("2024-05", [], 0))

        lookup = await monthly_cache.lookup(MonthKey(2024, 4))

        assert lookup == CacheMiss(MissReason.EXPIRED)
        assert await store.get(MAY_KEY) is None

    async def test_no_fallback_on_fetch_failure(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        make_activity: ActivityFactory,
    ) -> None:
        """Test fetch errors propagate instead of serving the expired entry."""
        await store.set(MAY_KEY, _record("2024-05", [make_activity()], 0))
        mock_source.fetch_activities.side_effect = ApiError("boom", status_code=500)

        with pytest.raises(ApiError):
            await monthly_cache.load_month(2024, 4)

        assert await store.get(MAY_KEY) is None


class TestCorruption:
    """Test self-healing of malformed entries."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"activities": "not-a-list", "timestamp": 1, "monthKey": "2024-05"},
            {"timestamp": 1, "monthKey": "2024-05"},
            {"activities": [{"id": "x"}], "timestamp": 1, "monthKey": "2024-05"},
            {"activities": [], "monthKey": "2024-05"},
            "garbage",
            [1, 2, 3],
        ],
    )
    async def test_corrupt_entry_replaced(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
        payload: Any,
    ) -> None:
        """Test malformed entries are deleted, refetched and rewritten."""
        await store.set(MAY_KEY, payload)

        result = await monthly_cache.load_month(2024, 4)

        assert not result.was_cached
        mock_source.fetch_activities.assert_awaited_once_with(2024, 4)
        record = await store.get(MAY_KEY)
        assert record["activities"] == []
        assert record["timestamp"] == epoch_millis(clock.now())

    async def test_lookup_reports_corrupt(
        self, monthly_cache: MonthlyActivityCache, store: InMemoryKeyValueStore
    ) -> None:
        """Test corruption is a lookup result, not an exception."""
        await store.set(MAY_KEY, {"activities": {}, "timestamp": 1})

        lookup = await monthly_cache.lookup(MonthKey(2024, 4))

        assert isinstance(lookup, CacheCorrupt)
        assert await store.get(MAY_KEY) is None

    async def test_invalid_stored_magnitude(
        self,
        monthly_cache: MonthlyActivityCache,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
    ) -> None:
        """Test a record failing value object validation counts as corrupt."""
        await store.set(
            MAY_KEY,
            {
                "monthKey": "2024-05",
                "timestamp": epoch_millis(clock.now()),
                "version": "1.0",
                "activities": [
                    {
                        "id": "x",
                        "name": "Bad date",
                        "sport_type": 1,
                        "start_time": "yesterday",
                        "duration_seconds": 10,
                        "distance_meters": 10,
                        "calories": 1,
                    }
                ],
            },
        )

        assert isinstance(await monthly_cache.lookup(MonthKey(2024, 4)), CacheCorrupt)


class TestCapacity:
    """Test eviction under the capacity bound."""

    async def test_51st_month_evicts_oldest(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
    ) -> None:
        """Test inserting a 51st month key evicts the chronologically oldest."""
        months = [(2019 + i // 12, i % 12) for i in range(51)]
        for year, month in months:
            await monthly_cache.load_month(year, month)

        cached = await monthly_cache.cached_months()

        assert len(cached) == 50
        assert MonthKey(2019, 0) not in cached
        assert cached[0] == MonthKey(2019, 1)
        assert cached[-1] == MonthKey(2023, 2)

    async def test_eviction_by_month_not_insertion_order(
        self,
        store: InMemoryKeyValueStore,
        mock_source: AsyncMock,
        clock: FixedClock,
    ) -> None:
        """Test the oldest month goes first even if it was written last."""
        cache = MonthlyActivityCache(
            store, mock_source, clock, CacheSettings(max_entries=2)
        )
        await cache.load_month(2023, 5)
        await cache.load_month(2023, 6)
        await cache.load_month(2022, 0)

        assert await cache.cached_months() == [MonthKey(2023, 5), MonthKey(2023, 6)]

    async def test_expired_swept_before_capacity(
        self,
        store: InMemoryKeyValueStore,
        mock_source: AsyncMock,
        clock: FixedClock,
    ) -> None:
        """Test write-time cleanup drops expired entries before evicting valid ones."""
        cache = MonthlyActivityCache(
            store, mock_source, clock, CacheSettings(max_entries=2)
        )
        await store.set("coros_activities_2020-01", _record("2020-01", [], epoch_millis(clock.now())))
        await store.set("coros_activities_2023-01", _record("2023-01", [], 0))

        await cache.load_month(2024, 0)

        assert await cache.cached_months() == [MonthKey(2020, 0), MonthKey(2024, 0)]

    async def test_foreign_keys_untouched(
        self,
        store: InMemoryKeyValueStore,
        mock_source: AsyncMock,
        clock: FixedClock,
    ) -> None:
        """Test keys outside the namespace are never counted or evicted."""
        cache = MonthlyActivityCache(
            store, mock_source, clock, CacheSettings(max_entries=1)
        )
        await store.set("user_preferences", {"theme": "dark"})

        await cache.load_month(2024, 0)
        await cache.load_month(2024, 1)

        assert sorted(await store.list_keys()) == [
            "coros_activities_2024-02",
            "user_preferences",
        ]

    async def test_rejected_write_skips_cleanup(
        self,
        mock_source: AsyncMock,
        clock: FixedClock,
        sample_activities: list[Activity],
    ) -> None:
        """Test a refused write still returns the fetched activities."""
        store = AsyncMock()
        store.get.return_value = None
        store.set.return_value = False
        mock_source.fetch_activities.return_value = sample_activities
        cache = MonthlyActivityCache(store, mock_source, clock)

        result = await cache.load_month(2024, 4)

        assert result.activities == sample_activities
        store.list_keys.assert_not_awaited()


class TestMaintenance:
    """Test invalidate, clear, stats and purge."""

    async def test_invalidate(
        self, monthly_cache: MonthlyActivityCache, mock_source: AsyncMock
    ) -> None:
        """Test invalidation forces a refetch."""
        await monthly_cache.load_month(2024, 4)
        assert await monthly_cache.invalidate(2024, 4)

        result = await monthly_cache.load_month(2024, 4)

        assert not result.was_cached
        assert mock_source.fetch_activities.await_count == 2

    async def test_clear_only_namespace(
        self, monthly_cache: MonthlyActivityCache, store: InMemoryKeyValueStore
    ) -> None:
        """Test clear removes month entries only."""
        await store.set("other", 1)
        await monthly_cache.load_month(2024, 3)
        await monthly_cache.load_month(2024, 4)

        assert await monthly_cache.clear() == 2
        assert await store.list_keys() == ["other"]

    async def test_stats(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        store: InMemoryKeyValueStore,
        sample_activities: list[Activity],
    ) -> None:
        """Test month and activity counts, skipping corrupt entries."""
        mock_source.fetch_activities.return_value = sample_activities
        await monthly_cache.load_month(2024, 4)
        mock_source.fetch_activities.return_value = sample_activities[:1]
        await monthly_cache.load_month(2024, 3)
        await store.set("coros_activities_2024-01", "garbage")

        stats = await monthly_cache.stats()

        assert stats.total_months == 2
        assert stats.total_activities == 4
        assert stats.months == {"2024-04": 1, "2024-05": 3}
        assert await store.get("coros_activities_2024-01") == "garbage"

    async def test_purge_expired(
        self,
        monthly_cache: MonthlyActivityCache,
        store: InMemoryKeyValueStore,
        clock: FixedClock,
    ) -> None:
        """Test purge removes expired and corrupt entries only."""
        now_ms = epoch_millis(clock.now())
        await store.set("coros_activities_2024-01", _record("2024-01", [], now_ms))
        await store.set("coros_activities_2024-02", _record("2024-02", [], now_ms - TTL_MS - 1))
        await store.set("coros_activities_2024-03", {"activities": None})

        assert await monthly_cache.purge_expired() == 2
        assert await monthly_cache.cached_months() == [MonthKey(2024, 0)]

    async def test_authentication_error_propagates(
        self, monthly_cache: MonthlyActivityCache, mock_source: AsyncMock
    ) -> None:
        """Test not-logged-in failures reach the caller."""
        mock_source.fetch_activities.side_effect = AuthenticationError("log in")

        with pytest.raises(AuthenticationError):
            await monthly_cache.load_month(2024, 4)

    async def test_lookup_hit(
        self,
        monthly_cache: MonthlyActivityCache,
        mock_source: AsyncMock,
        sample_activities: list[Activity],
    ) -> None:
        """Test lookup returns parsed activities on a hit."""
        mock_source.fetch_activities.return_value = sample_activities
        await monthly_cache.load_month(2024, 4)

        lookup = await monthly_cache.lookup(MonthKey(2024, 4))

        assert isinstance(lookup, CacheHit)
        assert lookup.activities == sample_activities
        assert lookup.entry.month_key == "2024-05"


class CountingStore(InMemoryKeyValueStore):
    """In-memory store recording single-key reads."""

    def __init__(self) -> None:
        super().__init__()
        self.single_reads = 0

    async def get(self, key: str) -> Any:
        self.single_reads += 1
        return await super().get(key)


class TestFileBackedCache:
    """Test the cache over a JSON file store."""

    async def test_truncated_file_heals_with_one_fetch(
        self,
        tmp_path: Path,
        mock_source: AsyncMock,
        clock: FixedClock,
        make_activity: ActivityFactory,
    ) -> None:
        """Test an unparsable file is replaced by a fresh entry."""
        path = tmp_path / "cache.json"
        path.write_text('{"coros_activities_2024-03": {"activit', encoding="utf-8")
        march = make_activity("m1", day=date(2024, 3, 4))
        mock_source.fetch_activities.return_value = [march]
        cache = MonthlyActivityCache(JsonFileKeyValueStore(path), mock_source, clock)

        first = await cache.load_month(2024, 2)
        second = await cache.load_month(2024, 2)

        assert first.activities == [march]
        assert not first.was_cached
        assert second.was_cached
        assert [a.id.value for a in second.activities] == ["m1"]
        mock_source.fetch_activities.assert_awaited_once_with(2024, 2)

    async def test_unwritable_store_keeps_fetched_activities(
        self,
        tmp_path: Path,
        mock_source: AsyncMock,
        clock: FixedClock,
        make_activity: ActivityFactory,
    ) -> None:
        """Test a failed write is logged and the fetch result still returned."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        march = make_activity("m1", day=date(2024, 3, 4))
        mock_source.fetch_activities.return_value = [march]
        cache = MonthlyActivityCache(
            JsonFileKeyValueStore(blocker / "cache.json"), mock_source, clock
        )

        result = await cache.load_month(2024, 2)

        assert result.activities == [march]
        assert not result.was_cached
        assert await cache.store_month(MonthKey(2024, 2), [march]) is None


class TestBulkMaintenance:
    """Test maintenance reads entries in bulk."""

    async def test_write_cleanup_reads_in_bulk(
        self,
        mock_source: AsyncMock,
        clock: FixedClock,
    ) -> None:
        """Test the sweep after a write makes no per-month reads."""
        store = CountingStore()
        now_ms = epoch_millis(clock.now())
        for month in range(12):
            key = MonthKey(2022, month)
            await store.set(f"coros_activities_{key.value}", _record(key.value, [], now_ms))
        cache = MonthlyActivityCache(store, mock_source, clock)

        await cache.store_month(MonthKey(2023, 0), [])
        stats = await cache.stats()

        assert store.single_reads == 0
        assert stats.total_months == 13
