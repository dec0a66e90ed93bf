"""
Monthly activity cache.

Decides per calendar month whether activities are fetched from the
remote source or served from the key-value store, with a TTL and a
bounded number of month entries.

Policy:
1. The current month always goes to the remote source and is never stored
2. Other months are served from a valid entry when one exists
3. Absent, expired or corrupt entries trigger a fetch and a fresh store
4. Every successful store sweeps expired entries, then evicts the oldest
   months beyond the capacity bound
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.cache.models import (
    CacheCorrupt,
    CachedActivity,
    CacheEntry,
    CacheHit,
    CacheLookup,
    CacheMiss,
    CacheSettings,
    MissReason,
    MonthKey,
)
from activity_calendar.domain.cache.ports import IActivitySource, IKeyValueStore
from activity_calendar.domain.shared.clock import Clock, SystemClock, epoch_millis
from activity_calendar.domain.shared.errors import CacheError, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MonthlyLoadResult:
    """Activities of one month and where they came from."""

    month_key: MonthKey
    activities: list[Activity]
    was_cached: bool


@dataclass(frozen=True)
class CacheStats:
    """Summary of the cache namespace."""

    total_months: int = 0
    total_activities: int = 0
    months: dict[str, int] = field(default_factory=dict)


class MonthlyActivityCache:
    """Freshness gate between the remote source and the key-value store."""

    def __init__(
        self,
        store: IKeyValueStore,
        source: IActivitySource,
        clock: Optional[Clock] = None,
        settings: Optional[CacheSettings] = None,
    ) -> None:
        """Initialize cache.

        Args:
            store: Key-value store holding month entries
            source: Remote activity source
            clock: Current time provider (default: system clock)
            settings: Prefix, TTL, capacity and version (default: 30 days, 50 months)
        """
        self.store = store
        self.source = source
        self.clock = clock or SystemClock()
        self.settings = settings or CacheSettings()

    def _now_ms(self) -> int:
        return epoch_millis(self.clock.now())

    def is_current_month(self, month_key: MonthKey) -> bool:
        return month_key == MonthKey.from_datetime(self.clock.now())

    async def load_month(self, year: int, month: int) -> MonthlyLoadResult:
        """Load the activities of a 0-based month.

        Args:
            year: Year
            month: Month, 0-based

        Returns:
            Activities and whether they were served from the store

        Raises:
            ValidationError: If the month is out of range
            AuthenticationError: If the remote source is not logged in
            ApiError: If the remote fetch fails (no fallback to stale entries)
        """
        month_key = MonthKey(year, month)

        if self.is_current_month(month_key):
            logger.info("Current month, fetching fresh", month_key=month_key.value)
            activities = await self.source.fetch_activities(year, month)
            return MonthlyLoadResult(month_key, activities, was_cached=False)

        lookup = await self.lookup(month_key)
        if isinstance(lookup, CacheHit):
            logger.info(
                "Cache hit",
                month_key=month_key.value,
                activities=len(lookup.activities),
            )
            return MonthlyLoadResult(month_key, lookup.activities, was_cached=True)

        if isinstance(lookup, CacheCorrupt):
            logger.warning(
                "Corrupt cache entry discarded",
                month_key=month_key.value,
                reason=lookup.reason,
            )
        else:
            logger.info("Cache miss", month_key=month_key.value, reason=lookup.reason.value)

        activities = await self.source.fetch_activities(year, month)
        await self.store_month(month_key, activities)
        return MonthlyLoadResult(month_key, activities, was_cached=False)

    async def lookup(self, month_key: MonthKey) -> CacheLookup:
        """Classify the stored entry of a month.

        Expired and corrupt entries are deleted. Valid entries are left
        untouched.
        """
        key = self.settings.storage_key(month_key)
        raw = await self.store.get(key)

        if raw is None:
            return CacheMiss(MissReason.ABSENT)

        parsed = self._parse_entry(raw)
        if isinstance(parsed, CacheCorrupt):
            await self.store.remove(key)
            return parsed

        entry, activities = parsed
        if entry.is_expired(self._now_ms(), self.settings.ttl_ms):
            logger.debug("Cache expired", month_key=month_key.value, age_ms=entry.age_ms(self._now_ms()))
            await self.store.remove(key)
            return CacheMiss(MissReason.EXPIRED)

        return CacheHit(entry, activities)

    def _parse_entry(self, raw: Any) -> tuple[CacheEntry, list[Activity]] | CacheCorrupt:
        if not isinstance(raw, dict):
            return CacheCorrupt(f"entry is {type(raw).__name__}, expected object")
        if not isinstance(raw.get("activities"), list):
            return CacheCorrupt("activities field is not an array")
        try:
            entry = CacheEntry.model_validate(raw)
            return entry, entry.to_activities()
        except (PydanticValidationError, ValidationError) as e:
            return CacheCorrupt(str(e))

    async def store_month(self, month_key: MonthKey, activities: list[Activity]) -> Optional[CacheEntry]:
        """Write a month entry stamped now, then run cleanup.

        A refused or failed write is logged and leaves the store as it was.

        Returns:
            Stored entry, or None if the write did not happen
        """
        entry = CacheEntry(
            month_key=month_key.value,
            activities=[CachedActivity.from_activity(a) for a in activities],
            timestamp=self._now_ms(),
            version=self.settings.version,
        )
        try:
            stored = await self.store.set(
                self.settings.storage_key(month_key),
                entry.to_record(),
                ttl_hint_ms=self.settings.ttl_ms,
            )
        except CacheError as e:
            logger.warning("Cache write failed", month_key=month_key.value, error=str(e))
            return None
        if not stored:
            logger.warning("Store rejected cache entry", month_key=month_key.value)
            return None

        logger.info("Cached month", month_key=month_key.value, activities=len(activities))
        await self.cleanup()
        return entry

    async def cached_months(self) -> list[MonthKey]:
        """Month keys present in the namespace, oldest first."""
        keys = await self.store.list_keys()
        months = [self.settings.month_key_of(key) for key in keys]
        return sorted(m for m in months if m is not None)

    async def _read_entries(self) -> dict[MonthKey, Any]:
        """Raw records of every cached month, in one store read."""
        months = await self.cached_months()
        keys = {self.settings.storage_key(m): m for m in months}
        raw = await self.store.get_many(keys)
        return {keys[key]: value for key, value in raw.items()}

    async def purge_expired(self) -> int:
        """Delete expired and corrupt entries.

        Returns:
            Number of entries removed
        """
        now_ms = self._now_ms()
        stale = []
        for month_key, raw in (await self._read_entries()).items():
            parsed = self._parse_entry(raw)
            if isinstance(parsed, CacheCorrupt) or parsed[0].is_expired(now_ms, self.settings.ttl_ms):
                stale.append(self.settings.storage_key(month_key))

        removed = await self.store.remove_many(stale) if stale else 0
        if removed:
            logger.info("Removed expired cache entries", count=removed)
        return removed

    async def enforce_capacity(self) -> list[MonthKey]:
        """Evict the oldest months beyond max_entries.

        Returns:
            Evicted month keys
        """
        months = await self.cached_months()
        surplus = len(months) - self.settings.max_entries
        if surplus <= 0:
            return []

        evicted = months[:surplus]
        await self.store.remove_many(self.settings.storage_key(m) for m in evicted)

        logger.info(
            "Evicted cache entries",
            count=len(evicted),
            months=[m.value for m in evicted],
        )
        return evicted

    async def cleanup(self) -> None:
        await self.purge_expired()
        await self.enforce_capacity()

    async def invalidate(self, year: int, month: int) -> bool:
        """Drop the entry of one month."""
        month_key = MonthKey(year, month)
        return await self.store.remove(self.settings.storage_key(month_key))

    async def clear(self) -> int:
        """Drop every month entry of the namespace.

        Other keys in the store are left alone.

        Returns:
            Number of entries removed
        """
        months = await self.cached_months()
        removed = await self.store.remove_many(self.settings.storage_key(m) for m in months)
        logger.info("Cache cleared", count=removed)
        return removed

    async def stats(self) -> CacheStats:
        """Count months and activities without touching entries."""
        months: dict[str, int] = {}
        for month_key, raw in sorted((await self._read_entries()).items()):
            parsed = self._parse_entry(raw)
            if isinstance(parsed, CacheCorrupt):
                continue
            months[month_key.value] = len(parsed[1])

        return CacheStats(
            total_months=len(months),
            total_activities=sum(months.values()),
            months=months,
        )
