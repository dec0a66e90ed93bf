"""
Composition root.

Builds a fully wired ActivityCalendarService from settings, with every
collaborator overridable for tests.
"""

from typing import Any, Optional

import structlog

from activity_calendar.application.calculate_statistics import CalculateStatisticsUseCase
from activity_calendar.application.calendar_service import ActivityCalendarService
from activity_calendar.domain.cache.ports import IActivitySource, IKeyValueStore
from activity_calendar.domain.grid.grid_builder import CalendarGridBuilder
from activity_calendar.domain.shared.clock import Clock, SystemClock
from activity_calendar.infrastructure.cache.monthly_activity_cache import MonthlyActivityCache
from activity_calendar.infrastructure.config import AppSettings, load_settings
from activity_calendar.infrastructure.coros.api_client import CorosApiClient
from activity_calendar.infrastructure.logging import configure_logging
from activity_calendar.infrastructure.storage.in_memory_store import InMemoryKeyValueStore
from activity_calendar.infrastructure.storage.json_file_store import JsonFileKeyValueStore

logger = structlog.get_logger(__name__)


def create_store(settings: AppSettings) -> IKeyValueStore:
    """JSON file store when ACTIVITY_CACHE_FILE is set, in-memory otherwise."""
    if settings.cache_file is not None:
        return JsonFileKeyValueStore(settings.cache_file)
    return InMemoryKeyValueStore()


def create_source(settings: AppSettings) -> CorosApiClient:
    api = settings.api
    return CorosApiClient(
        access_token=api.access_token,
        base_url=api.base_url,
        timeout_seconds=api.timeout_seconds,
        max_retries=api.max_retries,
        page_size=api.page_size,
    )


def create_activity_calendar(
    settings: Optional[AppSettings] = None,
    store: Optional[IKeyValueStore] = None,
    source: Optional[IActivitySource] = None,
    clock: Optional[Clock] = None,
    configure_logs: bool = False,
) -> ActivityCalendarService:
    """
    Assemble the activity calendar.

    Args:
        settings: Application settings (default: read from environment)
        store: Key-value store (default: from settings)
        source: Remote activity source (default: COROS API client)
        clock: Current time provider (default: system clock)
        configure_logs: Also configure structlog from settings

    Returns:
        Wired service; call close() (or use `async with`) to release the
        HTTP session of the default source

    Example:
        >>> async with create_activity_calendar(configure_logs=True) as service:
        ...     view = await service.display_calendar()
    """
    settings = settings or load_settings()
    if configure_logs:
        configure_logging(settings.log_level, settings.log_json)

    clock = clock or SystemClock()
    resources: list[Any] = []
    if source is None:
        source = create_source(settings)
        resources.append(source)

    cache = MonthlyActivityCache(
        store=store or create_store(settings),
        source=source,
        clock=clock,
        settings=settings.cache,
    )

    logger.debug(
        "Activity calendar assembled",
        store=type(cache.store).__name__,
        source=type(source).__name__,
        max_entries=settings.cache.max_entries,
    )

    return ActivityCalendarService(
        cache=cache,
        grid_builder=CalendarGridBuilder(clock),
        statistics=CalculateStatisticsUseCase(),
        clock=clock,
        resources=resources,
    )
