"""
COROS training hub API client.

Fetches activity lists over HTTP with retries. Implements IActivitySource.
"""

import asyncio
import calendar
from datetime import date
from typing import Any, Optional

import aiohttp
import structlog

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.shared.errors import (
    ApiError,
    AuthenticationError,
    ValidationError,
)
from activity_calendar.infrastructure.coros.mapper import CorosMapper

logger = structlog.get_logger(__name__)


def format_api_day(day: date) -> str:
    """YYYYMMDD as expected by startDay/endDay."""
    return day.strftime("%Y%m%d")


class CorosApiClient:
    """COROS activity query client."""

    BASE_URL = "https://teamapi.coros.com"
    ACTIVITIES_PATH = "/activity/query"

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: str = BASE_URL,
        timeout_seconds: float = 5,
        max_retries: int = 3,
        page_size: int = 100,
        retry_delay_seconds: float = 1.0,
    ) -> None:
        """Initialize API client.

        Args:
            access_token: COROS access token (None means not logged in)
            base_url: API root
            timeout_seconds: Request timeout
            max_retries: Max attempts on timeouts and transport errors
            page_size: Activities requested per call
            retry_delay_seconds: Base of the exponential backoff
        """
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(1, max_retries)
        self.page_size = page_size
        self.retry_delay_seconds = retry_delay_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "CorosApiClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers={"accept": "application/json"})
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"accept": "application/json"})
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def set_access_token(self, access_token: Optional[str]) -> None:
        self.access_token = access_token

    async def fetch_activities(self, year: int, month: int) -> list[Activity]:
        """Fetch all activities of a 0-based month.

        Args:
            year: Year
            month: Month, 0-based

        Returns:
            Decoded activities; malformed records are skipped

        Raises:
            ValidationError: If the month is out of range
            AuthenticationError: If no token is set or the API rejects it
            ApiError: On timeouts, transport errors, error statuses or
                undecodable payloads
        """
        if not 0 <= month <= 11:
            raise ValidationError(f"Month must be in 0-11, got {month}")

        last_day = calendar.monthrange(year, month + 1)[1]
        start = date(year, month + 1, 1)
        end = date(year, month + 1, last_day)

        logger.info("Fetching COROS activities", year=year, month=month + 1)
        return await self.fetch_activities_between(start, end)

    async def fetch_activities_between(self, start: date, end: date) -> list[Activity]:
        """Fetch activities with start dates in [start, end]."""
        if not self.access_token:
            raise AuthenticationError(
                "Not authenticated with COROS. Please log in to training.coros.com first."
            )

        params = {
            "size": str(self.page_size),
            "pageNumber": "1",
            "modeList": "",
            "startDay": format_api_day(start),
            "endDay": format_api_day(end),
        }
        payload = await self._get_json(f"{self.base_url}{self.ACTIVITIES_PATH}", params)
        activities = CorosMapper.parse_activities(payload)

        logger.debug(
            "COROS activities decoded",
            start=params["startDay"],
            end=params["endDay"],
            count=len(activities),
        )
        return activities

    async def _get_json(self, url: str, params: dict[str, str]) -> Any:
        headers = {"accesstoken": self.access_token or ""}
        session = self._get_session()

        for attempt in range(self.max_retries):
            try:
                async with session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    if response.status in (401, 403):
                        raise AuthenticationError(
                            f"COROS rejected the access token (status {response.status})"
                        )

                    if response.status >= 400:
                        raise ApiError(
                            f"COROS API error: {response.status}",
                            status_code=response.status,
                        )

                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise ApiError(
                            f"COROS API returned invalid JSON: {e}",
                            status_code=response.status,
                        ) from e

            except asyncio.TimeoutError as e:
                if attempt == self.max_retries - 1:
                    raise ApiError("COROS API timeout") from e

                wait = self.retry_delay_seconds * 2**attempt
                logger.warning(
                    f"Timeout, retrying in {wait}s",
                    attempt=attempt + 1,
                )
                await asyncio.sleep(wait)

            except aiohttp.ClientError as e:
                if attempt == self.max_retries - 1:
                    raise ApiError(f"COROS API client error: {e}") from e

                wait = self.retry_delay_seconds * 2**attempt
                logger.warning(
                    f"Request failed, retrying in {wait}s",
                    attempt=attempt + 1,
                    error=str(e),
                )
                await asyncio.sleep(wait)

        raise ApiError("COROS API request failed")
