"""
Ports (Interfaces) for the monthly activity cache.

Defines the key-value store and remote activity source collaborators.
Implementations live in the infrastructure layer.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from activity_calendar.domain.activity.entities import Activity


@runtime_checkable
class IKeyValueStore(Protocol):
    """
    Port for the key-value store backing the cache.

    Must store structured records (dicts, lists), not only strings.
    """

    async def get(self, key: str) -> Optional[Any]:
        """
        Read a value.

        Returns:
            Stored value, or None if the key is absent
        """
        ...

    async def set(self, key: str, value: Any, ttl_hint_ms: Optional[int] = None) -> bool:
        """
        Write a value.

        Args:
            key: Store key
            value: JSON-compatible value
            ttl_hint_ms: Advisory lifetime; stores may ignore it

        Returns:
            True on success
        """
        ...

    async def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """
        Read several keys at once.

        Returns:
            Mapping of the keys that are present to their values
        """
        ...

    async def remove(self, key: str) -> bool:
        """Delete a key. Returns True on success (also when absent)."""
        ...

    async def remove_many(self, keys: Iterable[str]) -> int:
        """Delete several keys at once. Returns the number actually removed."""
        ...

    async def list_keys(self) -> list[str]:
        """All keys currently in the store."""
        ...

    async def clear(self) -> bool:
        """Delete every key."""
        ...


@runtime_checkable
class IActivitySource(Protocol):
    """
    Port for the remote activity source (COROS API).
    """

    async def fetch_activities(self, year: int, month: int) -> list[Activity]:
        """
        Fetch all activities of a 0-based month.

        Raises:
            AuthenticationError: If the user is not logged in
            ApiError: On transport or non-2xx errors
        """
        ...
