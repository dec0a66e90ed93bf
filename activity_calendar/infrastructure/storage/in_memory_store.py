"""
In-memory key-value store.

Simple store for tests and single-process use. Values are deep-copied
on the way in and out so callers never share mutable state with the
store.
"""

import copy
from typing import Any, Dict, Iterable, Optional

import structlog

logger = structlog.get_logger(__name__)


class InMemoryKeyValueStore:
    """In-memory implementation of IKeyValueStore.

    TTL hints are ignored: expiry is enforced by the monthly cache.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        """Initialize store.

        Args:
            initial: Optional pre-populated contents
        """
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}
        logger.debug("InMemoryKeyValueStore initialized", size=len(self._data))

    async def get(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        return {key: copy.deepcopy(self._data[key]) for key in keys if key in self._data}

    async def set(self, key: str, value: Any, ttl_hint_ms: Optional[int] = None) -> bool:
        self._data[key] = copy.deepcopy(value)
        return True

    async def remove(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    async def remove_many(self, keys: Iterable[str]) -> int:
        removed = [key for key in dict.fromkeys(keys) if key in self._data]
        for key in removed:
            del self._data[key]
        return len(removed)

    async def list_keys(self) -> list[str]:
        return list(self._data.keys())

    async def clear(self) -> bool:
        self._data.clear()
        logger.debug("Store cleared")
        return True

    def size(self) -> int:
        """Number of stored keys."""
        return len(self._data)
