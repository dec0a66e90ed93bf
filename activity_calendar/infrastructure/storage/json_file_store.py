"""
JSON file key-value store.

Persists the whole store as one JSON document. Writes go to a temporary
file first and are then renamed over the target. A document that cannot
be parsed is moved aside to ``<name>.corrupt`` and the store continues
empty.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import structlog

from activity_calendar.domain.shared.errors import CacheCorruptionError, CacheError

logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore:
    """File-backed implementation of IKeyValueStore.

    Operations are serialized with an asyncio lock; file I/O runs in a
    worker thread.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """Initialize store.

        Args:
            path: JSON file location (created on first write)
        """
        self.path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def quarantine_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".corrupt")

    def _read(self) -> Dict[str, Any]:
        """Parse the document.

        Raises:
            CacheCorruptionError: If the file is not a JSON object
            CacheError: If the file cannot be read
        """
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as e:
            raise CacheCorruptionError(f"Store file {self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise CacheError(f"Cannot read store file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CacheCorruptionError(f"Store file {self.path} does not contain a JSON object")
        return data

    def _load(self) -> Dict[str, Any]:
        """Read the document, quarantining it when corrupt."""
        try:
            return self._read()
        except CacheCorruptionError as e:
            logger.warning(
                "Corrupt store file moved aside",
                path=str(self.path),
                quarantine=str(self.quarantine_path),
                error=str(e),
            )
            try:
                os.replace(self.path, self.quarantine_path)
            except OSError as move_error:
                raise CacheError(
                    f"Cannot move corrupt store file {self.path}: {move_error}"
                ) from move_error
            return {}

    def _write(self, data: Dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise CacheError(f"Cannot write store file {self.path}: {e}") from e

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Read several keys with a single file read."""
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        return {key: data[key] for key in keys if key in data}

    async def set(self, key: str, value: Any, ttl_hint_ms: Optional[int] = None) -> bool:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[key] = value
            await asyncio.to_thread(self._write, data)
        return True

    async def remove(self, key: str) -> bool:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if key in data:
                del data[key]
                await asyncio.to_thread(self._write, data)
        return True

    async def remove_many(self, keys: Iterable[str]) -> int:
        """Delete several keys with a single rewrite. Returns the number removed."""
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            removed = [key for key in dict.fromkeys(keys) if key in data]
            for key in removed:
                del data[key]
            if removed:
                await asyncio.to_thread(self._write, data)
        return len(removed)

    async def list_keys(self) -> list[str]:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        return list(data.keys())

    async def clear(self) -> bool:
        async with self._lock:
            await asyncio.to_thread(self._write, {})
        logger.info("Store file cleared", path=str(self.path))
        return True
