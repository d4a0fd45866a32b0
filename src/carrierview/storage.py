"""Key-value stores backing saved snapshots."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Protocol

from carrierview.exceptions import StorageError

_logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Structural interface of a persistent string key-value store.

    ``get`` returns ``None`` for a missing key; ``delete`` of a missing key
    is not an error.
    """

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class MemoryStorage:
    """Process-local store; contents are lost when the object goes away."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class FileStorage:
    """Store keys in a single JSON object on disk.

    Every write replaces the file atomically (write to a sibling temp
    file, then ``os.replace``), so a crash never leaves a half-written
    store behind.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageError(f"Cannot read {self._path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageError(f"{self._path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not contain a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageError(f"Cannot write {self._path}: {exc}") from exc

    def _set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _delete(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        _logger.debug("Writing key %s to %s (%d chars)", key, self._path, len(value))
        await asyncio.to_thread(self._set, key, value)

    async def delete(self, key: str) -> None:
        _logger.debug("Deleting key %s from %s", key, self._path)
        await asyncio.to_thread(self._delete, key)
