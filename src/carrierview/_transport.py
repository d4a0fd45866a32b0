"""Text resource retrieval over HTTP or from the local filesystem."""

from __future__ import annotations

import asyncio
import codecs
import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlsplit

import aiohttp

from carrierview.exceptions import ResourceFetchError

_logger = logging.getLogger(__name__)

_DEFAULT_CHUNK_SIZE = 64 * 1024


class ResourceFetcher(Protocol):
    """Structural fetcher interface used by the CSV loader.

    Tests can pass any object with a matching ``fetch_text`` coroutine.
    """

    async def fetch_text(self, source: str) -> str:
        ...


def is_http_source(source: str) -> bool:
    return urlsplit(source).scheme.lower() in {"http", "https"}


def _local_path(source: str) -> Path:
    parts = urlsplit(source)
    if parts.scheme.lower() == "file":
        return Path(unquote(parts.path))
    return Path(source).expanduser()


class TextResourceTransport:
    """Retrieve a text resource and decode it as UTF-8.

    HTTP bodies are drained chunk by chunk through an incremental decoder,
    so multi-byte characters split across chunks decode correctly.
    Invalid byte sequences are replaced rather than rejected.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession | None = None,
        *,
        timeout: float | None = None,
        chunk_size: int = _DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._http = http_session
        self._timeout = timeout
        self._chunk_size = chunk_size

    async def fetch_text(self, source: str) -> str:
        if is_http_source(source):
            return await self._fetch_http(source)
        return await self._read_file(source)

    async def _fetch_http(self, source: str) -> str:
        if self._http is None:
            raise ResourceFetchError(f"No HTTP session available to fetch {source}", source=source)

        _logger.debug("GET %s", source)
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        parts: list[str] = []
        try:
            async with self._http.get(source, timeout=aiohttp.ClientTimeout(total=self._timeout)) as resp:
                if not 200 <= resp.status < 300:
                    text = await resp.text(errors="replace")
                    raise ResourceFetchError(
                        f"HTTP {resp.status} from {source}: {text[:200]}",
                        source=source,
                        status_code=resp.status,
                    )
                chunks = 0
                async for chunk in resp.content.iter_chunked(self._chunk_size):
                    parts.append(decoder.decode(chunk))
                    chunks += 1
                parts.append(decoder.decode(b"", final=True))
        except ResourceFetchError:
            raise
        except TimeoutError as exc:
            raise ResourceFetchError(f"Request to {source} timed out after {self._timeout}s", source=source) from exc
        except aiohttp.ClientError as exc:
            raise ResourceFetchError(f"Request to {source} failed: {exc}", source=source) from exc

        text = "".join(parts)
        _logger.debug("Fetched %d characters in %d chunks from %s", len(text), chunks, source)
        return text

    async def _read_file(self, source: str) -> str:
        path = _local_path(source)
        _logger.debug("Reading %s", path)
        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ResourceFetchError(f"Cannot read {path}: {exc}", source=source) from exc
        return raw.decode("utf-8", errors="replace")
