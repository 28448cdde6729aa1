"""
Pool source module for the gacha simulator.

Fetches the list of drawable items from the remote endpoint (or from a local
JSON file) and normalizes it. Any failure is logged and replaced by a small
built-in pool, so that the engine keeps working offline.
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import aiohttp
from catchery import log_warning
from pydantic import BaseModel, Field

from gachasim.core.constants import DEFAULT_POOL_TIMEOUT, DEFAULT_POOL_URL, Rarity
from gachasim.core.logging import log_info
from gachasim.pool.models import PoolItem, normalize_pool, sort_pool

FALLBACK_POOL: tuple[PoolItem, ...] = (
    PoolItem(name="Smoke", rarity=Rarity.COMMON, kind="Elemental", price=100000),
    PoolItem(name="Spring", rarity=Rarity.UNCOMMON, kind="Natural", price=60000),
    PoolItem(name="Light", rarity=Rarity.RARE, kind="Elemental", price=650000),
    PoolItem(name="Buddha", rarity=Rarity.LEGENDARY, kind="Beast", price=1200000),
    PoolItem(name="Dough", rarity=Rarity.MYTHICAL, kind="Elemental", price=2800000),
    PoolItem(name="Dragon", rarity=Rarity.MYTHICAL, kind="Beast", price=15000000),
)


class PoolSnapshot(BaseModel):
    """
    Result of loading the pool.

    Attributes:
        items (list[PoolItem]): The pool, sorted by tier then name.
        is_fallback (bool): True when the built-in pool replaced the real one.
        error (str | None): Description of the failure that caused the fallback.

    """

    items: list[PoolItem] = Field(default_factory=list)
    is_fallback: bool = False
    error: str | None = None


def fallback_snapshot(error: str) -> PoolSnapshot:
    """Builds the degraded snapshot holding the built-in pool."""
    return PoolSnapshot(
        items=sort_pool(list(FALLBACK_POOL)),
        is_fallback=True,
        error=error,
    )


def _ensure_list(payload: Any, origin: str) -> list[Any]:
    if not isinstance(payload, list):
        raise ValueError(f"Expected list from {origin}, got {type(payload).__name__}")
    return payload


def load_pool_file(path: Path) -> list[PoolItem]:
    """
    Loads and normalizes a pool from a local JSON file.

    Args:
        path (Path): The JSON file holding a list of items.

    Returns:
        list[PoolItem]: The normalized pool.

    Raises:
        ValueError: If the file is missing, unreadable or not a JSON list.

    """
    try:
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if not path.is_file():
            raise ValueError(f"Not a file: {path}")
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return normalize_pool(_ensure_list(data, str(path)))
    except (json.JSONDecodeError, OSError, ValueError) as e:
        raise ValueError(f"File {path} raised an error: {e}") from e


class PoolSource:
    """
    Supplies the pool of drawable items.

    Attributes:
        url (str): Remote endpoint returning a JSON list of items.
        timeout (float): Total request timeout, in seconds.
        pool_file (Path | None): Local file used instead of the endpoint.

    """

    def __init__(
        self,
        url: str = DEFAULT_POOL_URL,
        timeout: float = DEFAULT_POOL_TIMEOUT,
        pool_file: Path | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize the PoolSource.

        Args:
            url (str): Remote endpoint returning a JSON list of items.
            timeout (float): Total request timeout, in seconds.
            pool_file (Path | None): Local file used instead of the endpoint.
            session (aiohttp.ClientSession | None): Shared HTTP session; a
                short-lived one is opened per fetch when omitted.

        """
        self.url = url
        self.timeout = timeout
        self.pool_file = pool_file
        self._session = session

    async def fetch(self) -> PoolSnapshot:
        """
        Loads the pool, falling back to the built-in one on any failure.

        Returns:
            PoolSnapshot: The loaded pool and whether it is the fallback.

        """
        if self.pool_file is not None:
            try:
                items = load_pool_file(self.pool_file)
            except ValueError as e:
                log_warning(
                    "Failed to load pool file; using fallback pool",
                    {"path": str(self.pool_file), "error": str(e)},
                )
                return fallback_snapshot(str(e))
            log_info("Loaded pool file", {"path": str(self.pool_file), "items": len(items)})
            return PoolSnapshot(items=items)

        try:
            payload = await self._fetch_payload()
            items = normalize_pool(_ensure_list(payload, self.url))
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            error = str(e) or type(e).__name__
            log_warning(
                "Failed to fetch pool; using fallback pool",
                {"url": self.url, "error": error},
            )
            return fallback_snapshot(error)
        if not items:
            log_warning("Pool source returned no usable items", {"url": self.url})
        log_info("Fetched pool", {"url": self.url, "items": len(items)})
        return PoolSnapshot(items=items)

    async def _fetch_payload(self) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        if self._session is not None:
            return await self._get_json(self._session, timeout)
        async with aiohttp.ClientSession() as session:
            return await self._get_json(session, timeout)

    async def _get_json(
        self, session: aiohttp.ClientSession, timeout: aiohttp.ClientTimeout
    ) -> Any:
        async with session.get(self.url, timeout=timeout) as resp:
            if resp.status != 200:
                raise ValueError(f"Pool request failed with status {resp.status}")
            return await resp.json(content_type=None)
