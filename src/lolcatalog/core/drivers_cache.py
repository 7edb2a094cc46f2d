"""In-memory cache of the normalized driver dataset and derived query results."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from ..config import CatalogConfig
from ..models import DriverPage, DriverSample, DriverStatistics, HvciBlocklistCheck, SearchPage
from ..utils.helpers import file_fingerprint, utc_now
from .filters import apply_filters
from .loader import parse_dataset, read_text_file
from .search import search_samples, sort_by_created
from .statistics import compute_statistics
from .ttl_cache import TTLCache

logger = logging.getLogger(__name__)

Reader = Callable[[Path], Awaitable[str]]


class SnapshotState(str, Enum):
    """Lifecycle of the dataset snapshot."""

    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    STALE = "stale"


@dataclass(frozen=True)
class DatasetSnapshot:
    """Normalized dataset as loaded at one point in time."""

    samples: list[DriverSample]
    loaded_at: datetime
    fingerprint: str
    blocklist_check: HvciBlocklistCheck | None = None


def page_bounds(page: int, limit: int) -> tuple[int, int]:
    """Slice bounds for a 1-based page, clamped so they never wrap from the end."""
    start = (page - 1) * limit
    return max(start, 0), max(start + limit, 0)


def paginate(samples: list[DriverSample], page: int, limit: int | None) -> tuple[list[DriverSample], bool]:
    """Slice one page out of a result list.

    Args:
        samples: Full result list
        page: 1-based page number
        limit: Page size; None or 0 returns everything

    Returns:
        (page items, whether more items follow)
    """
    if not limit:
        return samples, False
    start, end = page_bounds(page, limit)
    return samples[start:end], end < len(samples)


def search_key(query: str, filters: Mapping[str, Any], page: int, limit: int | None) -> tuple[str, str, int, int]:
    """Cache key for a search request."""
    return (query, json.dumps(dict(filters), sort_keys=True, default=str), page, limit or 0)


class DriversCache:
    """Process-wide cache of driver samples, statistics and search results.

    Construct one instance at startup and share it with whatever serves
    requests. The clock, file reader and file fingerprint are injectable.
    """

    def __init__(
        self,
        config: CatalogConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
        reader: Reader = read_text_file,
        fingerprint: Callable[[Path], str] = file_fingerprint,
    ) -> None:
        """Initialize the cache.

        Args:
            config: Cache configuration (uses defaults if None)
            clock: Returns the current aware datetime
            reader: Coroutine reading the backing file as text
            fingerprint: Change marker for the backing file
        """
        self.config = config or CatalogConfig()
        self.clock = clock
        self.reader = reader
        self.fingerprint = fingerprint

        self._snapshot: DatasetSnapshot | None = None
        self._statistics: tuple[DriverStatistics, datetime] | None = None
        self._loading: asyncio.Task[DatasetSnapshot] | None = None
        self._generation = 0
        self._searches: TTLCache[SearchPage] = TTLCache(
            self.config.search_cache_ttl, clock, max_size=self.config.search_cache_size, name="search"
        )

    @property
    def data_path(self) -> Path:
        return Path(self.config.data_path)

    def _expired(self, since: datetime, ttl: float) -> bool:
        return (self.clock() - since).total_seconds() >= ttl

    def _is_fresh(self, snapshot: DatasetSnapshot) -> bool:
        if self._expired(snapshot.loaded_at, self.config.cache_ttl):
            return False
        if self.config.watch_file and self.fingerprint(self.data_path) != snapshot.fingerprint:
            logger.info(f"Dataset file changed on disk: {self.data_path}")
            return False
        return True

    @property
    def state(self) -> SnapshotState:
        """Current snapshot lifecycle state."""
        if self._loading is not None and not self._loading.done():
            return SnapshotState.LOADING
        if self._snapshot is None:
            return SnapshotState.EMPTY
        if self._expired(self._snapshot.loaded_at, self.config.cache_ttl):
            return SnapshotState.STALE
        return SnapshotState.LOADED

    async def _load_snapshot(self, generation: int) -> DatasetSnapshot:
        """Read, parse and normalize the backing file into a new snapshot."""
        path = self.data_path
        logger.info(f"Loading drivers from {path}")

        fingerprint = self.fingerprint(path)
        text = await self.reader(path)
        dataset = parse_dataset(text, path)
        snapshot = DatasetSnapshot(
            samples=dataset.samples,
            loaded_at=self.clock(),
            fingerprint=fingerprint,
            blocklist_check=dataset.blocklist_check,
        )

        if generation == self._generation:
            self._snapshot = snapshot
            self._statistics = None
            self._searches.clear()
        else:
            logger.debug("Discarding dataset loaded before a cache clear")

        logger.info(f"Loaded {len(snapshot.samples)} driver samples")
        return snapshot

    async def _current_snapshot(self) -> DatasetSnapshot:
        snapshot = self._snapshot
        if snapshot is not None and self._is_fresh(snapshot):
            return snapshot

        # Concurrent callers share one load per invalidation cycle
        if self._loading is None or self._loading.done():
            self._loading = asyncio.ensure_future(self._load_snapshot(self._generation))
            self._loading.add_done_callback(self._load_finished)
        return await asyncio.shield(self._loading)

    def _load_finished(self, task: asyncio.Task[DatasetSnapshot]) -> None:
        if self._loading is task:
            self._loading = None
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Dataset load failed: {task.exception()}")

    async def load_drivers(self) -> list[DriverSample]:
        """Get the normalized dataset, loading it if there is no fresh snapshot.

        Returns:
            All driver samples

        Raises:
            SourceUnavailableError: If the backing file cannot be read
            PayloadParseError: If the backing file is not valid JSON
        """
        snapshot = await self._current_snapshot()
        return snapshot.samples

    async def get_drivers(self, page: int = 1, limit: int | None = None) -> DriverPage:
        """Get one page of the full dataset.

        Args:
            page: 1-based page number
            limit: Page size; None returns every sample

        Returns:
            Page of samples with the dataset total
        """
        samples = await self.load_drivers()
        drivers, has_more = paginate(samples, page, limit)
        return DriverPage(drivers=drivers, total=len(samples), has_more=has_more)

    async def search_drivers(
        self,
        query: str = "",
        filters: Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> SearchPage:
        """Filter, search, order and paginate the dataset.

        Identical requests are answered from a short-lived result cache.

        Args:
            query: Free-text query
            filters: Mapping of filter name to requested value
            page: 1-based page number
            limit: Page size; None returns every match

        Returns:
            Page of matching samples echoing the request
        """
        filters = dict(filters or {})
        key = search_key(query, filters, page, limit)

        samples = await self.load_drivers()
        cached = self._searches.get(key)
        if cached is not None:
            return cached

        results = apply_filters(samples, filters, self.clock())
        results = search_samples(results, query)
        if filters.get("newestFirst"):
            results = sort_by_created(results, newest_first=True)
        elif filters.get("oldestFirst"):
            results = sort_by_created(results, newest_first=False)

        drivers, has_more = paginate(results, page, limit)
        result = SearchPage(
            drivers=drivers,
            total=len(results),
            has_more=has_more,
            page=page,
            query=query,
            filters=filters,
        )
        self._searches.set(key, result)
        return result

    async def get_statistics(self) -> DriverStatistics:
        """Get dataset statistics, recomputing them when stale.

        Returns:
            Statistics for the current snapshot
        """
        snapshot = await self._current_snapshot()
        if self._statistics is not None:
            stats, computed_at = self._statistics
            if not self._expired(computed_at, self.config.cache_ttl):
                return stats

        now = self.clock()
        stats = compute_statistics(snapshot.samples, now, snapshot.blocklist_check)
        if snapshot is self._snapshot:
            self._statistics = (stats, now)
        return stats

    def clear_cache(self) -> None:
        """Drop the snapshot, statistics and search results.

        The next access reloads the backing file.
        """
        self._generation += 1
        self._snapshot = None
        self._statistics = None
        self._loading = None
        cleared = self._searches.clear()
        logger.info(f"Cache cleared ({cleared} search result(s) dropped)")

    def cache_info(self) -> dict[str, Any]:
        """Describe the cache for health reporting."""
        snapshot = self._snapshot
        return {
            "state": self.state.value,
            "data_path": str(self.data_path),
            "samples": len(snapshot.samples) if snapshot else 0,
            "loaded_at": snapshot.loaded_at.isoformat() if snapshot else None,
            "ttl_seconds": self.config.cache_ttl,
            "search_cache": self._searches.get_stats(),
        }
