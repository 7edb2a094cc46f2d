"""Client-side mirror of the catalog.

Fetches the raw dataset once over HTTP and answers filter and search requests
locally with the same engines the server uses. When the fetch fails the mirror
falls back to the bundled sample dataset and records a recoverable error.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

import httpx

from .core.filters import apply_filters
from .core.loader import dataset_from_payload, load_sample_dataset
from .core.search import search_samples
from .core.statistics import compute_statistics
from .models import DriverSample, DriverStatistics, HvciBlocklistCheck
from .utils.helpers import utc_now

logger = logging.getLogger(__name__)

DEFAULT_DATASET_URL = (
    "https://raw.githubusercontent.com/magicsword-io/LOLDrivers/main/loldrivers.io/content/api/drivers.json"
)

REMEDIATION = (
    "Check that the dataset URL is reachable and serves JSON, "
    "or point the catalog at a local copy with LOLCATALOG_DATA_PATH, then retry."
)


class CatalogMirror:
    """Local copy of the dataset with instant filtering and search."""

    def __init__(
        self,
        dataset_url: str = DEFAULT_DATASET_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the mirror.

        Args:
            dataset_url: URL of the raw dataset JSON
            client: HTTP client to use (one is created per fetch if None)
            timeout: Request timeout in seconds
            clock: Returns the current aware datetime
        """
        self.dataset_url = dataset_url
        self.client = client
        self.timeout = timeout
        self.clock = clock

        self.samples: list[DriverSample] = []
        self.blocklist_check: HvciBlocklistCheck | None = None
        self.error: str | None = None
        self.last_fetch: datetime | None = None

    @property
    def using_sample_data(self) -> bool:
        return self.error is not None

    async def _fetch_payload(self) -> Any:
        if self.client is not None:
            response = await self.client.get(self.dataset_url, headers={"Accept": "application/json"})
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            response = await client.get(self.dataset_url, headers={"Accept": "application/json"})
            response.raise_for_status()
            return response.json()

    async def load(self) -> list[DriverSample]:
        """Fetch and normalize the dataset, falling back to sample data on failure.

        Returns:
            Samples now held by the mirror
        """
        logger.info(f"Fetching dataset from {self.dataset_url}")
        try:
            payload = await self._fetch_payload()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Dataset fetch failed, using bundled sample data: {e}")
            self.samples = load_sample_dataset()
            self.blocklist_check = None
            self.error = f"Data file unavailable. Showing sample data. Error: {e}. {REMEDIATION}"
        else:
            dataset = dataset_from_payload(payload, self.dataset_url)
            self.samples = dataset.samples
            self.blocklist_check = dataset.blocklist_check
            self.error = None
            logger.info(f"Mirrored {len(self.samples)} driver samples")

        self.last_fetch = self.clock()
        return self.samples

    def view(self, query: str = "", filters: Mapping[str, Any] | None = None) -> list[DriverSample]:
        """Apply filters, then search, to the mirrored samples.

        Args:
            query: Free-text query
            filters: Mapping of filter name to requested value

        Returns:
            Matching samples in dataset order
        """
        results = apply_filters(self.samples, filters or {}, self.clock())
        return search_samples(results, query)

    def statistics(self) -> DriverStatistics:
        """Statistics over the mirrored samples."""
        return compute_statistics(self.samples, self.clock(), self.blocklist_check)
