"""Runtime configuration for the LOLDrivers catalog."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "LOLCATALOG_"


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, warning on bad values."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer value for {name}: '{value}', using default {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CatalogConfig:
    """Configuration for the dataset cache and the HTTP service."""

    data_path: Path = Path("data") / "drv.json"

    # Cache lifetimes in seconds
    cache_ttl: int = 7200  # Snapshot and statistics
    search_cache_ttl: int = 600
    search_cache_size: int = 1000
    response_cache_ttl: int = 300  # Route-level response cache
    response_cache_size: int = 100

    # Reload when the backing file's size or mtime changes
    watch_file: bool = True

    # Pagination
    default_page_size: int = 50
    max_page_size: int = 50000

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        """Build configuration from environment variables.

        Returns:
            Configuration with environment overrides applied
        """
        defaults = cls()
        return cls(
            data_path=Path(os.getenv(f"{ENV_PREFIX}DATA_PATH", str(defaults.data_path))),
            cache_ttl=_env_int("CACHE_TTL", defaults.cache_ttl),
            search_cache_ttl=_env_int(f"{ENV_PREFIX}SEARCH_CACHE_TTL", defaults.search_cache_ttl),
            search_cache_size=_env_int(f"{ENV_PREFIX}SEARCH_CACHE_SIZE", defaults.search_cache_size),
            response_cache_ttl=_env_int(f"{ENV_PREFIX}RESPONSE_CACHE_TTL", defaults.response_cache_ttl),
            response_cache_size=_env_int(f"{ENV_PREFIX}RESPONSE_CACHE_SIZE", defaults.response_cache_size),
            watch_file=_env_bool(f"{ENV_PREFIX}WATCH_FILE", defaults.watch_file),
            host=os.getenv(f"{ENV_PREFIX}HOST", defaults.host),
            port=_env_int(f"{ENV_PREFIX}PORT", defaults.port),
        )
