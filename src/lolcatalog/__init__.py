"""LOLDrivers catalog: searchable cache of known vulnerable Windows drivers."""

from .__version__ import __version__
from .config import CatalogConfig
from .core import DriversCache
from .errors import CatalogError, PayloadParseError, SourceUnavailableError

__all__ = [
    "__version__",
    "CatalogConfig",
    "DriversCache",
    "CatalogError",
    "PayloadParseError",
    "SourceUnavailableError",
]
