"""Exception hierarchy for the LOLDrivers catalog.

Only failures that callers must act on are raised. A payload that parses but
holds no usable records is not an error: it loads as an empty dataset.
"""

from pathlib import Path


class CatalogError(Exception):
    """Base exception for catalog failures."""


class SourceUnavailableError(CatalogError):
    """The backing dataset file is missing or cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Dataset file unavailable: {path} ({reason})")
        self.path = path
        self.reason = reason


class PayloadParseError(CatalogError):
    """The backing dataset file is not valid JSON."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Dataset file is not valid JSON: {path} ({reason})")
        self.path = path
        self.reason = reason
