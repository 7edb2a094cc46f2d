"""LOLDrivers catalog data models."""

from .driver import (
    AuthentihashDigest,
    Certificate,
    DriverCommands,
    DriverSample,
    RawDriverRecord,
    Signature,
)
from .page import DriverPage, SearchPage
from .statistics import DriverStatistics, HvciBlocklistCheck

__all__ = [
    "AuthentihashDigest",
    "Certificate",
    "DriverCommands",
    "DriverSample",
    "RawDriverRecord",
    "Signature",
    "DriverPage",
    "SearchPage",
    "DriverStatistics",
    "HvciBlocklistCheck",
]
