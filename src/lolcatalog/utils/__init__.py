"""Utility helpers for the LOLDrivers catalog."""

from .helpers import file_fingerprint, normalize_text, parse_timestamp, utc_now

__all__ = ["file_fingerprint", "normalize_text", "parse_timestamp", "utc_now"]
