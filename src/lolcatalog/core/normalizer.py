"""Flattening of raw LOLDrivers records into canonical driver samples."""

import logging
from typing import Any

from pydantic import ValidationError

from ..models import DriverSample, RawDriverRecord

logger = logging.getLogger(__name__)

# Keys under which a wrapping object may carry the record array
ARRAY_KEYS = ("drivers", "data", "items")


def coerce_records(payload: Any) -> list[Any]:
    """Find the record array in a parsed dataset payload.

    A list is used as-is. For an object, the first truthy value under
    ``drivers``, ``data`` or ``items`` is used, else the object's values; when
    that is not a list the object itself is the single record.

    Args:
        payload: Parsed JSON document

    Returns:
        Candidate records (not yet checked to be objects)
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []

    candidate: Any = None
    for key in ARRAY_KEYS:
        if payload.get(key):
            candidate = payload[key]
            break
    else:
        candidate = list(payload.values())

    if not isinstance(candidate, list):
        return [payload]
    return candidate


def expand_record(record: dict[str, Any]) -> list[DriverSample]:
    """Expand one raw record into its driver samples.

    Args:
        record: Raw driver record

    Returns:
        One sample per known vulnerable sample, or the record itself when it has none.
        A sample entry that is not an object yields a sample carrying only the
        parent metadata.
    """
    raw = RawDriverRecord.model_validate(record)
    if not raw.KnownVulnerableSamples:
        return [DriverSample.model_validate(record)]

    metadata = raw.metadata()
    samples = []
    for entry in record["KnownVulnerableSamples"]:
        if not isinstance(entry, dict):
            logger.debug(f"Non-object sample in driver {raw.Id}; keeping parent metadata only")
            entry = {}
        samples.append(DriverSample.model_validate({**metadata, **entry}))
    return samples


def normalize_records(payload: Any) -> list[DriverSample]:
    """Flatten a parsed dataset into canonical driver samples.

    Malformed entries are skipped; the result is always a list.

    Args:
        payload: Parsed JSON document

    Returns:
        Canonical driver samples in dataset order
    """
    samples: list[DriverSample] = []
    dropped = 0

    for record in coerce_records(payload):
        if not isinstance(record, dict):
            dropped += 1
            continue
        try:
            samples.extend(expand_record(record))
        except ValidationError as e:
            logger.warning(f"Skipping malformed driver record {record.get('Id')}: {e.error_count()} errors")
            dropped += 1

    if dropped:
        logger.debug(f"Dropped {dropped} malformed record(s) during normalization")
    return samples
