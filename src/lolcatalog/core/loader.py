"""Reading and parsing of the backing dataset file."""

import json
import logging
from dataclasses import dataclass, field
from importlib.resources import files
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import ValidationError

from ..errors import PayloadParseError, SourceUnavailableError
from ..models import DriverSample, HvciBlocklistCheck
from .normalizer import normalize_records

logger = logging.getLogger(__name__)

METADATA_KEY = "_metadata"
SAMPLE_DATASET = "sample_drivers.json"


@dataclass
class ParsedDataset:
    """Normalized samples plus the maintenance metadata stored alongside them."""

    samples: list[DriverSample] = field(default_factory=list)
    blocklist_check: HvciBlocklistCheck | None = None


async def read_text_file(path: Path) -> str:
    """Read a UTF-8 text file without blocking the event loop.

    Args:
        path: File to read

    Returns:
        File contents

    Raises:
        SourceUnavailableError: If the file is missing or unreadable
    """
    try:
        async with aiofiles.open(path, encoding="utf-8") as f:
            return await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailableError(path, str(e)) from e


def extract_blocklist_check(payload: Any) -> HvciBlocklistCheck | None:
    """Pull ``_metadata.hvciBlocklistCheck`` out of an object payload.

    Args:
        payload: Parsed JSON document

    Returns:
        Blocklist metadata, or None if absent or malformed
    """
    if not isinstance(payload, dict):
        return None
    metadata = payload.get(METADATA_KEY)
    if not isinstance(metadata, dict) or not isinstance(metadata.get("hvciBlocklistCheck"), dict):
        return None
    try:
        return HvciBlocklistCheck.model_validate(metadata["hvciBlocklistCheck"])
    except ValidationError as e:
        logger.warning(f"Ignoring malformed hvciBlocklistCheck metadata: {e.error_count()} errors")
        return None


def parse_dataset(text: str, source: Path) -> ParsedDataset:
    """Parse and normalize the dataset file contents.

    Args:
        text: Raw file contents
        source: Path the contents came from, for error messages

    Returns:
        Parsed dataset; empty if the JSON holds no usable records

    Raises:
        PayloadParseError: If the contents are not valid JSON
    """
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise PayloadParseError(source, str(e)) from e

    return dataset_from_payload(payload, source)


def dataset_from_payload(payload: Any, source: Path | str) -> ParsedDataset:
    """Split the maintenance metadata off a parsed payload and normalize the rest.

    Args:
        payload: Parsed JSON document
        source: Where the payload came from, for log messages

    Returns:
        Parsed dataset; empty if the payload holds no usable records
    """
    blocklist_check = extract_blocklist_check(payload)
    if isinstance(payload, dict):
        payload = {key: value for key, value in payload.items() if key != METADATA_KEY}

    samples = normalize_records(payload)
    if not samples:
        logger.warning(f"No driver records found in {source}; serving an empty dataset")
    return ParsedDataset(samples=samples, blocklist_check=blocklist_check)


def load_sample_dataset() -> list[DriverSample]:
    """Load the small dataset bundled with the package.

    Used by clients as a stand-in when the real dataset cannot be fetched.

    Returns:
        Bundled driver samples
    """
    resource = files("lolcatalog") / "data" / SAMPLE_DATASET
    return parse_dataset(resource.read_text(encoding="utf-8"), Path(SAMPLE_DATASET)).samples
