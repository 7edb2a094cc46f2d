"""Linear free-text search and ordering over driver samples."""

from collections.abc import Iterator
from datetime import datetime

from ..models import DriverSample
from ..utils.helpers import normalize_text, parse_timestamp


def searchable_fields(sample: DriverSample) -> Iterator[str]:
    """Yield the sample's searchable values in match order.

    Args:
        sample: Driver sample

    Yields:
        Non-null field values and array elements
    """
    yield from (
        sample.OriginalFilename or sample.Filename,
        sample.Company,
        sample.Description,
        sample.MD5,
        sample.SHA1,
        sample.SHA256,
        sample.FileVersion,
        sample.Copyright,
        sample.Category,
        sample.Author,
        sample.MitreID,
        sample.Verified,
    )
    if sample.Authentihash is not None:
        yield from (sample.Authentihash.MD5, sample.Authentihash.SHA1, sample.Authentihash.SHA256)
    yield from sample.Tags or []
    yield from sample.CVE or []
    yield from sample.ImportedFunctions or []
    yield sample.LoadsDespiteHVCI
    if sample.Commands is not None:
        commands = sample.Commands
        yield from (
            commands.Command,
            commands.Description,
            commands.OperatingSystem,
            commands.Privileges,
            commands.Usecase,
        )


def matches_query(sample: DriverSample, term: str) -> bool:
    """Check whether any searchable field contains an already-normalized term.

    Args:
        sample: Driver sample
        term: Lowercased, trimmed query

    Returns:
        True on the first field containing the term
    """
    return any(value and term in value.lower() for value in searchable_fields(sample))


def search_samples(samples: list[DriverSample], query: str | None) -> list[DriverSample]:
    """Case-insensitive substring search across the searchable fields.

    Args:
        samples: Driver samples
        query: Free-text query

    Returns:
        Matching samples in input order; the input list itself for an empty query
    """
    term = normalize_text(query or "")
    if not term:
        return samples
    return [sample for sample in samples if matches_query(sample, term)]


def _created(sample: DriverSample) -> datetime | None:
    return parse_timestamp(sample.Created)


def sort_by_created(samples: list[DriverSample], newest_first: bool = True) -> list[DriverSample]:
    """Order samples by their driver's creation date.

    Samples without a valid date keep their relative order and go last.

    Args:
        samples: Driver samples
        newest_first: Most recent first when True, oldest first otherwise

    Returns:
        New sorted list
    """
    dated = [(created, sample) for sample in samples if (created := _created(sample)) is not None]
    undated = [sample for sample in samples if _created(sample) is None]
    dated.sort(key=lambda pair: pair[0], reverse=newest_first)
    return [sample for _, sample in dated] + undated
