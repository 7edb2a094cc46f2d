"""Dataset cache and filter/search engines."""

from .drivers_cache import DatasetSnapshot, DriversCache, SnapshotState, paginate
from .filters import FilterContext, apply_filters, filter_registry, matches_filters
from .loader import dataset_from_payload, load_sample_dataset, parse_dataset, read_text_file
from .normalizer import coerce_records, normalize_records
from .search import search_samples, sort_by_created
from .statistics import compute_statistics

__all__ = [
    "DatasetSnapshot",
    "DriversCache",
    "SnapshotState",
    "paginate",
    "FilterContext",
    "apply_filters",
    "filter_registry",
    "matches_filters",
    "dataset_from_payload",
    "load_sample_dataset",
    "parse_dataset",
    "read_text_file",
    "coerce_records",
    "normalize_records",
    "search_samples",
    "sort_by_created",
    "compute_statistics",
]
