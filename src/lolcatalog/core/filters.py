"""Named filter predicates over driver samples.

Filters combine with AND semantics. A filter is active when its value is
truthy; names that are not registered always pass.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..models import DriverSample
from ..utils.helpers import parse_timestamp

logger = logging.getLogger(__name__)

# Imported API substrings, matched case-insensitively
KILLER_FUNCTIONS = ("zwterminateprocess", "zwkillprocess", "ntterminate")
MEMORY_MANIPULATION_FUNCTIONS = (
    "zwmap",
    "zwallocate",
    "mmmap",
    "mmallocate",
    "virtualalloc",
    "virtualprotect",
    "heap",
    "pool",
)
PROCESS_KILLER_FUNCTIONS = ("zwterminateprocess",)
DEBUG_BYPASS_FUNCTIONS = (
    "zwsetinformationprocess",
    "zwsetinformationthread",
    "zwquerysysteminformation",
    "dbgkd",
    "kddebugger",
    "debugport",
)
REGISTRY_FUNCTIONS = (
    "zwcreatekey",
    "zwopenkey",
    "zwsetvaluekey",
    "zwdeletekey",
    "regcreate",
    "regopen",
    "regset",
    "regdelete",
)
FILE_FUNCTIONS = (
    "zwcreatefile",
    "zwopenfile",
    "zwreadfile",
    "zwwritefile",
    "zwdeletefile",
    "iocreate",
    "ntread",
    "ntwrite",
)

TRUSTED_ISSUERS = (
    "Microsoft Corporation",
    "GlobalSign",
    "DigiCert",
    "VeriSign",
    "Symantec",
    "Thawte",
    "GeoTrust",
    "Comodo",
    "Sectigo",
    "Entrust",
    "IdenTrust",
    "Go Daddy",
    "Network Solutions",
    "Starfield Technologies",
)

# Request keys that order results rather than filter them
ORDERING_KEYS = frozenset({"newestFirst", "oldestFirst"})


@dataclass(frozen=True)
class FilterContext:
    """Inputs a predicate may need besides the sample."""

    now: datetime
    value: Any = True


Predicate = Callable[[DriverSample, FilterContext], bool]


class FilterRegistry:
    """Registry of named filter predicates."""

    def __init__(self) -> None:
        """Initialize the registry."""
        self._predicates: dict[str, Predicate] = {}

    def register(self, name: str) -> Callable[[Predicate], Predicate]:
        """Register a predicate under a filter name.

        Args:
            name: Filter name as used in requests

        Returns:
            Decorator that registers and returns the predicate
        """

        def decorator(predicate: Predicate) -> Predicate:
            self._predicates[name] = predicate
            return predicate

        return decorator

    def get(self, name: str) -> Predicate | None:
        """Get a predicate by name."""
        return self._predicates.get(name)

    def names(self) -> list[str]:
        """Names of all registered filters."""
        return list(self._predicates)

    def __contains__(self, name: str) -> bool:
        return name in self._predicates


# Global registry instance
filter_registry = FilterRegistry()


def imports_any(sample: DriverSample, needles: Sequence[str]) -> bool:
    """Check whether any imported function contains one of the needles.

    Args:
        sample: Driver sample
        needles: Lowercase substrings to look for

    Returns:
        True if some import matches
    """
    for func in sample.ImportedFunctions or []:
        lowered = func.lower()
        if any(needle in lowered for needle in needles):
            return True
    return False


def is_hvci_compatible(sample: DriverSample) -> bool:
    return sample.LoadsDespiteHVCI is not None and sample.LoadsDespiteHVCI.upper() == "TRUE"


def is_killer(sample: DriverSample) -> bool:
    return imports_any(sample, KILLER_FUNCTIONS)


def is_signed(sample: DriverSample) -> bool:
    return bool(sample.Signatures)


def has_active_certificate(sample: DriverSample, now: datetime) -> bool:
    """Check for a certificate whose ValidTo is strictly after ``now``.

    Args:
        sample: Driver sample
        now: Evaluation time (aware)

    Returns:
        True if at least one certificate is still valid
    """
    for cert in sample.certificates:
        valid_to = parse_timestamp(cert.ValidTo)
        if valid_to is not None and valid_to > now:
            return True
    return False


def has_trusted_certificate(sample: DriverSample, now: datetime) -> bool:
    """Check for an unexpired certificate issued to a well-known publisher or CA."""
    for cert in sample.certificates:
        if not cert.Subject:
            continue
        valid_to = parse_timestamp(cert.ValidTo)
        if valid_to is None or valid_to <= now:
            continue
        if any(issuer in cert.Subject for issuer in TRUSTED_ISSUERS):
            return True
    return False


def matches_architecture(sample: DriverSample, machine_type: Any) -> bool:
    if not sample.MachineType or not isinstance(machine_type, str):
        return False
    return sample.MachineType.upper() == machine_type.upper()


@filter_registry.register("hvci")
def _hvci(sample: DriverSample, ctx: FilterContext) -> bool:
    return is_hvci_compatible(sample)


@filter_registry.register("killer")
def _killer(sample: DriverSample, ctx: FilterContext) -> bool:
    return is_killer(sample)


@filter_registry.register("signed")
def _signed(sample: DriverSample, ctx: FilterContext) -> bool:
    return is_signed(sample)


@filter_registry.register("unsigned")
def _unsigned(sample: DriverSample, ctx: FilterContext) -> bool:
    return not is_signed(sample)


@filter_registry.register("recent")
def _recent(sample: DriverSample, ctx: FilterContext) -> bool:
    return has_active_certificate(sample, ctx.now)


@filter_registry.register("memoryManipulator")
def _memory_manipulator(sample: DriverSample, ctx: FilterContext) -> bool:
    return imports_any(sample, MEMORY_MANIPULATION_FUNCTIONS)


@filter_registry.register("processKiller")
def _process_killer(sample: DriverSample, ctx: FilterContext) -> bool:
    return imports_any(sample, PROCESS_KILLER_FUNCTIONS)


@filter_registry.register("debugBypass")
def _debug_bypass(sample: DriverSample, ctx: FilterContext) -> bool:
    return imports_any(sample, DEBUG_BYPASS_FUNCTIONS)


@filter_registry.register("registryManipulator")
def _registry_manipulator(sample: DriverSample, ctx: FilterContext) -> bool:
    return imports_any(sample, REGISTRY_FUNCTIONS)


@filter_registry.register("fileManipulator")
def _file_manipulator(sample: DriverSample, ctx: FilterContext) -> bool:
    return imports_any(sample, FILE_FUNCTIONS)


@filter_registry.register("architecture")
def _architecture(sample: DriverSample, ctx: FilterContext) -> bool:
    return matches_architecture(sample, ctx.value)


@filter_registry.register("trustedCert")
def _trusted_cert(sample: DriverSample, ctx: FilterContext) -> bool:
    return has_trusted_certificate(sample, ctx.now)


@filter_registry.register("untrustedCert")
def _untrusted_cert(sample: DriverSample, ctx: FilterContext) -> bool:
    has_subject = any(cert.Subject for cert in sample.certificates)
    return has_subject and not has_trusted_certificate(sample, ctx.now)


def active_filters(filters: Mapping[str, Any]) -> dict[str, Any]:
    """Select the filters that constrain results.

    Args:
        filters: Mapping of filter name to requested value

    Returns:
        Filters with truthy values, ordering keys removed
    """
    return {name: value for name, value in filters.items() if value and name not in ORDERING_KEYS}


def matches_filters(
    sample: DriverSample,
    filters: Mapping[str, Any],
    now: datetime,
    registry: FilterRegistry = filter_registry,
) -> bool:
    """Evaluate every active filter against a sample (logical AND).

    Args:
        sample: Driver sample
        filters: Mapping of filter name to requested value
        now: Evaluation time for certificate checks
        registry: Predicate registry

    Returns:
        True if all active filters pass
    """
    for name, value in active_filters(filters).items():
        predicate = registry.get(name)
        if predicate is None:
            continue
        if not predicate(sample, FilterContext(now=now, value=value)):
            return False
    return True


def apply_filters(
    samples: list[DriverSample],
    filters: Mapping[str, Any],
    now: datetime,
    registry: FilterRegistry = filter_registry,
) -> list[DriverSample]:
    """Keep the samples matching all active filters.

    Args:
        samples: Driver samples
        filters: Mapping of filter name to requested value
        now: Evaluation time for certificate checks
        registry: Predicate registry

    Returns:
        Matching samples in input order; the input list itself when no filter is active
    """
    active = active_filters(filters)
    if not active:
        return samples

    unknown = [name for name in active if name not in registry]
    if unknown:
        logger.debug(f"Ignoring unknown filter(s): {', '.join(unknown)}")

    return [sample for sample in samples if matches_filters(sample, active, now, registry)]
