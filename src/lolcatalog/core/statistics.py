"""Dataset-wide statistics over a snapshot of driver samples."""

from datetime import datetime

from ..models import DriverSample, DriverStatistics, HvciBlocklistCheck
from .filters import (
    DEBUG_BYPASS_FUNCTIONS,
    FILE_FUNCTIONS,
    MEMORY_MANIPULATION_FUNCTIONS,
    PROCESS_KILLER_FUNCTIONS,
    REGISTRY_FUNCTIONS,
    has_active_certificate,
    imports_any,
    is_hvci_compatible,
    is_killer,
    is_signed,
)

ARCHITECTURES = {"AMD64": "amd64_drivers", "I386": "i386_drivers", "ARM64": "arm64_drivers"}

BEHAVIOURS = {
    "memory_manipulator_drivers": MEMORY_MANIPULATION_FUNCTIONS,
    "process_killer_drivers": PROCESS_KILLER_FUNCTIONS,
    "debug_bypass_drivers": DEBUG_BYPASS_FUNCTIONS,
    "registry_manipulator_drivers": REGISTRY_FUNCTIONS,
    "file_manipulator_drivers": FILE_FUNCTIONS,
}


def compute_statistics(
    samples: list[DriverSample],
    now: datetime,
    blocklist_check: HvciBlocklistCheck | None = None,
) -> DriverStatistics:
    """Count samples per category in a single pass.

    Uses the same predicates as the filter engine, so a count always equals the
    size of the corresponding filtered result.

    Args:
        samples: Full normalized dataset
        now: Computation time, stamped as ``lastUpdated``
        blocklist_check: Blocklist metadata from the dataset file, if any

    Returns:
        Fresh statistics
    """
    counts = dict.fromkeys(
        ["hvci_compatible", "killer_drivers", "signed", "active_certificates", *BEHAVIOURS, *ARCHITECTURES.values()],
        0,
    )

    for sample in samples:
        if is_hvci_compatible(sample):
            counts["hvci_compatible"] += 1
        if is_killer(sample):
            counts["killer_drivers"] += 1
        if is_signed(sample):
            counts["signed"] += 1
        if has_active_certificate(sample, now):
            counts["active_certificates"] += 1
        for field, needles in BEHAVIOURS.items():
            if imports_any(sample, needles):
                counts[field] += 1
        if sample.MachineType:
            field = ARCHITECTURES.get(sample.MachineType.upper())
            if field:
                counts[field] += 1

    return DriverStatistics(
        total=len(samples),
        unsigned=len(samples) - counts["signed"],
        last_updated=now,
        hvci_blocklist_check=blocklist_check,
        **counts,
    )
