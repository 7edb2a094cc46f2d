"""Unit tests for dataset statistics."""

from datetime import datetime, timezone

import pytest

from lolcatalog.core.filters import apply_filters
from lolcatalog.core.normalizer import normalize_records
from lolcatalog.core.statistics import compute_statistics
from lolcatalog.models import HvciBlocklistCheck

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def samples(sample_payload):
    return normalize_records(sample_payload)


class TestComputeStatistics:
    """Test statistics over the bundled sample dataset."""

    def test_sample_dataset_counts(self, samples):
        stats = compute_statistics(samples, NOW)

        assert stats.total == 3
        assert stats.hvci_compatible == 1
        assert stats.killer_drivers == 1
        assert stats.signed == 2
        assert stats.unsigned == 1
        assert stats.active_certificates == 1
        assert stats.memory_manipulator_drivers == 1
        assert stats.process_killer_drivers == 1
        assert stats.file_manipulator_drivers == 1
        assert stats.debug_bypass_drivers == 0
        assert stats.registry_manipulator_drivers == 0
        assert stats.last_updated == NOW

    def test_counts_match_filter_results(self, samples):
        stats = compute_statistics(samples, NOW)
        pairs = {
            "hvci": stats.hvci_compatible,
            "killer": stats.killer_drivers,
            "signed": stats.signed,
            "unsigned": stats.unsigned,
            "recent": stats.active_certificates,
            "memoryManipulator": stats.memory_manipulator_drivers,
            "processKiller": stats.process_killer_drivers,
            "debugBypass": stats.debug_bypass_drivers,
            "registryManipulator": stats.registry_manipulator_drivers,
            "fileManipulator": stats.file_manipulator_drivers,
        }

        for name, count in pairs.items():
            assert len(apply_filters(samples, {name: True}, NOW)) == count, name

    def test_architectures(self, nested_record):
        stats = compute_statistics(normalize_records([nested_record]), NOW)

        assert stats.amd64_drivers == 1
        assert stats.i386_drivers == 1
        assert stats.arm64_drivers == 0

    def test_empty_dataset(self):
        stats = compute_statistics([], NOW)

        assert stats.total == 0
        assert stats.unsigned == 0
        assert stats.hvci_compatible == 0


class TestStatisticsResponse:
    """Test the serialized statistics shape."""

    def test_camel_case_keys(self, samples):
        data = compute_statistics(samples, NOW).to_response()

        assert data["total"] == 3
        assert data["hvciCompatible"] == 1
        assert data["killerDrivers"] == 1
        assert data["activeCertificates"] == 1
        assert "lastUpdated" in data
        assert "hvciBlocklistCheck" not in data

    def test_blocklist_metadata_passthrough(self, samples):
        check = HvciBlocklistCheck.model_validate(
            {"lastCheck": "2025-05-30T00:00:00Z", "matchedDrivers": 5, "totalBlockedHashes": 1200, "note": "weekly"}
        )
        data = compute_statistics(samples, NOW, check).to_response()

        assert data["hvciBlocklistCheck"]["matchedDrivers"] == 5
        assert data["hvciBlocklistCheck"]["totalBlockedHashes"] == 1200
        assert data["hvciBlocklistCheck"]["note"] == "weekly"
