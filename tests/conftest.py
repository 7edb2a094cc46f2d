"""Shared test fixtures for the LOLDrivers catalog."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from lolcatalog.config import CatalogConfig

SAMPLE_DATASET = Path(__file__).parent.parent / "src" / "lolcatalog" / "data" / "sample_drivers.json"

# Fixed evaluation time: the Microsoft sample's certificate is still valid, Razer's is expired
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock returning aware datetimes."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_payload():
    """The bundled sample dataset as parsed JSON."""
    return json.loads(SAMPLE_DATASET.read_text(encoding="utf-8"))


@pytest.fixture
def nested_record():
    """A top-level driver record with two known vulnerable samples."""
    return {
        "Id": "a1b2c3d4-0000-4000-8000-000000000001",
        "Tags": ["gdrv.sys"],
        "Verified": "TRUE",
        "Author": "Michael Haag",
        "Created": "2023-01-09",
        "MitreID": "T1068",
        "CVE": ["CVE-2018-19320"],
        "Category": "vulnerable driver",
        "Commands": {
            "Command": "sc.exe create gdrv binPath=C:\\windows\\temp\\gdrv.sys type=kernel",
            "Description": "Arbitrary ring0 memory read/write",
            "OperatingSystem": "Windows 10",
            "Privileges": "kernel",
            "Usecase": "Elevate privileges",
        },
        "Resources": ["https://example.org/gdrv"],
        "KnownVulnerableSamples": [
            {
                "Filename": "gdrv.sys",
                "OriginalFilename": "gdrv.sys",
                "Company": "Giga-Byte Technology",
                "SHA256": "31f4cfb4c71da44120752721103a16512444c13c2ac2d857a7e6f13cb679b427",
                "MachineType": "AMD64",
                "ImportedFunctions": ["MmMapIoSpace", "ZwOpenKey"],
                "LoadsDespiteHVCI": "TRUE",
            },
            {
                "Filename": "gdrv32.sys",
                "Company": "Giga-Byte Technology",
                "Category": "malicious",
                "MachineType": "I386",
            },
        ],
    }


@pytest.fixture
def dataset_file(tmp_path, sample_payload):
    """Backing file holding the bundled sample dataset."""
    path = tmp_path / "drv.json"
    path.write_text(json.dumps(sample_payload), encoding="utf-8")
    return path


@pytest.fixture
def config(dataset_file):
    return CatalogConfig(data_path=dataset_file)
