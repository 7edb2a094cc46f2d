"""Dataset statistics models for the LOLDrivers catalog."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialized with camelCase keys, populated by either form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HvciBlocklistCheck(CamelModel):
    """Result of the offline cross-check against Microsoft's driver blocklist."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    last_check: str | None = Field(None, description="When the blocklist check last ran")
    microsoft_last_modified: str | None = Field(None, description="Last-Modified of the vendor blocklist")
    total_blocked_hashes: int | None = Field(None, description="Hashes listed in the blocklist")
    matched_drivers: int | None = Field(None, description="Samples matched against the blocklist")
    source: str | None = Field(None, description="Where the blocklist was fetched from")


class DriverStatistics(CamelModel):
    """Dataset-wide counts derived from a snapshot of driver samples."""

    total: int = Field(0, description="Number of driver samples")
    hvci_compatible: int = Field(0, description="Samples that load despite HVCI")
    killer_drivers: int = Field(0, description="Samples importing process termination APIs")
    signed: int = Field(0, description="Samples with at least one signature")
    unsigned: int = Field(0, description="Samples without signatures")
    active_certificates: int = Field(0, description="Samples with a certificate not yet expired")
    memory_manipulator_drivers: int = Field(0, description="Samples importing memory mapping APIs")
    process_killer_drivers: int = Field(0, description="Samples importing ZwTerminateProcess")
    debug_bypass_drivers: int = Field(0, description="Samples importing debugger tampering APIs")
    registry_manipulator_drivers: int = Field(0, description="Samples importing registry APIs")
    file_manipulator_drivers: int = Field(0, description="Samples importing file APIs")
    amd64_drivers: int = Field(0, description="AMD64 samples")
    i386_drivers: int = Field(0, description="I386 samples")
    arm64_drivers: int = Field(0, description="ARM64 samples")
    last_updated: datetime = Field(..., description="When these statistics were computed")
    hvci_blocklist_check: HvciBlocklistCheck | None = Field(None, description="Blocklist cross-check metadata")

    def to_response(self) -> dict:
        """Serialize for API responses."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
