"""Driver record models for the LOLDrivers catalog.

Field names follow the dataset's own keys. Decoding is lenient: a field with an
unexpected shape is coerced or dropped to ``None`` instead of failing the record.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

# Parent record keys copied onto every sample during normalization
METADATA_FIELDS = ("Tags", "Verified", "Author", "Created", "MitreID", "CVE", "Category", "Commands", "Resources")


def _as_text(value: Any) -> str | None:
    """Stringify JSON scalars; objects and arrays decode as missing."""
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _as_text_list(value: Any) -> list[str] | None:
    """Keep the scalar elements of a JSON array as strings."""
    if not isinstance(value, list):
        return None
    return [text for text in map(_as_text, value) if text is not None]


def _as_object(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def _as_object_list(value: Any) -> list[dict[str, Any]] | None:
    """Decode a JSON array of objects, keeping its length."""
    if not isinstance(value, list):
        return None
    return [item if isinstance(item, dict) else {} for item in value]


Text = Annotated[str | None, BeforeValidator(_as_text)]
TextList = Annotated[list[str] | None, BeforeValidator(_as_text_list)]


class LenientRecord(BaseModel):
    """Immutable record that keeps keys it does not declare."""

    model_config = ConfigDict(extra="allow", frozen=True)

    def to_record(self) -> dict[str, Any]:
        """Dump to the dataset's JSON shape, omitting missing fields."""
        return self.model_dump(mode="json", exclude_none=True)


class Certificate(LenientRecord):
    """A code-signing certificate attached to a signature."""

    ValidFrom: Text = None
    ValidTo: Text = None
    Subject: Text = None


class Signature(LenientRecord):
    """An Authenticode signature and its certificate chain."""

    Certificates: Annotated[list[Certificate] | None, BeforeValidator(_as_object_list)] = None


class AuthentihashDigest(LenientRecord):
    """Digest of the Authenticode structure, distinct from the file hash."""

    MD5: Text = None
    SHA1: Text = None
    SHA256: Text = None


class DriverCommands(LenientRecord):
    """Structured usage metadata for a driver."""

    Command: Text = None
    Description: Text = None
    OperatingSystem: Text = None
    Privileges: Text = None
    Usecase: Text = None


class DriverMetadata(LenientRecord):
    """Fields a top-level driver record shares with each of its samples."""

    Tags: TextList = None
    Verified: Text = None
    Author: Text = None
    Created: Text = None
    MitreID: Text = None
    CVE: TextList = None
    Category: Text = None
    Commands: DriverCommands | None = None
    Resources: TextList = None

    @field_validator("Commands", mode="before")
    @classmethod
    def validate_commands(cls, v: Any) -> dict[str, Any] | None:
        """Drop usage metadata that is not an object."""
        return _as_object(v)


class RawDriverRecord(DriverMetadata):
    """Top-level entry of the LOLDrivers dataset."""

    Id: Text = None
    KnownVulnerableSamples: Annotated[list[dict[str, Any]] | None, BeforeValidator(_as_object_list)] = None

    def metadata(self) -> dict[str, Any]:
        """Parent fields to copy onto each sample, keyed as the dataset keys them."""
        fields = self.model_dump(include=set(METADATA_FIELDS), exclude_none=True)
        if self.Id is not None:
            fields["DriverId"] = self.Id
        return fields


class DriverSample(DriverMetadata):
    """Canonical driver sample: one binary plus its parent driver's metadata."""

    DriverId: Text = None
    Filename: Text = None
    OriginalFilename: Text = None
    Company: Text = None
    Description: Text = None
    FileVersion: Text = None
    Copyright: Text = None
    MD5: Text = None
    SHA1: Text = None
    SHA256: Text = None
    Authentihash: AuthentihashDigest | None = None
    ImportedFunctions: TextList = None
    LoadsDespiteHVCI: Text = None
    MachineType: Text = None
    Signatures: list[Signature] | None = Field(default=None, description="Authenticode signatures")

    @field_validator("Authentihash", mode="before")
    @classmethod
    def validate_authentihash(cls, v: Any) -> dict[str, Any] | None:
        """Drop an authentihash that is not an object."""
        return _as_object(v)

    @field_validator("Signatures", mode="before")
    @classmethod
    def validate_signatures(cls, v: Any) -> list[dict[str, Any]] | None:
        """Keep the signature list length even when entries are malformed."""
        return _as_object_list(v)

    @property
    def display_name(self) -> str:
        """Name shown for the sample: original filename, then filename."""
        return self.OriginalFilename or self.Filename or "Unknown"

    @property
    def certificates(self) -> list[Certificate]:
        """All certificates across all signatures."""
        return [cert for signature in self.Signatures or [] for cert in signature.Certificates or []]

    def __str__(self) -> str:
        """String representation."""
        return f"DriverSample({self.display_name}, sha256={self.SHA256})"
