"""Paginated query result models."""

from typing import Any

from pydantic import Field

from .driver import DriverSample
from .statistics import CamelModel


class DriverPage(CamelModel):
    """One page of driver samples."""

    drivers: list[DriverSample] = Field(default_factory=list, description="Samples on this page")
    total: int = Field(0, description="Number of samples across all pages")
    has_more: bool = Field(False, description="Whether a later page exists")

    def to_response(self) -> dict[str, Any]:
        """Serialize for API responses, dropping empty sample fields."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"drivers"})
        data["drivers"] = [sample.to_record() for sample in self.drivers]
        return data


class SearchPage(DriverPage):
    """A page of search results, echoing the query that produced it."""

    page: int = Field(1, description="Requested page")
    query: str = Field("", description="Free-text query")
    filters: dict[str, Any] = Field(default_factory=dict, description="Requested filters")
