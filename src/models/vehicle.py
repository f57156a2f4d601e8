"""
Pydantic models for listings, vehicle records and ledger entries.

Records are persisted as JSON via model_dump(); loading goes back through
model_validate so old files with missing optional fields still load.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float, str]


class ListingRef(BaseModel):
    """A candidate listing found on a results page. Never persisted."""

    registration: Optional[str] = None
    href: str = ""
    discovery_index: int = 0

    model_config = ConfigDict(str_strip_whitespace=True)


class VehicleRecord(BaseModel):
    """Structured data read from a listing's detail page."""

    id: str = Field(..., min_length=1)
    title: str = "BMW"
    url: str
    registration: Optional[str] = None
    engine_fuel: Optional[str] = None
    engine_power: Optional[Number] = None
    engine_size: Optional[Number] = None
    mileage: Optional[Number] = None
    registration_date: Optional[str] = None
    manufactured_year: Optional[Number] = None
    battery_range: Optional[Number] = None
    co2: Optional[Number] = None
    fuel_type: Optional[str] = None
    features: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class MatchedSpec(BaseModel):
    keyword: str
    matched_feature_text: str
    weight: float


class ScoredVehicle(VehicleRecord):
    """A vehicle record with its spec-match score."""

    score: float = 0
    score_percent: int = Field(0, ge=0)
    matched_specs: List[MatchedSpec] = Field(default_factory=list)
    unmatched_specs: List[str] = Field(default_factory=list)
    timestamp: str


class LedgerEntry(ScoredVehicle):
    """A scored vehicle tracked across runs."""

    missing_count: int = Field(0, ge=0)


class ArchiveEntry(LedgerEntry):
    """A ledger entry aged out after consecutive absences."""

    removed_at: str
