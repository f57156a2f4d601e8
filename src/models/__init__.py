"""
Data models for listings, scored vehicles and the run ledger.
"""

from src.models.vehicle import (
    ListingRef,
    VehicleRecord,
    MatchedSpec,
    ScoredVehicle,
    LedgerEntry,
    ArchiveEntry,
)
from src.models.payload import HydrationPayload

__all__ = [
    "ListingRef",
    "VehicleRecord",
    "MatchedSpec",
    "ScoredVehicle",
    "LedgerEntry",
    "ArchiveEntry",
    "HydrationPayload",
]
