"""
In-memory state for one campaign run.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from src.models.vehicle import ScoredVehicle
from src.store.dedup import DedupStore


@dataclass
class Sighting:
    """Where a listing was observed on the results pages."""

    page: int
    index: int
    url: str


@dataclass
class RunState:
    dedup: DedupStore
    page_size: int
    expected_count: Optional[int] = None
    max_pages: Optional[int] = None
    page_number: int = 1
    page_hashes: Set[str] = field(default_factory=set)
    results: List[ScoredVehicle] = field(default_factory=list)
    sightings: Dict[str, Sighting] = field(default_factory=dict)
    skipped_ids: List[str] = field(default_factory=list)
    queued_ids: List[str] = field(default_factory=list)
    attempted_ids: Set[str] = field(default_factory=set)
    exit_reason: Optional[str] = None

    @property
    def expected_pages(self) -> Optional[int]:
        if not self.expected_count:
            return None
        return math.ceil(self.expected_count / self.page_size)

    @property
    def page_cap(self) -> Optional[int]:
        """Expected pages, lowered by a smaller max-pages override."""
        cap = self.expected_pages
        if self.max_pages and (cap is None or self.max_pages < cap):
            cap = self.max_pages
        return cap

    @property
    def observed_ids(self) -> Set[str]:
        return set(self.sightings)

    @property
    def result_ids(self) -> Set[str]:
        return {v.id for v in self.results}

    def missing_ids(self) -> List[str]:
        """Listings seen on result pages that produced no result this run."""
        done = self.result_ids
        return [vid for vid in self.sightings if vid not in done]
