"""
Spec-match scoring.

A vehicle's feature descriptions are matched against the target model's
weighted keyword table. Each keyword contributes its weight at most once,
however many features mention it.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from src.models.vehicle import MatchedSpec, ScoredVehicle, VehicleRecord
from src.utils.date_utils import get_current_timestamp

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Lowercase, drop punctuation and collapse whitespace.

    Example:
        >>> normalize("Bowers & Wilkins  Diamond")
        'bowers wilkins diamond'
    """
    return _SPACE_RE.sub(" ", _PUNCT_RE.sub("", (text or "").lower())).strip()


@dataclass
class SpecScore:
    score: float = 0
    max_score: float = 0
    score_percent: int = 0
    matched: List[MatchedSpec] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)


class SpecScorer:
    """Scores feature lists against one model's spec-weight table."""

    def __init__(self, weights: Mapping[str, float]):
        self._weights: Dict[str, float] = dict(weights)
        self._normalized = [(keyword, normalize(keyword), weight) for keyword, weight in self._weights.items()]
        self.max_score = sum(self._weights.values())

    def evaluate(self, features: Sequence[str]) -> SpecScore:
        normalized_features = [(text, normalize(text)) for text in features]
        matched: List[MatchedSpec] = []
        score: float = 0

        for keyword, key_norm, weight in self._normalized:
            if not key_norm:
                continue
            for text, text_norm in normalized_features:
                if key_norm in text_norm:
                    score += weight
                    matched.append(MatchedSpec(keyword=keyword, matched_feature_text=text, weight=weight))
                    break

        absorbed = {m.matched_feature_text for m in matched}
        unmatched = [text for text in features if text not in absorbed]

        if self.max_score > 0:
            percent = int(math.floor(score / self.max_score * 100 + 0.5))
        else:
            percent = 0

        return SpecScore(
            score=score,
            max_score=self.max_score,
            score_percent=percent,
            matched=matched,
            unmatched=unmatched,
        )

    def score(self, record: VehicleRecord, timestamp: Optional[str] = None) -> ScoredVehicle:
        result = self.evaluate(record.features)
        return ScoredVehicle(
            **record.model_dump(),
            score=result.score,
            score_percent=result.score_percent,
            matched_specs=result.matched,
            unmatched_specs=result.unmatched,
            timestamp=timestamp or get_current_timestamp(),
        )
