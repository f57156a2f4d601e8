"""
Spec-match scoring against per-model weighted keyword tables.
"""

from src.scoring.spec_scorer import SpecScorer, SpecScore, normalize

__all__ = ["SpecScorer", "SpecScore", "normalize"]
