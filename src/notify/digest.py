"""
Digest and per-vehicle alert text built from scored results.
"""

from dataclasses import dataclass
from typing import List, Sequence

from src.models.vehicle import ScoredVehicle


@dataclass
class Digest:
    subject: str
    body: str
    count: int


def rank(results: Sequence[ScoredVehicle]) -> List[ScoredVehicle]:
    """Highest spec match first; ties keep discovery order."""
    return sorted(results, key=lambda v: v.score_percent, reverse=True)


def build_digest(model: str, results: Sequence[ScoredVehicle]) -> Digest:
    """
    Build the run digest from this run's scored vehicles.

    Example:
        >>> build_digest("X5", []).subject
        'BMW X5 Digest: 0 vehicles assessed'
    """
    ranked = rank(results)
    lines = [f"• {v.title} — {v.score_percent}% match\n{v.url}" for v in ranked]
    subject = f"BMW {model} Digest: {len(ranked)} vehicles assessed"
    body = "Here are the top matches:\n\n" + "\n\n".join(lines) if lines else "No new vehicles this run."
    return Digest(subject=subject, body=body, count=len(ranked))


def format_vehicle_alert(vehicle: ScoredVehicle) -> Digest:
    subject = f"{vehicle.title} — {vehicle.score_percent}% Spec Match"
    matched = ", ".join(m.keyword for m in vehicle.matched_specs) or "None"
    body = (
        f"{vehicle.title}\n"
        f"Spec Score: {vehicle.score_percent}% ({vehicle.score:g})\n"
        f"Matched Specs: {matched}\n"
        f"Mileage: {vehicle.mileage if vehicle.mileage is not None else 'N/A'}\n"
        f"{vehicle.url}\n\n"
        f"Scraped at: {vehicle.timestamp}"
    )
    return Digest(subject=subject, body=body, count=1)
