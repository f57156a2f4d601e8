"""
Run reconciliation: merge this run's scored vehicles into the persisted
ledger and age out listings that have been absent twice in a row.

The archive is append-only history and is never deduplicated.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from src.core.logging import get_logger
from src.models.vehicle import ArchiveEntry, LedgerEntry, ScoredVehicle
from src.store.file_manager import load_json, save_json
from src.utils.date_utils import get_current_timestamp

logger = get_logger(__name__)

MAX_MISSING_RUNS = 2


@dataclass
class ReconcileResult:
    ledger: List[LedgerEntry] = field(default_factory=list)
    archived: List[ArchiveEntry] = field(default_factory=list)
    refreshed: int = 0
    aged: int = 0
    inserted: int = 0


def reconcile(
    previous: Sequence[LedgerEntry],
    results: Sequence[ScoredVehicle],
    now: Optional[str] = None,
) -> ReconcileResult:
    """
    Merge results into the previous ledger.

    Args:
        previous: Ledger as persisted by the last run
        results: Vehicles scored this run
        now: removed_at stamp for archived entries (default: current UTC time)

    Returns:
        ReconcileResult with the new ledger and the entries to archive
    """
    now = now or get_current_timestamp()
    fresh: Dict[str, ScoredVehicle] = {v.id: v for v in results}
    out = ReconcileResult()

    updated: List[LedgerEntry] = []
    known_ids = set()
    for entry in previous:
        known_ids.add(entry.id)
        if entry.id in fresh:
            updated.append(LedgerEntry(**fresh[entry.id].model_dump(), missing_count=0))
            out.refreshed += 1
        else:
            updated.append(entry.model_copy(update={"missing_count": entry.missing_count + 1}))
            out.aged += 1

    for entry in updated:
        if entry.missing_count >= MAX_MISSING_RUNS:
            out.archived.append(ArchiveEntry(**entry.model_dump(), removed_at=now))
        else:
            out.ledger.append(entry)

    for vid, vehicle in fresh.items():
        if vid not in known_ids:
            out.ledger.append(LedgerEntry(**vehicle.model_dump(), missing_count=0))
            out.inserted += 1

    logger.info(
        f"[ledger] refreshed={out.refreshed} aged={out.aged} inserted={out.inserted} "
        f"archived={len(out.archived)} total={len(out.ledger)}"
    )
    return out


class LedgerStore:
    """JSON persistence for one model's ledger and removal archive."""

    def __init__(self, ledger_path: Path, archive_path: Path):
        self.ledger_path = Path(ledger_path)
        self.archive_path = Path(archive_path)

    @classmethod
    def for_paths(cls, paths) -> "LedgerStore":
        return cls(paths.ledger, paths.archive)

    def load(self) -> List[LedgerEntry]:
        entries: List[LedgerEntry] = []
        for raw in load_json(self.ledger_path, default=[]) or []:
            try:
                entries.append(LedgerEntry.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"[ledger] Dropping unreadable entry {raw.get('id') if isinstance(raw, dict) else raw!r}: {e}")
        return entries

    def save(self, entries: Sequence[LedgerEntry]) -> None:
        save_json(self.ledger_path, [e.model_dump() for e in entries])

    def load_archive(self) -> List[dict]:
        return load_json(self.archive_path, default=[]) or []

    def append_archive(self, archived: Sequence[ArchiveEntry]) -> None:
        if not archived:
            return
        history = self.load_archive()
        history.extend(e.model_dump() for e in archived)
        save_json(self.archive_path, history)

    def apply(self, result: ReconcileResult) -> None:
        self.save(result.ledger)
        self.append_archive(result.archived)
