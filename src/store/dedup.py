"""
Persisted sets of previously seen listing ids and registrations.

Entries are only ever added. Ageing listings out is the ledger's job, not
this store's.
"""

from pathlib import Path
from typing import Iterable, List

from src.core.logging import get_logger
from src.store.file_manager import load_json, save_json
from src.utils.url_utils import strip_query

logger = get_logger(__name__)


def _ordered_unique(values: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for v in values:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


class DedupStore:
    """Seen ids and seen registrations for one target model."""

    def __init__(self, ids_path: Path, registrations_path: Path):
        self._ids_path = Path(ids_path)
        self._registrations_path = Path(registrations_path)
        self._ids: List[str] = []
        self._id_set = set()
        self._registrations: List[str] = []
        self._registration_set = set()

    @classmethod
    def for_paths(cls, paths) -> "DedupStore":
        return cls(paths.seen_ids, paths.seen_registrations)

    def load(self) -> "DedupStore":
        raw_ids = load_json(self._ids_path, default=[]) or []
        raw_regs = load_json(self._registrations_path, default=[]) or []
        self._ids = _ordered_unique(strip_query(str(i)) for i in raw_ids)
        self._id_set = set(self._ids)
        self._registrations = _ordered_unique(str(r).strip() for r in raw_regs)
        self._registration_set = set(self._registrations)
        logger.info(f"[dedup] Loaded {len(self._ids)} seen ids, {len(self._registrations)} seen registrations")
        return self

    def persist(self) -> None:
        save_json(self._ids_path, self._ids)
        save_json(self._registrations_path, self._registrations)
        logger.info(f"[dedup] Saved {len(self._ids)} seen ids, {len(self._registrations)} seen registrations")

    def contains_id(self, vehicle_id: str) -> bool:
        return strip_query(vehicle_id) in self._id_set

    def contains_registration(self, registration: str) -> bool:
        return bool(registration) and registration.strip() in self._registration_set

    def add_id(self, vehicle_id: str) -> None:
        vid = strip_query(vehicle_id)
        if vid and vid not in self._id_set:
            self._id_set.add(vid)
            self._ids.append(vid)

    def add_registration(self, registration: str) -> None:
        reg = (registration or "").strip()
        if reg and reg not in self._registration_set:
            self._registration_set.add(reg)
            self._registrations.append(reg)

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    @property
    def registrations(self) -> List[str]:
        return list(self._registrations)
