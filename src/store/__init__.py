"""
Persisted campaign state: dedup sets, ledger and archive, reprocess queue,
process checkpoint and audit logs.
"""

from src.store.file_manager import CampaignPaths, load_json, save_json, append_line, write_lines
from src.store.dedup import DedupStore
from src.store.ledger import LedgerStore, ReconcileResult, reconcile, MAX_MISSING_RUNS
from src.store.reprocess_queue import ReprocessQueue, QueuedListing
from src.store.checkpoint import Checkpoint, CheckpointStore
from src.store.audit import AuditRecorder

__all__ = [
    "CampaignPaths",
    "load_json",
    "save_json",
    "append_line",
    "write_lines",
    "DedupStore",
    "LedgerStore",
    "ReconcileResult",
    "reconcile",
    "MAX_MISSING_RUNS",
    "ReprocessQueue",
    "QueuedListing",
    "Checkpoint",
    "CheckpointStore",
    "AuditRecorder",
]
