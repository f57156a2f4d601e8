"""
File I/O for persisted campaign state.

Per-model state lives under the data directory, keyed by a filesystem-safe
model name:
    data/seen_vehicles_<model>.json
    data/seen_registrations_<model>.json
    data/output_<model>.json          (ledger)
    data/removed_vehicles_<model>.json (archive)
    data/alerts_<model>.txt
    data/skipped_ids_<model>.txt
Shared across models:
    data/reprocess_queue.txt
    data/permanent_failures.txt
    data/checkpoint.json
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.core.logging import get_logger
from src.utils.url_utils import safe_model_name

logger = get_logger(__name__)


def load_json(path: Path, default: Any = None) -> Any:
    """
    Read a JSON file, returning `default` when it is missing or unparseable.

    Example:
        >>> load_json(Path("data/does_not_exist.json"), default=[])
        []
    """
    path = Path(path)
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Failed to parse {path}: {e}")
        return default


def save_json(path: Path, data: Any) -> None:
    """Write JSON through a temp file so a crash never leaves half a file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
    os.replace(tmp, path)


def append_line(path: Path, text: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(text.rstrip("\n") + "\n")


@dataclass(frozen=True)
class CampaignPaths:
    """All persisted locations for one target model."""

    data_dir: Path
    audit_root: Path
    model: str

    @property
    def key(self) -> str:
        return safe_model_name(self.model)

    @property
    def seen_ids(self) -> Path:
        return self.data_dir / f"seen_vehicles_{self.key}.json"

    @property
    def seen_registrations(self) -> Path:
        return self.data_dir / f"seen_registrations_{self.key}.json"

    @property
    def ledger(self) -> Path:
        return self.data_dir / f"output_{self.key}.json"

    @property
    def archive(self) -> Path:
        return self.data_dir / f"removed_vehicles_{self.key}.json"

    @property
    def alerts(self) -> Path:
        return self.data_dir / f"alerts_{self.key}.txt"

    @property
    def skipped_ids(self) -> Path:
        return self.data_dir / f"skipped_ids_{self.key}.txt"

    @property
    def reprocess_queue(self) -> Path:
        return self.data_dir / "reprocess_queue.txt"

    @property
    def permanent_failures(self) -> Path:
        return self.data_dir / "permanent_failures.txt"

    @property
    def checkpoint(self) -> Path:
        return self.data_dir / "checkpoint.json"

    @property
    def audit_dir(self) -> Path:
        return self.audit_root / self.key


def write_lines(path: Path, lines) -> None:
    """Overwrite a plain-text file with one entry per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), "utf-8")
