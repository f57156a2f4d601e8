"""
Process-level checkpoint: which campaign model is next and how many times
the current one has crashed.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.core.logging import get_logger
from src.store.file_manager import load_json, save_json

logger = get_logger(__name__)


class Checkpoint(BaseModel):
    model_index: int = Field(0, ge=0)
    retry_count: int = Field(0, ge=0)

    model_config = ConfigDict(protected_namespaces=())

    def advanced(self) -> "Checkpoint":
        return Checkpoint(model_index=self.model_index + 1, retry_count=0)

    def retried(self) -> "Checkpoint":
        return Checkpoint(model_index=self.model_index, retry_count=self.retry_count + 1)


class CheckpointStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Checkpoint:
        raw = load_json(self.path, default=None)
        if raw is None:
            return Checkpoint()
        try:
            return Checkpoint.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"[checkpoint] Ignoring unreadable checkpoint {self.path}: {e}")
            return Checkpoint()

    def save(self, checkpoint: Checkpoint) -> None:
        save_json(self.path, checkpoint.model_dump())

    def reset(self) -> None:
        self.save(Checkpoint())
