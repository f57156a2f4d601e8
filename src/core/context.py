"""
Run context threaded through every campaign component.

Replaces process-wide state: the active model, its position in the campaign
list, the retry counter and the run toggles all travel in one value.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.core.config import Config
from src.core.error_logger import ErrorLogger
from src.store.audit import AuditRecorder
from src.store.file_manager import CampaignPaths
from src.utils.date_utils import file_timestamp


@dataclass
class RunContext:
    config: Config
    model: str
    model_index: int = 0
    retry_count: int = 0
    dry_run: bool = False
    max_pages: Optional[int] = None
    audit_enabled: bool = False
    error_logger: Optional[ErrorLogger] = None
    run_id: str = field(default_factory=file_timestamp)

    def __post_init__(self):
        self.paths = CampaignPaths(self.config.data_dir, self.config.audit_dir, self.model)
        self.audit = AuditRecorder(self.paths.audit_dir, enabled=self.audit_enabled)

    def describe(self) -> str:
        flags = []
        if self.dry_run:
            flags.append("dry")
        if self.max_pages:
            flags.append(f"max_pages={self.max_pages}")
        if self.audit_enabled:
            flags.append("audit")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.model} (index {self.model_index}, retry {self.retry_count}){suffix}"
