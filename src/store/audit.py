"""
Audit artifacts for unattended runs.

Plain-text logs are append-only and always written. DOM dumps, screenshots
and per-page JSON are diagnostic artifacts and only captured when the audit
toggle is on. Capturing an artifact never raises.
"""

from pathlib import Path
from typing import Any

from src.core.logging import get_logger
from src.store.file_manager import append_line, save_json
from src.utils.date_utils import get_current_timestamp

logger = get_logger(__name__)


class AuditRecorder:
    def __init__(self, audit_dir: Path, enabled: bool = False):
        self.audit_dir = Path(audit_dir)
        self.enabled = enabled

    def path(self, name: str) -> Path:
        return self.audit_dir / name

    def log(self, name: str, message: str, stamp: bool = True) -> None:
        """Append one entry to a plain-text audit log."""
        line = f"{get_current_timestamp()} — {message}" if stamp else message
        try:
            append_line(self.path(name), line)
        except OSError as e:
            logger.warning(f"[audit] Failed to append to {name}: {e}")

    def write_json(self, name: str, data: Any) -> None:
        if not self.enabled:
            return
        try:
            save_json(self.path(name), data)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"[audit] Failed to write {name}: {e}")

    async def snapshot(self, tab, tag: str) -> None:
        """Save the tab's DOM and a screenshot as <tag>.html / <tag>.png."""
        if not self.enabled or tab is None or tab.is_closed():
            return
        try:
            self.audit_dir.mkdir(parents=True, exist_ok=True)
            self.path(f"{tag}.html").write_text(await tab.content(), "utf-8")
            await tab.screenshot(self.path(f"{tag}.png"))
        except Exception as e:
            logger.warning(f"[audit] Failed to capture {tag}: {e}")
