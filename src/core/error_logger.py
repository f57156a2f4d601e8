"""
Centralized error logging with Supabase integration.

The logger:
- Writes structured error records to a Supabase table when credentials are set
- Falls back to local JSONL files otherwise, or when the insert fails
- Never raises
"""

import json
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from supabase import create_client

from src.core.logging import get_logger
from src.core.error_models import (
    ErrorRecord,
    ErrorComponent,
    ErrorSeverity,
)

logger = get_logger(__name__)


class ErrorLogger:
    """
    Error sink with database and file fallback.

    Usage:
        >>> error_logger = ErrorLogger.from_config(config)
        >>> error_logger.log_exception(
        ...     exc,
        ...     component=ErrorComponent.EXTRACTOR,
        ...     stage=ErrorStage.EXTRACT_LISTING,
        ...     model="X5",
        ...     url="https://usedcars.bmw.co.uk/vehicle/abc123",
        ... )
    """

    def __init__(
        self,
        fallback_dir: Path,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        table: str = "crawl_errors",
    ):
        self._client = None
        self._table = table
        self._fallback_dir = Path(fallback_dir)
        self._fallback_dir.mkdir(exist_ok=True, parents=True)

        if not supabase_url or not supabase_key:
            logger.debug("Error logging: Supabase credentials missing, using file fallback")
            return

        try:
            self._client = create_client(supabase_url, supabase_key)
            logger.info("Error logging initialized with Supabase")
        except Exception as e:
            logger.warning(f"Error logging: Database init failed ({e}), using file fallback")

    @classmethod
    def from_config(cls, config) -> "ErrorLogger":
        return cls(
            fallback_dir=config.error_log_fallback_dir,
            supabase_url=config.supabase_url,
            supabase_key=config.supabase_service_role_key,
            table=config.error_log_table,
        )

    @property
    def db_available(self) -> bool:
        return self._client is not None

    def log_exception(
        self,
        exc: BaseException,
        component: ErrorComponent,
        stage: str,
        model: str,
        url: Optional[str] = None,
        vehicle_id: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Log an exception with automatic classification.

        Returns:
            True if the record was written somewhere, False otherwise
        """
        try:
            record = ErrorRecord.from_exception(
                exc,
                component=component,
                stage=stage,
                model=model,
                url=url,
                vehicle_id=vehicle_id,
                severity=severity,
                metadata=metadata,
            )
            return self.write(record)
        except Exception as e:
            logger.error(f"Error logger failed: {e} - Original exception: {type(exc).__name__}")
            return False

    def write(self, record: ErrorRecord) -> bool:
        if self._client is not None:
            return self._write_to_database(record)
        return self._write_to_file(record)

    def _write_to_database(self, record: ErrorRecord) -> bool:
        try:
            self._client.table(self._table).insert(record.model_dump()).execute()
            return True
        except Exception as e:
            logger.warning(f"Database error write failed: {e}, falling back to file")
            return self._write_to_file(record)

    def _write_to_file(self, record: ErrorRecord) -> bool:
        try:
            date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
            file_path = self._fallback_dir / f"errors_{date_str}.jsonl"
            with open(file_path, "a", encoding="utf-8") as f:
                json.dump(record.model_dump(), f)
                f.write("\n")
            return True
        except Exception as e:
            logger.error(f"File error write failed: {e}")
            return False
