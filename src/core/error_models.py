"""
Pydantic models for structured error logging.

Error records are validated before they reach the sink so that logging a
failure can never itself fail on malformed input.
"""

import json
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict

from src.core.errors import (
    ConfigError,
    EmptyPayload,
    ExtractionTimeout,
    InvalidListingUrl,
    NavigationError,
    SiteScriptError,
)


class ErrorComponent(str, Enum):
    """System components that can generate errors."""
    CRAWLER = "crawler"
    EXTRACTOR = "extractor"
    STORE = "store"
    NOTIFY = "notify"
    SUPERVISOR = "supervisor"
    CONFIG = "config"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """Error severity levels matching logging standards."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorType(str, Enum):
    """Categorized error types for classification."""
    NAVIGATION_ERROR = "navigation_error"
    INVALID_URL = "invalid_url"
    EXTRACTION_TIMEOUT = "extraction_timeout"
    EMPTY_PAYLOAD = "empty_payload"
    SITE_SCRIPT_ERROR = "site_script_error"
    CONFIG_ERROR = "config_error"
    TIMEOUT = "timeout"
    BROWSER_ERROR = "browser_error"
    FILE_ERROR = "file_error"
    JSON_ERROR = "json_error"
    UNKNOWN = "unknown"


class ErrorStage:
    """Standardized stage names for error logging."""
    NAVIGATE_SCRIPT = "navigate_script"
    DISCOVER_LISTINGS = "discover_listings"
    NAVIGATE_LISTING = "navigate_listing"
    EXTRACT_LISTING = "extract_listing"
    RECOVER_LISTING = "recover_listing"
    REPLAY_QUEUE = "replay_queue"
    PAGINATE = "paginate"
    RECONCILE = "reconcile"
    PERSIST = "persist"
    NOTIFY = "notify"
    CAMPAIGN = "campaign"


_KNOWN_TYPES = (
    (InvalidListingUrl, ErrorType.INVALID_URL),
    (NavigationError, ErrorType.NAVIGATION_ERROR),
    (ExtractionTimeout, ErrorType.EXTRACTION_TIMEOUT),
    (EmptyPayload, ErrorType.EMPTY_PAYLOAD),
    (SiteScriptError, ErrorType.SITE_SCRIPT_ERROR),
    (ConfigError, ErrorType.CONFIG_ERROR),
)


class ErrorRecord(BaseModel):
    """Structured error record for the error sink."""

    component: ErrorComponent = Field(..., description="System component")
    stage: str = Field(..., min_length=1, max_length=100, description="Processing stage")
    error_type: ErrorType = Field(..., description="Error category")
    severity: ErrorSeverity = Field(default=ErrorSeverity.ERROR, description="Severity level")
    model: str = Field(..., min_length=1, max_length=100, description="Target model of the campaign")
    message: str = Field(..., min_length=1, description="Human-readable error message")

    url: Optional[str] = Field(None, max_length=2048, description="Listing or page URL")
    vehicle_id: Optional[str] = Field(None, max_length=255, description="Listing id if known")
    exception_type: Optional[str] = Field(None, max_length=255, description="Exception class name")
    stack_trace: Optional[str] = Field(None, description="Stack trace for unexpected errors")

    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional context")

    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Error timestamp"
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    @field_validator("stage")
    @classmethod
    def validate_stage(cls, v: str) -> str:
        """Normalize stage names to snake_case."""
        return v.strip().lower().replace(" ", "_") or "unknown"

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        return v.strip()[:5000] or "No error message provided"

    @field_validator("metadata")
    @classmethod
    def sanitize_metadata(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Convert values that are not JSON-serializable to strings."""
        sanitized = {}
        for key, value in v.items():
            try:
                json.dumps(value)
                sanitized[key] = value
            except (TypeError, ValueError):
                sanitized[key] = str(value)
        return sanitized

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        component: ErrorComponent,
        stage: str,
        model: str,
        url: Optional[str] = None,
        vehicle_id: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ErrorRecord":
        """
        Create an ErrorRecord from an exception with automatic classification.

        Crawl errors carry their own url/vehicle_id, which are used when the
        caller does not pass them explicitly.
        """
        error_type = cls._classify_exception(exc)
        stack_trace = None
        if error_type in (ErrorType.UNKNOWN, ErrorType.BROWSER_ERROR) or severity == ErrorSeverity.CRITICAL:
            stack_trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))[:10000]

        return cls(
            component=component,
            stage=stage,
            error_type=error_type,
            severity=severity,
            model=model,
            url=url or getattr(exc, "url", None),
            vehicle_id=vehicle_id or getattr(exc, "vehicle_id", None),
            message=str(exc) or f"{type(exc).__name__} occurred",
            exception_type=f"{type(exc).__module__}.{type(exc).__name__}",
            stack_trace=stack_trace,
            metadata=metadata or {},
        )

    @staticmethod
    def _classify_exception(exc: BaseException) -> ErrorType:
        for exc_cls, error_type in _KNOWN_TYPES:
            if isinstance(exc, exc_cls):
                return error_type

        exc_name = type(exc).__name__.lower()
        if "timeout" in exc_name or "timeout" in str(exc).lower():
            return ErrorType.TIMEOUT
        if "json" in exc_name:
            return ErrorType.JSON_ERROR
        if "playwright" in type(exc).__module__ or "target" in exc_name or "browser" in exc_name:
            return ErrorType.BROWSER_ERROR
        if isinstance(exc, OSError):
            return ErrorType.FILE_ERROR
        return ErrorType.UNKNOWN
