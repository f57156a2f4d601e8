"""
Core utilities for carwatch.

This module contains shared utilities used across all components:
- Configuration management
- Structured logging
- Exception taxonomy
- Error logging and tracking
"""

from src.core.logging import get_logger, setup_logging, init_campaign_logging
from src.core.config import Config, load_config
from src.core.errors import (
    CarwatchError,
    ConfigError,
    CrawlError,
    NavigationError,
    InvalidListingUrl,
    ExtractionTimeout,
    EmptyPayload,
    SiteScriptError,
    CrawlStop,
    PaginationStall,
    DuplicatePageDetected,
    PageCapExceeded,
)
from src.core.error_logger import ErrorLogger
from src.core.error_models import (
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
    ErrorStage,
    ErrorRecord,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "init_campaign_logging",
    "Config",
    "load_config",
    "CarwatchError",
    "ConfigError",
    "CrawlError",
    "NavigationError",
    "InvalidListingUrl",
    "ExtractionTimeout",
    "EmptyPayload",
    "SiteScriptError",
    "CrawlStop",
    "PaginationStall",
    "DuplicatePageDetected",
    "PageCapExceeded",
    "ErrorLogger",
    "ErrorComponent",
    "ErrorSeverity",
    "ErrorType",
    "ErrorStage",
    "ErrorRecord",
]
