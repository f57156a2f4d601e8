"""
Configuration Management for carwatch

This module provides centralized configuration management with:
- Environment variable loading (configs/.env via python-dotenv)
- Type validation
- Sensible defaults

A Config instance is built once at process start and threaded through
RunContext; core components never look it up from module state.
"""

import os
from pathlib import Path
from typing import List, Optional, Tuple
from dotenv import load_dotenv


DEFAULT_MODELS = "X5,5 Series,i4"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default) not in {"0", "false", "False", ""}


class Config:
    """
    Application configuration loaded from environment variables.

    All configuration is read from configs/.env file or environment variables.
    See configs/.env.example for documentation of all settings.
    """

    def __init__(self, env_path: Optional[Path] = None):
        """
        Initialize configuration from environment.

        Args:
            env_path: Path to .env file (default: configs/.env)
        """
        if env_path is None:
            env_path = Path("configs/.env")

        load_dotenv(dotenv_path=env_path, override=True)

        # === Campaigns ===
        self.campaign_models: List[str] = [
            m.strip() for m in os.getenv("CAMPAIGN_MODELS", DEFAULT_MODELS).split(",") if m.strip()
        ]

        # === Paths ===
        self.data_dir: Path = Path(os.getenv("DATA_DIR", "data"))
        self.audit_dir: Path = Path(os.getenv("AUDIT_DIR", "audit"))

        # === Browser ===
        self.headless: bool = _flag("HEADLESS", "1")

        # === Navigation ===
        self.nav_timeout_ms: int = int(os.getenv("NAV_TIMEOUT_MS", "30000"))
        self.nav_max_attempts: int = int(os.getenv("NAV_MAX_ATTEMPTS", "3"))
        self.nav_retry_delay: float = float(os.getenv("NAV_RETRY_DELAY", "1.5"))
        self.settle_delay_ms: int = int(os.getenv("SETTLE_DELAY_MS", "3000"))
        self.cookie_timeout_ms: int = int(os.getenv("COOKIE_TIMEOUT_MS", "3000"))
        self.min_content_length: int = int(os.getenv("MIN_CONTENT_LENGTH", "1000"))
        self.network_idle_timeout_ms: int = int(os.getenv("NETWORK_IDLE_TIMEOUT_MS", "15000"))
        self.pagination_settle_ms: int = int(os.getenv("PAGINATION_SETTLE_MS", "2000"))

        # === Extraction ===
        self.hydration_timeout_ms: int = int(os.getenv("HYDRATION_TIMEOUT_MS", "15000"))
        self.hydration_poll_ms: int = int(os.getenv("HYDRATION_POLL_MS", "250"))
        self.extraction_timeout_ms: int = int(os.getenv("EXTRACTION_TIMEOUT_MS", "30000"))
        self.retry_extraction_timeout_ms: int = int(os.getenv("RETRY_EXTRACTION_TIMEOUT_MS", "20000"))
        self.tab_recycle_every: int = int(os.getenv("TAB_RECYCLE_EVERY", "25"))
        self.vehicle_delay_min: float = float(os.getenv("VEHICLE_DELAY_MIN", "3"))
        self.vehicle_delay_max: float = float(os.getenv("VEHICLE_DELAY_MAX", "5"))

        # === Supervisor ===
        self.max_process_retries: int = int(os.getenv("MAX_PROCESS_RETRIES", "3"))

        # === Notification (SMTP) ===
        self.smtp_host: str = os.getenv("SMTP_HOST", "smtp.office365.com")
        self.smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
        self.alert_email_user: Optional[str] = os.getenv("ALERT_EMAIL_USER")
        self.alert_email_pass: Optional[str] = os.getenv("ALERT_EMAIL_PASS")
        self.alert_email_to: Optional[str] = os.getenv("ALERT_EMAIL_TO")

        # === Error sink (Supabase, file fallback) ===
        self.supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
        self.supabase_service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        self.error_log_table: str = os.getenv("ERROR_LOG_TABLE", "crawl_errors")
        self.error_log_fallback_dir: Path = Path(os.getenv("ERROR_LOG_FALLBACK_DIR", "logs/errors"))

        # === Logging ===
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: Path = Path(os.getenv("LOG_DIR", "logs"))

    @property
    def vehicle_delay_range(self) -> Tuple[float, float]:
        return self.vehicle_delay_min, self.vehicle_delay_max

    @property
    def email_configured(self) -> bool:
        return bool(self.alert_email_user and self.alert_email_pass and self.alert_email_to)

    def validate(self) -> None:
        """
        Validate configuration.

        Raises:
            ValueError: If any setting is missing or out of range
        """
        errors = []

        if not self.campaign_models:
            errors.append("CAMPAIGN_MODELS must name at least one model")

        if self.nav_max_attempts < 1:
            errors.append(f"NAV_MAX_ATTEMPTS must be at least 1, got {self.nav_max_attempts}")

        if self.nav_timeout_ms <= 0:
            errors.append(f"NAV_TIMEOUT_MS must be positive, got {self.nav_timeout_ms}")

        if self.hydration_timeout_ms <= 0 or self.extraction_timeout_ms <= 0:
            errors.append("HYDRATION_TIMEOUT_MS and EXTRACTION_TIMEOUT_MS must be positive")

        if self.tab_recycle_every < 1:
            errors.append(f"TAB_RECYCLE_EVERY must be at least 1, got {self.tab_recycle_every}")

        if self.vehicle_delay_min > self.vehicle_delay_max:
            errors.append(
                f"VEHICLE_DELAY_MIN ({self.vehicle_delay_min}) cannot be greater than "
                f"VEHICLE_DELAY_MAX ({self.vehicle_delay_max})"
            )

        if self.max_process_retries < 0:
            errors.append(f"MAX_PROCESS_RETRIES must be non-negative, got {self.max_process_retries}")

        if errors:
            raise ValueError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    def __repr__(self) -> str:
        """Return string representation of config (without secrets)."""
        return (
            f"Config(\n"
            f"  campaign_models={self.campaign_models},\n"
            f"  data_dir={self.data_dir},\n"
            f"  headless={self.headless},\n"
            f"  alert_email_user={self.alert_email_user or 'NOT SET'},\n"
            f"  alert_email_pass={'***' if self.alert_email_pass else 'NOT SET'},\n"
            f"  supabase_url={self.supabase_url or 'NOT SET'},\n"
            f"  max_process_retries={self.max_process_retries},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


def load_config(env_path: Optional[Path] = None) -> Config:
    """
    Build and validate a configuration instance.

    Args:
        env_path: Optional path to .env file

    Returns:
        Validated Config

    Raises:
        ValueError: If configuration is invalid
    """
    config = Config(env_path=env_path)
    config.validate()
    return config
