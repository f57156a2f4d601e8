"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all tests in the test suite.
"""

import pytest
from pathlib import Path
from typing import Dict, Any, List

from src.core.config import Config
from src.core.context import RunContext
from src.models.vehicle import ScoredVehicle, VehicleRecord


# ============================================================================
# Paths and Directories
# ============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for persisted state."""
    path = tmp_path / "data"
    path.mkdir(exist_ok=True)
    return path


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def config(tmp_path: Path, data_dir: Path) -> Config:
    """Config with temporary directories and no throttling delays."""
    cfg = Config(env_path=tmp_path / "missing.env")
    cfg.campaign_models = ["X5", "5 Series", "i4"]
    cfg.data_dir = data_dir
    cfg.audit_dir = tmp_path / "audit"
    cfg.log_dir = tmp_path / "logs"
    cfg.error_log_fallback_dir = tmp_path / "logs" / "errors"
    cfg.nav_max_attempts = 3
    cfg.nav_retry_delay = 0
    cfg.vehicle_delay_min = 0
    cfg.vehicle_delay_max = 0
    cfg.hydration_timeout_ms = 1000
    cfg.hydration_poll_ms = 250
    cfg.extraction_timeout_ms = 30000
    cfg.retry_extraction_timeout_ms = 20000
    cfg.tab_recycle_every = 25
    cfg.min_content_length = 1000
    cfg.max_process_retries = 3
    cfg.supabase_url = None
    cfg.supabase_service_role_key = None
    return cfg


@pytest.fixture
def run_context(config: Config) -> RunContext:
    """RunContext for the X5 campaign."""
    return RunContext(config=config, model="X5")


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """Return a hydration payload as read from window.UVL.AD."""
    return {
        "advert_id": "39212",
        "engine": {"fuel": "Petrol Plug-in Hybrid", "power": {"value": 489}, "size": {"litres": 3.0}},
        "condition_and_state": {"mileage": 8450, "manufactured_year": 2023},
        "dates": {"registration": "2023-09-01"},
        "battery": {"range": {"value": 67}},
        "consumption": {"co2": {"value": 26}},
        "fuel_category": "Hybrid",
        "features": {
            "additional": [{"description": "Comfort Plus Pack"}, {"description": "Sky Lounge panoramic roof"}],
            "standard": [{"description": "Heated front seats"}],
            "interior": {"additional": ["Bowers & Wilkins Diamond Surround Sound"], "standard": ["Ambient lighting"]},
            "exterior": {"additional": [], "standard": ["LED headlights"]},
        },
    }


@pytest.fixture
def make_scored():
    """Factory for ScoredVehicle records."""

    def _make(vehicle_id: str, score_percent: int = 50, registration: str = None, features: List[str] = None) -> ScoredVehicle:
        record = VehicleRecord(
            id=vehicle_id,
            title=f"BMW X5 {vehicle_id}",
            url=f"https://usedcars.bmw.co.uk/vehicle/{vehicle_id}",
            registration=registration,
            features=features or [],
        )
        return ScoredVehicle(
            **record.model_dump(),
            score=score_percent / 10,
            score_percent=score_percent,
            timestamp="2026-01-01T00:00:00+00:00",
        )

    return _make


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
