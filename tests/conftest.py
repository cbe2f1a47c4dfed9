"""
Pytest configuration and fixtures

All engines are pure: fixtures build fresh instances per test and never
touch the network or disk beyond the packaged YAML config.
"""
import pytest
import sys
import os
from datetime import date

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.cycle_framework import (  # noqa: E402
    ConfigService,
    CycleProfile,
    CyclePhaseCalculator,
    StaticContentCatalog,
)

ANCHOR = date(2024, 3, 1)


@pytest.fixture
def anchor_date():
    return ANCHOR


@pytest.fixture
def calculator():
    return CyclePhaseCalculator()


@pytest.fixture
def profile():
    """28-day cycle, 5-day period, last period started 2024-03-01."""
    return CycleProfile(
        anchor_date=ANCHOR,
        cycle_length_days=28,
        period_length_days=5,
        profile_id="test-profile-001",
    )


@pytest.fixture
def empty_profile():
    """No period logged yet."""
    return CycleProfile(anchor_date=None, profile_id="test-profile-002")


@pytest.fixture
def config_service():
    return ConfigService()


@pytest.fixture
def catalog(config_service):
    return StaticContentCatalog.from_config(config_service)
