"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import health_check` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import os
import sys
from datetime import date
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where src/ is the root of the deployed package.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    # Add src/ for Lambda-style imports (from handlers import ...)
    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("BEDROCK_REGION", "eu-west-2")
os.environ.setdefault("MODEL_ID", "anthropic.claude-3-haiku-20240307-v1:0")

# Never reach Bedrock from the suite unless a test opts in with a mocked client.
os.environ.setdefault("LLM_ENHANCEMENT_ENABLED", "false")
os.environ.setdefault("PHRASE_SEED", "0")

# Create a default boto3 session so resources/clients do not error during import.
boto3.setup_default_session(region_name="eu-west-2")


@pytest.fixture(scope="session")
def settings():
    from config.settings import Settings

    return Settings(phrase_seed=0)


@pytest.fixture(scope="session")
def dataset(settings):
    """Full seeded fixture population, built once for the whole run."""
    from repositories.dataset import build_dataset

    return build_dataset(settings)


def make_customer(index: int, **overrides):
    """Customer with sensible defaults; override any field by keyword."""
    from models.dataset import (
        AcquisitionChannel,
        CabinType,
        Customer,
        CustomerSegment,
        Itinerary,
        LoyaltyTier,
    )

    fields = dict(
        customer_id=f"cust-{index:04d}",
        first_name="Test",
        last_name=f"Customer{index}",
        email=f"test{index}@example.com",
        loyalty_tier=LoyaltyTier.SILVER,
        lifetime_value=10_000,
        total_cruises=3,
        first_cruise_date=date(2018, 5, 1),
        last_cruise_date=date(2024, 6, 1),
        preferred_itinerary=Itinerary.CARIBBEAN,
        preferred_cabin_type=CabinType.BALCONY,
        acquisition_channel=AcquisitionChannel.DIRECT_MAIL,
        segment=CustomerSegment.ACTIVE,
    )
    fields.update(overrides)
    return Customer(**fields)


@pytest.fixture
def customer_factory():
    return make_customer
