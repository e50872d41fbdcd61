"""
Read-only dataset container.

Built once per process from the seeded generators and injected into the
services; tests build small datasets by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import cached_property
from typing import Dict, FrozenSet, Optional, Tuple

from config.settings import Settings, get_settings
from models.dataset import Booking, Campaign, CampaignType, Customer
from repositories.generators import generate_bookings, generate_campaigns, generate_customers
from utils.logging_config import get_logger

logger = get_logger(__name__)

REFERENCE_DATE = date(2025, 2, 1)


@dataclass(frozen=True)
class Dataset:
    """Immutable snapshot of customers, bookings and campaigns."""

    customers: Tuple[Customer, ...]
    bookings: Tuple[Booking, ...]
    campaigns: Tuple[Campaign, ...]
    reference_date: date = REFERENCE_DATE

    @cached_property
    def campaigns_by_id(self) -> Dict[str, Campaign]:
        return {c.campaign_id: c for c in self.campaigns}

    @cached_property
    def customers_by_id(self) -> Dict[str, Customer]:
        return {c.customer_id: c for c in self.customers}

    def campaign_ids_for_type(self, campaign_type: CampaignType) -> FrozenSet[str]:
        return frozenset(
            c.campaign_id for c in self.campaigns if c.campaign_type == campaign_type
        )


def build_dataset(settings: Optional[Settings] = None) -> Dataset:
    """Generate the full fixture population."""
    settings = settings or get_settings()
    customers = generate_customers(
        settings.customer_count, settings.customer_seed, settings.reference_date
    )
    campaigns = generate_campaigns(settings.campaign_seed)
    bookings = generate_bookings(
        customers,
        campaigns,
        seed=settings.booking_seed,
        organic_count=settings.organic_booking_count,
        end_date=settings.reference_date,
    )
    logger.info(
        "Dataset built",
        extra={
            "customers": len(customers),
            "campaigns": len(campaigns),
            "bookings": len(bookings),
        },
    )
    return Dataset(
        customers=tuple(customers),
        bookings=tuple(bookings),
        campaigns=tuple(campaigns),
        reference_date=settings.reference_date,
    )


_dataset: Optional[Dataset] = None


def get_dataset() -> Dataset:
    """Lazy-load the process-wide dataset (survives warm invocations)."""
    global _dataset
    if _dataset is None:
        _dataset = build_dataset()
    return _dataset
