"""Dataset entities: customers, bookings and campaigns."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import CamelModel


class LoyaltyTier(str, Enum):
    """Loyalty tiers; declaration order is the rank."""

    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"

    @property
    def rank(self) -> int:
        return list(LoyaltyTier).index(self)


class Itinerary(str, Enum):
    """Cruise destinations."""

    CARIBBEAN = "Caribbean"
    ALASKA = "Alaska"
    EUROPE = "Europe"
    MEDITERRANEAN = "Mediterranean"
    HAWAII = "Hawaii"
    ASIA = "Asia"
    AUSTRALIA = "Australia"


# Destinations sold in the generated booking population.
CORE_ITINERARIES = (
    Itinerary.CARIBBEAN,
    Itinerary.ALASKA,
    Itinerary.EUROPE,
    Itinerary.MEDITERRANEAN,
)


class CabinType(str, Enum):
    """Cabin categories in price order."""

    INSIDE = "Inside"
    OCEAN_VIEW = "Ocean View"
    BALCONY = "Balcony"
    SUITE = "Suite"


class CampaignType(str, Enum):
    """Campaign intent."""

    PROSPECTING = "Prospecting"
    REACTIVATION = "Reactivation"
    RETARGETING = "Retargeting"


class MarketingChannel(str, Enum):
    """Channels a campaign can run on."""

    DIRECT_MAIL = "Direct Mail"
    EMAIL = "Email"
    DISPLAY = "Display"
    PAID_SEARCH = "Paid Search"
    ORGANIC_SEARCH = "Organic Search"
    PINTEREST = "Pinterest"
    PROGRAMMATIC_DISPLAY = "Programmatic Display"
    TIKTOK = "TikTok"


class AcquisitionChannel(str, Enum):
    """How a customer first arrived."""

    DIRECT_MAIL = "Direct Mail"
    EMAIL = "Email"
    ORGANIC = "Organic"
    REFERRAL = "Referral"
    PAID_SEARCH = "Paid Search"


class CustomerSegment(str, Enum):
    """Lifecycle segment assigned when the customer record is generated."""

    PROSPECT = "Prospect"
    ACTIVE = "Active"
    LAPSED = "Lapsed"
    VIP = "VIP"


class Customer(CamelModel):
    """Customer profile. ``segment`` is fixed at generation time."""

    customer_id: str
    first_name: str
    last_name: str
    email: str
    loyalty_tier: LoyaltyTier
    lifetime_value: int = Field(ge=0)
    total_cruises: int = Field(ge=0)
    first_cruise_date: date
    last_cruise_date: date
    preferred_itinerary: Itinerary
    preferred_cabin_type: CabinType
    acquisition_channel: AcquisitionChannel
    segment: CustomerSegment

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Booking(CamelModel):
    """Booking record; ``campaign_id`` is None for organic bookings."""

    booking_id: str
    customer_id: str
    booking_date: date
    sail_date: date
    itinerary: Itinerary
    cabin_type: CabinType
    revenue: int = Field(ge=0)
    campaign_id: Optional[str] = None
    is_new_customer: bool = False


class Campaign(CamelModel):
    """Marketing campaign. Bookings point at it by id; it keeps no back-reference."""

    campaign_id: str
    campaign_name: str
    campaign_type: CampaignType
    launch_date: date
    mail_volume: int = Field(ge=0)
    ad_spend: float = Field(ge=0)
    channel: MarketingChannel
