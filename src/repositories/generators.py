"""
Seeded generators for the synthetic cruise marketing population.

Each generator owns its own ``random.Random`` so the population is identical
on every process start.
"""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Dict, List, Sequence

from models.dataset import (
    CORE_ITINERARIES,
    AcquisitionChannel,
    Booking,
    CabinType,
    Campaign,
    CampaignType,
    Customer,
    CustomerSegment,
    Itinerary,
    LoyaltyTier,
    MarketingChannel,
)
from utils.dates import shift_months
from utils.numbers import round_half_up

FIRST_NAMES = [
    "James", "Mary", "Robert", "Patricia", "John", "Jennifer", "Michael", "Linda",
    "David", "Elizabeth", "William", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
    "Thomas", "Sarah", "Charles", "Karen", "Christopher", "Lisa", "Daniel", "Nancy",
    "Matthew", "Betty", "Anthony", "Margaret", "Mark", "Sandra", "Donald", "Ashley",
    "Steven", "Kimberly", "Paul", "Emily", "Andrew", "Donna", "Joshua", "Michelle",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas",
    "Taylor", "Moore", "Jackson", "Martin", "Lee", "Perez", "Thompson", "White",
    "Harris", "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson", "Walker", "Young",
]

CABIN_TYPES = list(CabinType)
LOYALTY_TIERS = list(LoyaltyTier)
ACQUISITION_CHANNELS = list(AcquisitionChannel)

# (min, max) revenue per booking by cabin.
REVENUE_RANGES: Dict[CabinType, tuple] = {
    CabinType.INSIDE: (1800, 3500),
    CabinType.OCEAN_VIEW: (2800, 4500),
    CabinType.BALCONY: (4000, 7000),
    CabinType.SUITE: (7000, 15000),
}

# Attributed booking rate per impression.
CONVERSION_RATES: Dict[CampaignType, float] = {
    CampaignType.RETARGETING: 0.015,
    CampaignType.REACTIVATION: 0.008,
    CampaignType.PROSPECTING: 0.003,
}

DEFAULT_ITINERARY_WEIGHTS = [45, 15, 20, 20]

# Itinerary weights (Caribbean, Alaska, Europe, Mediterranean) for themed campaigns.
THEMED_ITINERARY_WEIGHTS: Dict[Itinerary, List[int]] = {
    Itinerary.CARIBBEAN: [70, 10, 10, 10],
    Itinerary.ALASKA: [15, 60, 10, 15],
    Itinerary.MEDITERRANEAN: [15, 5, 15, 65],
    Itinerary.EUROPE: [15, 10, 55, 20],
}

CABIN_WEIGHTS_BY_TIER: Dict[LoyaltyTier, List[int]] = {
    LoyaltyTier.PLATINUM: [5, 15, 30, 50],
    LoyaltyTier.GOLD: [10, 25, 40, 25],
    LoyaltyTier.SILVER: [25, 35, 30, 10],
    LoyaltyTier.BRONZE: [40, 35, 20, 5],
}

SEASONS = [
    "Wave Season", "Late Winter", "Spring Break", "Spring", "Early Summer", "Summer",
    "Midsummer", "Late Summer", "Fall", "Autumn", "Black Friday", "Holiday",
]

CAMPAIGN_THEMES = [
    Itinerary.CARIBBEAN,
    Itinerary.ALASKA,
    Itinerary.MEDITERRANEAN,
    Itinerary.EUROPE,
]

DIGITAL_TESTS = [
    MarketingChannel.PAID_SEARCH,
    MarketingChannel.PINTEREST,
    MarketingChannel.TIKTOK,
    MarketingChannel.PROGRAMMATIC_DISPLAY,
]


def _weighted(rng: random.Random, items: Sequence, weights: Sequence[float]):
    return rng.choices(items, weights=weights, k=1)[0]


def _generate_customer(rng: random.Random, index: int, reference_date: date) -> Customer:
    first_name = rng.choice(FIRST_NAMES)
    last_name = rng.choice(LAST_NAMES)

    tier = _weighted(rng, LOYALTY_TIERS, [50, 30, 15, 5])
    if tier is LoyaltyTier.PLATINUM:
        total_cruises = 8 + rng.randrange(15)
        months_ago = rng.randrange(6)
    elif tier is LoyaltyTier.GOLD:
        total_cruises = 4 + rng.randrange(6)
        months_ago = rng.randrange(12)
    elif tier is LoyaltyTier.SILVER:
        total_cruises = 2 + rng.randrange(3)
        months_ago = rng.randrange(18)
    else:
        # Bronze customers may be very lapsed
        total_cruises = 1 + rng.randrange(2)
        months_ago = rng.randrange(30)

    avg_cruise_value = _weighted(rng, [2500, 3500, 5000, 8000], [40, 30, 20, 10])
    lifetime_value = round_half_up(total_cruises * avg_cruise_value * (0.8 + rng.random() * 0.4))

    last_cruise = shift_months(reference_date, -months_ago)
    years_as_customer = int(total_cruises * 0.5 + rng.random() * 2)
    first_cruise = date(reference_date.year - years_as_customer, rng.randrange(12) + 1, 1)
    first_cruise = min(first_cruise, last_cruise)

    if lifetime_value > 50000 and months_ago < 12:
        segment = CustomerSegment.VIP
    elif months_ago > 18:
        segment = CustomerSegment.LAPSED
    elif total_cruises == 1 and months_ago > 12:
        segment = CustomerSegment.PROSPECT
    else:
        segment = CustomerSegment.ACTIVE

    return Customer(
        customer_id=f"cust-{index:04d}",
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}.{last_name.lower()}{index}@example.com",
        loyalty_tier=tier,
        lifetime_value=lifetime_value,
        total_cruises=total_cruises,
        first_cruise_date=first_cruise,
        last_cruise_date=last_cruise,
        preferred_itinerary=_weighted(rng, CORE_ITINERARIES, DEFAULT_ITINERARY_WEIGHTS),
        preferred_cabin_type=_weighted(rng, CABIN_TYPES, CABIN_WEIGHTS_BY_TIER[tier]),
        acquisition_channel=_weighted(rng, ACQUISITION_CHANNELS, [35, 25, 20, 10, 10]),
        segment=segment,
    )


def generate_customers(count: int, seed: int, reference_date: date) -> List[Customer]:
    """Generate ``count`` customers (ids ``cust-0001`` onward)."""
    rng = random.Random(seed)
    return [_generate_customer(rng, i, reference_date) for i in range(1, count + 1)]


def generate_campaigns(seed: int, first_month: date = date(2024, 1, 1), months: int = 13) -> List[Campaign]:
    """One monthly set of mail and digital campaigns from ``first_month`` on."""
    rng = random.Random(seed)
    campaigns: List[Campaign] = []

    def add(name, campaign_type, channel, launch, mail_volume, ad_spend):
        campaigns.append(
            Campaign(
                campaign_id=f"camp-{len(campaigns) + 1:03d}",
                campaign_name=name,
                campaign_type=campaign_type,
                launch_date=launch,
                mail_volume=mail_volume,
                ad_spend=ad_spend,
                channel=channel,
            )
        )

    for i in range(months):
        start = shift_months(first_month, i)
        season = SEASONS[start.month - 1]
        launch = start.replace(day=rng.randint(1, 20))
        theme = CAMPAIGN_THEMES[i % len(CAMPAIGN_THEMES)]
        winback_theme = CAMPAIGN_THEMES[(i + 2) % len(CAMPAIGN_THEMES)]

        mail = rng.randint(30, 60) * 1000
        add(f"{theme.value} {season} Prospecting", CampaignType.PROSPECTING,
            MarketingChannel.DIRECT_MAIL, launch, mail, round(mail * 0.55, 2))

        mail = rng.randint(10, 25) * 1000
        add(f"{winback_theme.value} {season} Reactivation", CampaignType.REACTIVATION,
            MarketingChannel.DIRECT_MAIL, launch, mail, round(mail * 0.60, 2))

        channel = MarketingChannel.EMAIL if i % 2 == 0 else MarketingChannel.DISPLAY
        add(f"{season} Site Retargeting", CampaignType.RETARGETING,
            channel, launch + timedelta(days=5), 0, float(rng.randint(10, 25) * 100))

        if i % 3 == 0:
            test_channel = DIGITAL_TESTS[(i // 3) % len(DIGITAL_TESTS)]
            add(f"{test_channel.value} {season} Awareness Test", CampaignType.PROSPECTING,
                test_channel, launch, 0, float(rng.randint(2, 6) * 1000))

    return campaigns


def _itinerary_weights(campaign_name: str) -> List[int]:
    for theme, weights in THEMED_ITINERARY_WEIGHTS.items():
        if theme.value in campaign_name:
            return weights
    return DEFAULT_ITINERARY_WEIGHTS


def _revenue(rng: random.Random, cabin: CabinType) -> int:
    low, high = REVENUE_RANGES[cabin]
    return round_half_up(low + rng.random() * (high - low))


def generate_bookings(
    customers: Sequence[Customer],
    campaigns: Sequence[Campaign],
    seed: int,
    organic_count: int,
    start_date: date = date(2024, 1, 1),
    end_date: date = date(2025, 2, 1),
) -> List[Booking]:
    """Attributed bookings per campaign plus organic bookings, sorted by booking date."""
    rng = random.Random(seed)
    bookings: List[Booking] = []
    if not customers:
        return bookings

    def next_id() -> str:
        return f"book-{len(bookings) + 1:05d}"

    for campaign in campaigns:
        if campaign.launch_date > end_date:
            continue
        impressions = campaign.mail_volume if campaign.mail_volume > 0 else campaign.ad_spend * 10
        expected = int(impressions * CONVERSION_RATES[campaign.campaign_type])
        weights = _itinerary_weights(campaign.campaign_name)

        for _ in range(expected):
            customer = rng.choice(customers)
            booking_date = campaign.launch_date + timedelta(days=rng.randrange(60))
            if booking_date > end_date:
                continue
            sail_date = booking_date + timedelta(days=30 + rng.randrange(150))
            itinerary = _weighted(rng, CORE_ITINERARIES, weights)
            cabin = (
                customer.preferred_cabin_type
                if rng.random() > 0.3
                else _weighted(rng, CABIN_TYPES, [35, 30, 25, 10])
            )
            bookings.append(
                Booking(
                    booking_id=next_id(),
                    customer_id=customer.customer_id,
                    booking_date=booking_date,
                    sail_date=sail_date,
                    itinerary=itinerary,
                    cabin_type=cabin,
                    revenue=_revenue(rng, cabin),
                    campaign_id=campaign.campaign_id,
                    is_new_customer=customer.total_cruises == 1 and rng.random() > 0.7,
                )
            )

    span_days = (end_date - start_date).days
    for _ in range(organic_count):
        customer = rng.choice(customers)
        booking_date = start_date + timedelta(days=int(rng.random() * span_days))
        sail_date = booking_date + timedelta(days=30 + rng.randrange(150))
        cabin = (
            customer.preferred_cabin_type
            if rng.random() > 0.4
            else _weighted(rng, CABIN_TYPES, [35, 30, 25, 10])
        )
        bookings.append(
            Booking(
                booking_id=next_id(),
                customer_id=customer.customer_id,
                booking_date=booking_date,
                sail_date=sail_date,
                itinerary=_weighted(rng, CORE_ITINERARIES, DEFAULT_ITINERARY_WEIGHTS),
                cabin_type=cabin,
                revenue=_revenue(rng, cabin),
                campaign_id=None,
            )
        )

    return sorted(bookings, key=lambda b: b.booking_date)
