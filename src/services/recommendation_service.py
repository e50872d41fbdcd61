"""
Campaign recommendation engine.

Profiles an audience and derives campaign type, channel, expected response
rate, confidence and messaging. Fully deterministic for a given customer list.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

from models.audience import CampaignRecommendation
from models.dataset import (
    CabinType,
    CampaignType,
    Customer,
    CustomerSegment,
    Itinerary,
    LoyaltyTier,
    MarketingChannel,
)
from utils.numbers import round_half_up

BASE_RESPONSE_RATES: Dict[CampaignType, float] = {
    CampaignType.PROSPECTING: 0.003,
    CampaignType.REACTIVATION: 0.023,
    CampaignType.RETARGETING: 0.015,
}

MAX_RESPONSE_RATE = 0.05
SMALL_AUDIENCE_THRESHOLD = 50

ITINERARY_IMAGERY: Dict[Itinerary, str] = {
    Itinerary.CARIBBEAN: "tropical getaway imagery with beach and island highlights",
    Itinerary.ALASKA: "wildlife and glacier scenery with adventure experiences",
    Itinerary.EUROPE: "cultural immersion and historic port destinations",
    Itinerary.MEDITERRANEAN: "coastal elegance with food and wine experiences",
    Itinerary.HAWAII: "volcano and island-hopping adventures with aloha hospitality",
    Itinerary.ASIA: "temple, market and skyline experiences across iconic Asian ports",
    Itinerary.AUSTRALIA: "reef, harbour and outback discovery down under",
}


@dataclass(frozen=True)
class AudienceProfile:
    """Descriptive statistics for an audience; percentages are rounded ints."""

    size: int
    avg_ltv: float
    avg_cruises: float
    dominant_itinerary: Itinerary
    itinerary_pct: int
    dominant_cabin: CabinType
    cabin_pct: int
    dominant_tier: LoyaltyTier
    tier_pct: int
    lapsed_pct: int
    vip_pct: int


def _pct(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100)


def _dominant(values: Sequence, categories: Sequence):
    """Most common category; ties go to the earlier category."""
    counts = Counter(values)
    best = max(categories, key=lambda c: (counts[c], -categories.index(c)))
    return best, counts[best]


def analyze_audience(customers: Sequence[Customer]) -> AudienceProfile:
    if not customers:
        return AudienceProfile(
            size=0, avg_ltv=0.0, avg_cruises=0.0,
            dominant_itinerary=Itinerary.CARIBBEAN, itinerary_pct=0,
            dominant_cabin=CabinType.BALCONY, cabin_pct=0,
            dominant_tier=LoyaltyTier.BRONZE, tier_pct=0,
            lapsed_pct=0, vip_pct=0,
        )

    size = len(customers)
    itinerary, itinerary_count = _dominant(
        [c.preferred_itinerary for c in customers], list(Itinerary)
    )
    cabin, cabin_count = _dominant([c.preferred_cabin_type for c in customers], list(CabinType))
    tier, tier_count = _dominant([c.loyalty_tier for c in customers], list(LoyaltyTier))

    return AudienceProfile(
        size=size,
        avg_ltv=sum(c.lifetime_value for c in customers) / size,
        avg_cruises=sum(c.total_cruises for c in customers) / size,
        dominant_itinerary=itinerary,
        itinerary_pct=_pct(itinerary_count, size),
        dominant_cabin=cabin,
        cabin_pct=_pct(cabin_count, size),
        dominant_tier=tier,
        tier_pct=_pct(tier_count, size),
        lapsed_pct=_pct(sum(1 for c in customers if c.segment == CustomerSegment.LAPSED), size),
        vip_pct=_pct(sum(1 for c in customers if c.segment == CustomerSegment.VIP), size),
    )


def determine_campaign_type(profile: AudienceProfile) -> CampaignType:
    if profile.lapsed_pct > 50 or profile.vip_pct > 30:
        return CampaignType.REACTIVATION
    if profile.avg_cruises < 2 and profile.avg_ltv < 5000:
        return CampaignType.PROSPECTING
    return CampaignType.RETARGETING


def determine_channel(profile: AudienceProfile, campaign_type: CampaignType) -> MarketingChannel:
    if profile.avg_ltv > 12000 or campaign_type == CampaignType.REACTIVATION:
        return MarketingChannel.DIRECT_MAIL
    if campaign_type == CampaignType.RETARGETING and profile.avg_ltv < 8000:
        return MarketingChannel.EMAIL
    return MarketingChannel.DIRECT_MAIL


def expected_response_rate(
    profile: AudienceProfile, campaign_type: CampaignType, channel: MarketingChannel
) -> float:
    rate = BASE_RESPONSE_RATES[campaign_type]
    if channel == MarketingChannel.EMAIL:
        rate *= 0.8
    if profile.avg_ltv > 15000:
        rate *= 1.2
    if profile.vip_pct > 20:
        rate *= 1.15
    if profile.avg_cruises > 4:
        rate *= 1.1
    return min(rate, MAX_RESPONSE_RATE)


def _scenario_confidence(size: int) -> str:
    return "high" if size > SMALL_AUDIENCE_THRESHOLD else "medium"


def determine_confidence(profile: AudienceProfile) -> str:
    if profile.size < SMALL_AUDIENCE_THRESHOLD:
        return "low"
    if profile.itinerary_pct > 60 and profile.tier_pct > 50:
        return "high"
    if profile.avg_ltv > 12000 and profile.size > 100:
        return "high"
    return "medium"


def build_messaging(profile: AudienceProfile) -> str:
    lines: List[str] = [f"Highlight {ITINERARY_IMAGERY[profile.dominant_itinerary]}"]

    if profile.dominant_cabin in (CabinType.INSIDE, CabinType.OCEAN_VIEW):
        lines.append("Include upgrade offers to Balcony or Suite")
    elif profile.dominant_cabin == CabinType.BALCONY:
        lines.append("Feature suite upgrade incentives")

    if profile.tier_pct > 40 and profile.dominant_tier in (LoyaltyTier.GOLD, LoyaltyTier.PLATINUM):
        lines.append("Emphasize exclusive loyalty benefits and recognition")
    if profile.lapsed_pct > 50:
        lines.append('"We miss you" reactivation theme with limited-time offer')
    if profile.vip_pct > 20:
        lines.append("Personalized concierge-level invitation")

    return ". ".join(lines) + "."


def build_rationale(profile: AudienceProfile, campaign_type: CampaignType) -> str:
    reasons: List[str] = []
    if campaign_type == CampaignType.REACTIVATION:
        reasons.append(f"{profile.lapsed_pct}% of this segment has lapsed")
        if profile.avg_ltv > 10000:
            reasons.append(f"high average LTV of ${round_half_up(profile.avg_ltv):,}")
        reasons.append(f"{profile.avg_cruises:.1f} avg cruises indicates proven engagement")
    elif campaign_type == CampaignType.RETARGETING:
        reasons.append("Recent site engagement indicates active consideration")
        reasons.append(f"{profile.itinerary_pct}% preference for {profile.dominant_itinerary.value}")
    else:
        reasons.append("Prospect profile matches high-value customer characteristics")
        if profile.avg_ltv > 8000:
            reasons.append("Similar audiences have strong LTV potential")

    text = "; ".join(reasons)
    return text[:1].upper() + text[1:]


class RecommendationService:
    """Turns an audience into a campaign recommendation."""

    def recommend(self, customers: Sequence[Customer]) -> CampaignRecommendation:
        profile = analyze_audience(customers)
        campaign_type = determine_campaign_type(profile)
        channel = determine_channel(profile, campaign_type)
        return CampaignRecommendation(
            campaign_type=campaign_type,
            channel=channel,
            messaging=build_messaging(profile),
            rationale=build_rationale(profile, campaign_type),
            expected_response_rate=expected_response_rate(profile, campaign_type, channel),
            confidence=determine_confidence(profile),
        )

    def recommend_reactivation(self, customers: Sequence[Customer]) -> CampaignRecommendation:
        profile = analyze_audience(customers)
        channel = MarketingChannel.DIRECT_MAIL if profile.avg_ltv > 10000 else MarketingChannel.EMAIL
        return CampaignRecommendation(
            campaign_type=CampaignType.REACTIVATION,
            channel=channel,
            messaging=build_messaging(profile),
            rationale=(
                f"Lapsed customers with ${round_half_up(profile.avg_ltv):,} avg LTV and "
                f"{profile.avg_cruises:.1f} average cruises represent strong reactivation potential"
            ),
            expected_response_rate=expected_response_rate(profile, CampaignType.REACTIVATION, channel),
            confidence=_scenario_confidence(profile.size),
        )

    def recommend_prospecting(self, customers: Sequence[Customer]) -> CampaignRecommendation:
        profile = analyze_audience(customers)
        return CampaignRecommendation(
            campaign_type=CampaignType.PROSPECTING,
            channel=MarketingChannel.DIRECT_MAIL,
            messaging=build_messaging(profile),
            rationale=(
                f"Profile matches successful customer attributes with "
                f"{profile.itinerary_pct}% {profile.dominant_itinerary.value} preference"
            ),
            expected_response_rate=BASE_RESPONSE_RATES[CampaignType.PROSPECTING],
            confidence="medium",
        )
