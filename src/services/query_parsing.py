"""Keyword extraction from free-text questions."""

from __future__ import annotations

import re
from typing import List, Optional

from models.audience import AudienceCriteria
from models.dataset import (
    AcquisitionChannel,
    CabinType,
    CampaignType,
    CustomerSegment,
    Itinerary,
    LoyaltyTier,
)

_SEGMENT_PATTERNS = {
    CustomerSegment.LAPSED: r"\blapsed\b|win[- ]?back",
    CustomerSegment.ACTIVE: r"\bactive\b",
    CustomerSegment.VIP: r"\bvips?\b",
    CustomerSegment.PROSPECT: r"\bprospects\b|\bprospect\b",
}

_CABIN_PATTERNS = {
    CabinType.INSIDE: r"\binside\b",
    CabinType.OCEAN_VIEW: r"ocean[- ]?view",
    CabinType.BALCONY: r"\bbalcon",
    CabinType.SUITE: r"\bsuites?\b",
}

_CHANNEL_PATTERNS = {
    AcquisitionChannel.DIRECT_MAIL: r"direct[- ]?mail",
    AcquisitionChannel.EMAIL: r"\be-?mail\b",
    AcquisitionChannel.ORGANIC: r"\borganic\b",
    AcquisitionChannel.REFERRAL: r"\breferr",
    AcquisitionChannel.PAID_SEARCH: r"paid[- ]?search",
}

_AMOUNT = r"\$\s*(\d[\d,]*(?:\.\d+)?)\s*(k)?"
_MIN_LTV = re.compile(r"(?:over|above|more than|at least|>=?|minimum|min)\s*" + _AMOUNT)
_MAX_LTV = re.compile(r"(?:under|below|less than|at most|<=?|maximum|max)\s*" + _AMOUNT)


def _amount(match: "re.Match") -> float:
    value = float(match.group(1).replace(",", ""))
    return value * 1000 if match.group(2) else value


def find_itineraries(text: str) -> List[Itinerary]:
    lowered = text.lower()
    return [i for i in Itinerary if i.value.lower() in lowered]


def find_campaign_type(text: str) -> Optional[CampaignType]:
    """First campaign type mentioned in the text, or None."""
    lowered = text.lower()
    positions = [
        (lowered.find(t.value.lower()), t) for t in CampaignType if t.value.lower() in lowered
    ]
    return min(positions, key=lambda p: p[0])[1] if positions else None


def extract_criteria(text: str) -> AudienceCriteria:
    """Best-effort audience criteria from a question; unmatched fields stay unset."""
    lowered = text.lower()

    segments = [s for s, pattern in _SEGMENT_PATTERNS.items() if re.search(pattern, lowered)]
    tiers = [t for t in LoyaltyTier if re.search(rf"\b{t.value.lower()}\b", lowered)]
    cabins = [c for c, pattern in _CABIN_PATTERNS.items() if re.search(pattern, lowered)]
    channels = [a for a, pattern in _CHANNEL_PATTERNS.items() if re.search(pattern, lowered)]
    churn = bool(re.search(r"churn|at risk|haven't cruised|have not cruised", lowered))

    min_match = _MIN_LTV.search(lowered)
    max_match = _MAX_LTV.search(lowered)

    return AudienceCriteria(
        segment=segments or None,
        loyalty_tier=tiers or None,
        min_ltv=_amount(min_match) if min_match else None,
        max_ltv=_amount(max_match) if max_match else None,
        preferred_itinerary=find_itineraries(text) or None,
        preferred_cabin_type=cabins or None,
        churn_risk=True if churn else None,
        acquisition_channel=channels or None,
    )
