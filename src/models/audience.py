"""Audience builder, ROI projection and campaign recommendation views."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from models.base import CamelModel
from models.dataset import (
    AcquisitionChannel,
    CabinType,
    CampaignType,
    Customer,
    CustomerSegment,
    Itinerary,
    LoyaltyTier,
    MarketingChannel,
)


class AudienceCriteria(CamelModel):
    """AND-combined customer filters. Unset or empty fields do not filter."""

    segment: Optional[List[CustomerSegment]] = None
    loyalty_tier: Optional[List[LoyaltyTier]] = None
    min_ltv: Optional[float] = Field(default=None, alias="minLTV")
    max_ltv: Optional[float] = Field(default=None, alias="maxLTV")
    preferred_itinerary: Optional[List[Itinerary]] = None
    preferred_cabin_type: Optional[List[CabinType]] = None
    churn_risk: Optional[bool] = None
    acquisition_channel: Optional[List[AcquisitionChannel]] = None

    def is_empty(self) -> bool:
        return not any(
            value not in (None, [], False)
            for value in self.model_dump().values()
        )

    def describe(self) -> str:
        """Short human-readable summary used in chat text."""
        parts: List[str] = []
        if self.segment:
            parts.append("/".join(s.value for s in self.segment))
        if self.loyalty_tier:
            parts.append("/".join(t.value for t in self.loyalty_tier) + " tier")
        if self.preferred_itinerary:
            parts.append("/".join(i.value for i in self.preferred_itinerary) + " fans")
        if self.preferred_cabin_type:
            parts.append("/".join(c.value for c in self.preferred_cabin_type) + " cabin")
        if self.acquisition_channel:
            parts.append("via " + "/".join(a.value for a in self.acquisition_channel))
        if self.min_ltv is not None:
            parts.append(f"LTV ≥ ${self.min_ltv:,.0f}")
        if self.max_ltv is not None:
            parts.append(f"LTV ≤ ${self.max_ltv:,.0f}")
        if self.churn_risk:
            parts.append("at churn risk")
        return ", ".join(parts) or "all customers"


class ROIProjection(CamelModel):
    """Projected campaign economics for an audience."""

    audience_size: int
    avg_order_value: int
    historical_response_rate: float
    optimistic_revenue: int
    realistic_revenue: int
    estimated_cost: int
    estimated_roi: float = Field(alias="estimatedROI")


class CampaignRecommendation(CamelModel):
    """Recommended campaign setup for an audience."""

    campaign_type: CampaignType
    channel: MarketingChannel
    messaging: str
    rationale: str
    expected_response_rate: float
    confidence: Literal["high", "medium", "low"]


class AudiencePreviewData(CamelModel):
    """Audience preview: full count plus the top customers by lifetime value."""

    criteria: AudienceCriteria
    count: int
    sample: List[Customer] = Field(default_factory=list)
    roi_projection: Optional[ROIProjection] = None
    recommendation: Optional[CampaignRecommendation] = None
