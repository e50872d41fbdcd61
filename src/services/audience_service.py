"""
Audience builder and ROI projection.

Criteria narrow the customer population with AND semantics; a criterion that
is unset (or an empty list) does not filter at all.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from models.audience import AudienceCriteria, AudiencePreviewData, ROIProjection
from models.dataset import CampaignType, Customer, CustomerSegment, Itinerary
from repositories.dataset import Dataset
from services.recommendation_service import RecommendationService
from utils.dates import shift_months
from utils.numbers import round_half_up

PREVIEW_SAMPLE_SIZE = 5

# Historical response rates by campaign type.
RESPONSE_RATES: Dict[CampaignType, float] = {
    CampaignType.PROSPECTING: 0.003,
    CampaignType.REACTIVATION: 0.023,
    CampaignType.RETARGETING: 0.015,
}

OPTIMISTIC_RESPONSE_RATE = 0.10
COST_PER_PIECE = 0.30
CRUISES_PER_LTV = 2.5  # AOV is estimated as LTV / typical cruise count


def calculate_roi_projection(
    customers: Sequence[Customer],
    campaign_type: CampaignType = CampaignType.REACTIVATION,
) -> ROIProjection:
    """Project revenue and ROI for mailing ``customers``. Empty audiences project zeros."""
    audience_size = len(customers)
    avg_ltv = (
        sum(c.lifetime_value for c in customers) / audience_size if audience_size else 0
    )
    avg_order_value = round_half_up(avg_ltv / CRUISES_PER_LTV)
    response_rate = RESPONSE_RATES[campaign_type]

    realistic_revenue = round_half_up(audience_size * response_rate * avg_order_value)
    optimistic_revenue = round_half_up(audience_size * OPTIMISTIC_RESPONSE_RATE * avg_order_value)
    estimated_cost = round_half_up(audience_size * COST_PER_PIECE)

    return ROIProjection(
        audience_size=audience_size,
        avg_order_value=avg_order_value,
        historical_response_rate=response_rate,
        optimistic_revenue=optimistic_revenue,
        realistic_revenue=realistic_revenue,
        estimated_cost=estimated_cost,
        estimated_roi=realistic_revenue / estimated_cost if estimated_cost > 0 else 0.0,
    )


class AudienceService:
    """Filters the customer population into campaign audiences."""

    def __init__(
        self,
        dataset: Dataset,
        recommender: Optional[RecommendationService] = None,
        churn_threshold_months: int = 18,
    ):
        self.dataset = dataset
        self.recommender = recommender or RecommendationService()
        self.churn_threshold_months = churn_threshold_months

    def _predicates(self, criteria: AudienceCriteria) -> List[Callable[[Customer], bool]]:
        predicates: List[Callable[[Customer], bool]] = []
        if criteria.segment:
            predicates.append(lambda c: c.segment in criteria.segment)
        if criteria.loyalty_tier:
            predicates.append(lambda c: c.loyalty_tier in criteria.loyalty_tier)
        if criteria.min_ltv is not None:
            predicates.append(lambda c: c.lifetime_value >= criteria.min_ltv)
        if criteria.max_ltv is not None:
            predicates.append(lambda c: c.lifetime_value <= criteria.max_ltv)
        if criteria.preferred_itinerary:
            predicates.append(lambda c: c.preferred_itinerary in criteria.preferred_itinerary)
        if criteria.preferred_cabin_type:
            predicates.append(lambda c: c.preferred_cabin_type in criteria.preferred_cabin_type)
        if criteria.churn_risk:
            cutoff = shift_months(self.dataset.reference_date, -self.churn_threshold_months)
            predicates.append(lambda c: c.last_cruise_date < cutoff)
        if criteria.acquisition_channel:
            predicates.append(lambda c: c.acquisition_channel in criteria.acquisition_channel)
        return predicates

    def filter_customers(self, criteria: AudienceCriteria) -> List[Customer]:
        """Every matching customer, highest lifetime value first."""
        predicates = self._predicates(criteria)
        matched = [c for c in self.dataset.customers if all(p(c) for p in predicates)]
        return sorted(matched, key=lambda c: c.lifetime_value, reverse=True)

    def build_audience(self, criteria: AudienceCriteria) -> AudiencePreviewData:
        matched = self.filter_customers(criteria)
        return AudiencePreviewData(
            criteria=criteria,
            count=len(matched),
            sample=matched[:PREVIEW_SAMPLE_SIZE],
        )

    def preview(
        self,
        criteria: AudienceCriteria,
        campaign_type: Optional[CampaignType] = None,
    ) -> AudiencePreviewData:
        """Audience preview with ROI projection and a campaign recommendation.

        Without an explicit campaign type the projection uses the recommended one.
        """
        matched = self.filter_customers(criteria)
        recommendation = self.recommender.recommend(matched)
        projection = calculate_roi_projection(matched, campaign_type or recommendation.campaign_type)
        return AudiencePreviewData(
            criteria=criteria,
            count=len(matched),
            sample=matched[:PREVIEW_SAMPLE_SIZE],
            roi_projection=projection,
            recommendation=recommendation,
        )

    def roi_projection_for(
        self,
        criteria: AudienceCriteria,
        campaign_type: CampaignType = CampaignType.REACTIVATION,
    ) -> ROIProjection:
        return calculate_roi_projection(self.filter_customers(criteria), campaign_type)

    # ---- presets ---------------------------------------------------------

    @staticmethod
    def churn_risk_criteria() -> AudienceCriteria:
        return AudienceCriteria(segment=[CustomerSegment.LAPSED], min_ltv=5000, churn_risk=True)

    @staticmethod
    def high_value_lapsed_criteria() -> AudienceCriteria:
        return AudienceCriteria(segment=[CustomerSegment.LAPSED], min_ltv=15000)

    @staticmethod
    def itinerary_criteria(itinerary: Itinerary) -> AudienceCriteria:
        return AudienceCriteria(
            preferred_itinerary=[itinerary],
            segment=[CustomerSegment.LAPSED, CustomerSegment.ACTIVE],
        )

    @staticmethod
    def reactivation_criteria() -> AudienceCriteria:
        return AudienceCriteria(segment=[CustomerSegment.LAPSED], min_ltv=8000, churn_risk=True)
