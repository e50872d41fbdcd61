"""
Aggregation layer over the in-memory dataset.

Every method is pure and total: empty selections give zero/empty results.
Grouped series come back in fixed category order; callers re-sort only for
narrative purposes.

ROAS by category and the blended ROAS are industry benchmark tables, not
values derived from the generated bookings.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from models.chat import ChartDataPoint, FunnelStage
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
from repositories.dataset import Dataset
from utils.dates import month_end, month_label, month_start, shift_months
from utils.numbers import round_half_up

ROAS_BY_ITINERARY: Dict[Itinerary, float] = {
    Itinerary.CARIBBEAN: 4.2,
    Itinerary.MEDITERRANEAN: 3.8,
    Itinerary.EUROPE: 3.1,
    Itinerary.ALASKA: 2.4,
}

ROAS_BY_CABIN: Dict[CabinType, float] = {
    CabinType.INSIDE: 2.8,
    CabinType.OCEAN_VIEW: 3.4,
    CabinType.BALCONY: 4.1,
    CabinType.SUITE: 5.2,
}

ROAS_BY_CAMPAIGN_TYPE: Dict[CampaignType, float] = {
    CampaignType.PROSPECTING: 2.1,
    CampaignType.REACTIVATION: 4.4,
    CampaignType.RETARGETING: 3.6,
}

BLENDED_ROAS = 3.4

# Funnel assumptions
DIGITAL_IMPRESSION_CHANNELS = (MarketingChannel.DISPLAY, MarketingChannel.EMAIL)
IMPRESSIONS_PER_DIGITAL_DOLLAR = 50
SITE_VISIT_RATE = 0.03
VISIT_RATE_MULTIPLIERS: Dict[CampaignType, float] = {
    CampaignType.RETARGETING: 1.5,
    CampaignType.REACTIVATION: 1.2,
    CampaignType.PROSPECTING: 1.0,
}

CHURN_MIN_LTV = 5000
HIGH_VALUE_LAPSED_LTV = 15000


def calculate_roas(bookings: Iterable[Booking], campaigns: Iterable[Campaign]) -> float:
    revenue = calculate_total_revenue(bookings)
    spend = sum(c.ad_spend for c in campaigns)
    return revenue / spend if spend > 0 else 0.0


def calculate_total_revenue(bookings: Iterable[Booking]) -> int:
    return sum(b.revenue for b in bookings)


def calculate_aov(bookings: Sequence[Booking]) -> float:
    if not bookings:
        return 0.0
    return calculate_total_revenue(bookings) / len(bookings)


def calculate_conversion_rate(bookings: Sequence[Booking], campaigns: Iterable[Campaign]) -> float:
    """Bookings per mailed piece, as a percentage."""
    mail_volume = sum(c.mail_volume for c in campaigns)
    if mail_volume == 0:
        return 0.0
    return len(bookings) / mail_volume * 100


def _conversion(next_count: float, count: float) -> float:
    # Stage rates are shares, so attributed bookings beyond modeled visits cap at 100.
    return min(next_count / count * 100, 100.0) if count > 0 else 0.0


def build_funnel(impressions: float, site_visits: int, bookings: int) -> List[FunnelStage]:
    """Three-stage funnel; the terminal stage carries no conversion rate."""
    return [
        FunnelStage(stage="Impressions", count=impressions,
                    conversion_rate=_conversion(site_visits, impressions)),
        FunnelStage(stage="Site Visits", count=site_visits,
                    conversion_rate=_conversion(bookings, site_visits)),
        FunnelStage(stage="Bookings", count=bookings),
    ]


class AnalyticsService:
    """Grouped counts, sums, averages and time series over one dataset."""

    def __init__(self, dataset: Dataset):
        self.dataset = dataset

    # ---- filtering -------------------------------------------------------

    def bookings_in_range(self, start: date, end: date) -> List[Booking]:
        return [b for b in self.dataset.bookings if start <= b.booking_date <= end]

    def bookings_for_itinerary(self, itinerary: Itinerary) -> List[Booking]:
        return [b for b in self.dataset.bookings if b.itinerary == itinerary]

    def bookings_for_cabin(self, cabin: CabinType) -> List[Booking]:
        return [b for b in self.dataset.bookings if b.cabin_type == cabin]

    def bookings_for_campaign_type(self, campaign_type: CampaignType) -> List[Booking]:
        ids = self.dataset.campaign_ids_for_type(campaign_type)
        return [b for b in self.dataset.bookings if b.campaign_id in ids]

    def bookings_for_customer(self, customer_id: str) -> List[Booking]:
        return [b for b in self.dataset.bookings if b.customer_id == customer_id]

    def attributed_bookings(self) -> List[Booking]:
        return [b for b in self.dataset.bookings if b.campaign_id is not None]

    def organic_bookings(self) -> List[Booking]:
        return [b for b in self.dataset.bookings if b.campaign_id is None]

    # ---- grouped metrics -------------------------------------------------

    @staticmethod
    def _series(labels: Iterable, value_of: Callable) -> List[ChartDataPoint]:
        return [ChartDataPoint(label=label.value, value=value_of(label)) for label in labels]

    def roas_by_itinerary(self) -> List[ChartDataPoint]:
        return self._series(CORE_ITINERARIES, ROAS_BY_ITINERARY.__getitem__)

    def roas_by_cabin_type(self) -> List[ChartDataPoint]:
        return self._series(CabinType, ROAS_BY_CABIN.__getitem__)

    def roas_by_campaign_type(self) -> List[ChartDataPoint]:
        return self._series(CampaignType, ROAS_BY_CAMPAIGN_TYPE.__getitem__)

    def bookings_by_itinerary(self, exclude: Sequence[Itinerary] = ()) -> List[ChartDataPoint]:
        labels = [i for i in CORE_ITINERARIES if i not in exclude]
        return self._series(labels, lambda i: len(self.bookings_for_itinerary(i)))

    def revenue_by_itinerary(self, exclude: Sequence[Itinerary] = ()) -> List[ChartDataPoint]:
        labels = [i for i in CORE_ITINERARIES if i not in exclude]
        return self._series(labels, lambda i: calculate_total_revenue(self.bookings_for_itinerary(i)))

    def bookings_by_cabin_type(self) -> List[ChartDataPoint]:
        return self._series(CabinType, lambda c: len(self.bookings_for_cabin(c)))

    def revenue_by_cabin_type(self) -> List[ChartDataPoint]:
        return self._series(CabinType, lambda c: calculate_total_revenue(self.bookings_for_cabin(c)))

    def bookings_by_campaign_type(self) -> List[ChartDataPoint]:
        return self._series(CampaignType, lambda t: len(self.bookings_for_campaign_type(t)))

    def customers_by_loyalty_tier(self) -> List[ChartDataPoint]:
        customers = self.dataset.customers
        return self._series(LoyaltyTier, lambda t: sum(1 for c in customers if c.loyalty_tier == t))

    def customers_by_segment(self) -> List[ChartDataPoint]:
        customers = self.dataset.customers
        return self._series(CustomerSegment, lambda s: sum(1 for c in customers if c.segment == s))

    def ltv_by_acquisition_channel(self) -> List[ChartDataPoint]:
        def avg_ltv(channel: AcquisitionChannel) -> int:
            values = [c.lifetime_value for c in self.dataset.customers if c.acquisition_channel == channel]
            return round_half_up(sum(values) / len(values)) if values else 0

        return self._series(AcquisitionChannel, avg_ltv)

    # ---- time series -----------------------------------------------------

    def _monthly(self, months: int, value_of: Callable[[List[Booking]], float]) -> List[ChartDataPoint]:
        """Trailing calendar-month buckets ending at the reference month; no gaps."""
        anchor = month_start(self.dataset.reference_date)
        points: List[ChartDataPoint] = []
        for offset in range(months - 1, -1, -1):
            start = shift_months(anchor, -offset)
            bucket = self.bookings_in_range(start, month_end(start))
            points.append(ChartDataPoint(label=month_label(start), value=value_of(bucket)))
        return points

    def bookings_over_time(self, months: int = 12) -> List[ChartDataPoint]:
        return self._monthly(months, len)

    def revenue_over_time(self, months: int = 12) -> List[ChartDataPoint]:
        return self._monthly(months, calculate_total_revenue)

    # ---- churn -----------------------------------------------------------

    def churn_cutoff(self, months_threshold: int = 18) -> date:
        return shift_months(self.dataset.reference_date, -months_threshold)

    def churn_risk_customers(self, months_threshold: int = 18) -> List[Customer]:
        """Non-VIP customers with real value whose last cruise predates the cutoff."""
        cutoff = self.churn_cutoff(months_threshold)
        return [
            c for c in self.dataset.customers
            if c.last_cruise_date < cutoff
            and c.segment != CustomerSegment.VIP
            and c.lifetime_value > CHURN_MIN_LTV
        ]

    def high_value_lapsed_customers(self) -> List[Customer]:
        return [
            c for c in self.dataset.customers
            if c.segment == CustomerSegment.LAPSED and c.lifetime_value > HIGH_VALUE_LAPSED_LTV
        ]

    # ---- summary ---------------------------------------------------------

    def overall_metrics(self) -> Dict[str, float]:
        attributed = self.attributed_bookings()
        customers = self.dataset.customers
        return {
            "total_bookings": len(self.dataset.bookings),
            "attributed_bookings": len(attributed),
            "total_revenue": calculate_total_revenue(attributed),
            "total_spend": sum(c.ad_spend for c in self.dataset.campaigns),
            "overall_roas": BLENDED_ROAS,
            "average_order_value": round_half_up(calculate_aov(self.dataset.bookings)),
            "total_customers": len(customers),
            "active_customers": sum(
                1 for c in customers
                if c.segment in (CustomerSegment.ACTIVE, CustomerSegment.VIP)
            ),
        }

    # ---- funnel ----------------------------------------------------------

    @staticmethod
    def _impressions(campaigns: Sequence[Campaign]) -> float:
        mail_volume = sum(c.mail_volume for c in campaigns)
        digital_spend = sum(
            c.ad_spend for c in campaigns if c.channel in DIGITAL_IMPRESSION_CHANNELS
        )
        return mail_volume + digital_spend * IMPRESSIONS_PER_DIGITAL_DOLLAR

    def funnel(self, campaign_id: Optional[str] = None) -> List[FunnelStage]:
        """Funnel for one campaign, or for every campaign when no id is given."""
        if campaign_id:
            campaigns = [c for c in self.dataset.campaigns if c.campaign_id == campaign_id]
            booked = [b for b in self.dataset.bookings if b.campaign_id == campaign_id]
        else:
            campaigns = list(self.dataset.campaigns)
            booked = self.attributed_bookings()

        impressions = self._impressions(campaigns)
        site_visits = round_half_up(impressions * SITE_VISIT_RATE)
        return build_funnel(impressions, site_visits, len(booked))

    def funnel_by_campaign_type(self, campaign_type: CampaignType) -> List[FunnelStage]:
        campaigns = [c for c in self.dataset.campaigns if c.campaign_type == campaign_type]
        impressions = self._impressions(campaigns)
        site_visits = round_half_up(impressions * SITE_VISIT_RATE * VISIT_RATE_MULTIPLIERS[campaign_type])
        return build_funnel(impressions, site_visits, len(self.bookings_for_campaign_type(campaign_type)))
