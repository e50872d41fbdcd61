"""
Dataset fixture tests.

Covers the seeded generators, the dataset container, the insight catalog and
the forensic audit constants.

Run with: pytest tests/unit/test_fixtures.py -v
"""

from datetime import date

import pytest

from models.dataset import CampaignType, CustomerSegment
from repositories import forensic_audit
from repositories.dataset import REFERENCE_DATE, Dataset, build_dataset
from repositories.generators import generate_bookings, generate_campaigns, generate_customers
from repositories.insights import INSIGHTS, get_insight, get_insights_by_type, get_recent_insights
from utils.dates import shift_months


class TestCustomerGenerator:
    """Test generate_customers."""

    def test_deterministic_for_seed(self):
        first = generate_customers(50, 42, REFERENCE_DATE)
        second = generate_customers(50, 42, REFERENCE_DATE)
        assert first == second

    def test_different_seed_differs(self):
        assert generate_customers(50, 42, REFERENCE_DATE) != generate_customers(50, 43, REFERENCE_DATE)

    def test_ids_are_sequential(self):
        customers = generate_customers(12, 42, REFERENCE_DATE)
        assert [c.customer_id for c in customers][:2] == ["cust-0001", "cust-0002"]
        assert len({c.customer_id for c in customers}) == 12

    def test_segment_rules(self, dataset):
        """Segment is consistent with recency and value at generation time."""
        lapsed_cutoff = shift_months(dataset.reference_date, -18)
        for customer in dataset.customers:
            assert customer.first_cruise_date <= customer.last_cruise_date
            if customer.segment == CustomerSegment.VIP:
                assert customer.lifetime_value > 50000
            if customer.segment == CustomerSegment.LAPSED:
                assert customer.last_cruise_date < lapsed_cutoff


class TestCampaignGenerator:
    """Test generate_campaigns."""

    def test_monthly_plan(self):
        campaigns = generate_campaigns(7)
        # three campaigns per month for 13 months plus a digital test every third month
        assert len(campaigns) == 13 * 3 + 5
        assert campaigns[0].campaign_id == "camp-001"
        assert campaigns[-1].campaign_id == "camp-044"

    def test_mail_campaigns_carry_volume(self):
        for campaign in generate_campaigns(7):
            if campaign.campaign_type == CampaignType.RETARGETING:
                assert campaign.mail_volume == 0
                assert 1000 <= campaign.ad_spend <= 2500
            assert campaign.ad_spend >= 0


class TestBookingGenerator:
    """Test generate_bookings."""

    def test_empty_customers(self):
        assert generate_bookings([], generate_campaigns(7), seed=1, organic_count=10) == []

    def test_sorted_and_bounded(self, dataset):
        dates = [b.booking_date for b in dataset.bookings]
        assert dates == sorted(dates)
        assert max(dates) <= dataset.reference_date

    def test_references_resolve(self, dataset):
        for booking in dataset.bookings:
            assert booking.customer_id in dataset.customers_by_id
            if booking.campaign_id is not None:
                assert booking.campaign_id in dataset.campaigns_by_id

    def test_organic_count(self, dataset, settings):
        organic = [b for b in dataset.bookings if b.campaign_id is None]
        assert len(organic) == settings.organic_booking_count


class TestDataset:
    """Test the dataset container."""

    def test_build_is_deterministic(self, settings, dataset):
        assert build_dataset(settings).bookings == dataset.bookings

    def test_population_size(self, dataset, settings):
        assert len(dataset.customers) == settings.customer_count

    def test_campaign_ids_for_type(self, dataset):
        ids = dataset.campaign_ids_for_type(CampaignType.REACTIVATION)
        assert ids
        assert all(dataset.campaigns_by_id[i].campaign_type == CampaignType.REACTIVATION for i in ids)

    def test_empty_dataset(self):
        empty = Dataset(customers=(), bookings=(), campaigns=())
        assert empty.reference_date == date(2025, 2, 1)
        assert empty.campaign_ids_for_type(CampaignType.PROSPECTING) == frozenset()


class TestInsightCatalog:
    """Test the proactive insight catalog."""

    def test_recent_newest_first(self):
        recent = get_recent_insights(4)
        assert len(recent) == 4
        stamps = [i.timestamp for i in recent]
        assert stamps == sorted(stamps, reverse=True)

    def test_recent_ties_keep_catalog_order(self):
        assert [i.id for i in get_recent_insights(2)] == ["insight-exotic", "insight-channels"]

    def test_limit_larger_than_catalog(self):
        assert len(get_recent_insights(100)) == len(INSIGHTS)

    def test_lookup(self):
        assert get_insight("insight-004").title.startswith("Hawaii")
        assert get_insight("missing") is None

    def test_by_type(self):
        assert all(i.type == "warning" for i in get_insights_by_type("warning"))


class TestForensicAudit:
    """Static audit figures stay internally consistent."""

    def test_exotic_households_sum(self):
        exotic = [h for h in forensic_audit.ELITE_HOUSEHOLDS if h.destination in forensic_audit.EXOTIC_DESTINATIONS]
        assert sum(h.elite_households for h in exotic) == forensic_audit.EXOTIC_ELITE_HOUSEHOLDS

    def test_exotic_has_no_matched_creative(self):
        for destination in forensic_audit.DESTINATION_QUALITY:
            if destination.destination in forensic_audit.EXOTIC_DESTINATIONS:
                assert destination.current_match_rate == 0

    def test_relevance_premium(self):
        premium = forensic_audit.RELEVANCE_PREMIUM
        assert premium.matched_creative_aov - premium.mismatched_creative_aov == premium.aov_lift

    @pytest.mark.parametrize("effect", forensic_audit.GUARDRAIL_EFFECTS, ids=lambda e: e.destination.value)
    def test_guardrail_drop(self, effect):
        assert effect.retention_with_matched_card - effect.retention_with_generic_card == effect.retention_drop
        assert effect.retained_aov - effect.switched_aov == effect.loss_per_switch

    def test_pinterest_is_worst(self):
        worst = max(forensic_audit.CHANNEL_QUALITY, key=lambda c: c.junk_rate)
        assert worst.channel == "Pinterest"
        assert worst.verdict == "Waste/Kill"
