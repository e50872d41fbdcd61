"""
Response synthesizer tests: payload shapes and end-to-end chat scenarios.

Run with: pytest tests/unit/test_response_synthesizer.py -v
"""

import json

import pytest

from models.chat import ActionKind, QueryContext, VisualizationType
from models.dataset import CustomerSegment, Itinerary
from repositories import forensic_audit
from services.analytics_service import AnalyticsService
from services.chat_service import build_synthesizer
from services.intent_router import build_default_router
from services.phrasing import FOLLOW_UPS, OPENINGS, PhraseBank
from utils.dates import shift_months
from utils.numbers import round_half_up

EMPTY = QueryContext()


@pytest.fixture(scope="module")
def synthesizer(settings, dataset):
    return build_synthesizer(settings, dataset)


class TestPhraseBank:
    """Test seeded phrase variation."""

    def test_same_seed_same_phrases(self):
        first, second = PhraseBank(seed=3), PhraseBank(seed=3)
        assert [first.opening() for _ in range(5)] == [second.opening() for _ in range(5)]

    def test_picks_from_pool(self):
        bank = PhraseBank(seed=1)
        assert bank.opening("concern") in OPENINGS["concern"]
        assert bank.follow_up("churn") in FOLLOW_UPS["churn"]


class TestScenarios:
    """End-to-end scenarios through the default router."""

    def test_loyalty_tier_scenario(self, settings, dataset):
        router = build_default_router(build_synthesizer(settings, dataset))
        result = router.route("How many customers are in each loyalty tier?", EMPTY)
        viz = result.message.visualization
        assert viz.type == VisualizationType.BAR
        assert [d.label for d in viz.data] == ["Bronze", "Silver", "Gold", "Platinum"]
        assert sum(d.value for d in viz.data) == len(dataset.customers)
        assert f"Your customer base of {len(dataset.customers)}" in result.message.content
        assert result.context.last_dimension == "loyalty_tier"

    def test_churn_scenario(self, settings, dataset):
        router = build_default_router(build_synthesizer(settings, dataset))
        result = router.route("Which customers are at risk of churning?", EMPTY)
        assert result.rule == "churn_risk"
        at_risk = AnalyticsService(dataset).churn_risk_customers(18)
        at_risk_names = {c.full_name for c in at_risk}
        cutoff = shift_months(dataset.reference_date, -18)

        table = result.message.visualization.data
        assert result.message.visualization.type == VisualizationType.TABLE
        assert 0 < len(table.rows) <= 10
        for row in table.rows:
            assert row["name"] in at_risk_names
            assert row["lifetimeValue"] > 5000
            assert row["lastCruiseDate"] < cutoff.isoformat()
            matches = [
                c for c in dataset.customers
                if c.full_name == row["name"]
                and c.lifetime_value == row["lifetimeValue"]
                and c.last_cruise_date.isoformat() == row["lastCruiseDate"]
            ]
            assert matches
            assert all(c.segment != CustomerSegment.VIP for c in matches)

        winback = result.message.actions[0]
        assert winback.label == f"Create Win-Back Audience ({len(at_risk)})"
        assert winback.payload == {"count": len(at_risk)}
        assert winback.action == ActionKind.CREATE_AUDIENCE

    def test_follow_up_scenario(self, settings, dataset):
        router = build_default_router(build_synthesizer(settings, dataset))
        first = router.route("What's the ROAS by itinerary?", EMPTY)
        second = router.route("Exclude Alaska", first.context)
        labels = [d.label for d in second.message.visualization.data]
        assert "Alaska" not in labels
        assert labels == ["Caribbean", "Europe", "Mediterranean"]
        assert second.context.last_metric == "roas"
        assert second.context.last_query == "Exclude Alaska"

    def test_same_seed_same_payload(self, settings, dataset):
        first = build_synthesizer(settings, dataset).roas_by_itinerary("ROAS by itinerary", EMPTY)
        second = build_synthesizer(settings, dataset).roas_by_itinerary("ROAS by itinerary", EMPTY)
        assert first.content == second.content
        assert first.visualization == second.visualization

    @pytest.mark.parametrize("query", [
        "What's the ROAS by itinerary?",
        "Show bookings and revenue by cabin",
        "Compare prospecting vs reactivation",
        "Show me the conversion funnel",
        "Build an audience of lapsed Alaska customers",
        "What campaign should I run for VIP customers?",
        "What's the ROI of a prospecting campaign?",
        "Show me customers at risk of churning",
        "Show the revenue trend",
        "Give me a summary",
        "Show the channel quality scorecard",
        "Explain the Hawaii guardrail",
        "Any insights for me?",
        "unmatched gibberish",
    ])
    def test_payload_is_json_serializable(self, settings, dataset, query):
        router = build_default_router(build_synthesizer(settings, dataset))
        wire = router.route(query, EMPTY).message.to_wire()
        assert json.loads(json.dumps(wire))["role"] == "assistant"


class TestHandlers:
    """Individual handler payloads."""

    def test_roas_by_itinerary_ranks(self, synthesizer):
        message = synthesizer.roas_by_itinerary("q", EMPTY)
        assert "Caribbean is your top performer at 4.2x" in message.content
        assert "Alaska is lagging at 2.4x" in message.content
        assert message.visualization.y_key == "roas"

    def test_revenue_by_cabin_in_thousands(self, synthesizer, dataset):
        message = synthesizer.bookings_revenue_by_cabin("q", EMPTY)
        raw = AnalyticsService(dataset).revenue_by_cabin_type()
        assert [d.value for d in message.visualization.data] == [round_half_up(d.value / 1000) for d in raw]

    def test_campaign_comparison_ratio(self, synthesizer):
        message = synthesizer.campaign_type_comparison("q", EMPTY)
        assert "2.1x more efficient" in message.content
        assert message.visualization.type == VisualizationType.METRICS

    def test_funnel_defaults_to_all_campaigns(self, synthesizer):
        message = synthesizer.conversion_funnel("show the funnel", EMPTY)
        assert message.visualization.type == VisualizationType.FUNNEL
        assert "all campaigns" in message.visualization.title
        assert "conversionRate" not in message.to_wire()["visualization"]["data"][-1]

    def test_funnel_for_campaign_type(self, synthesizer):
        message = synthesizer.conversion_funnel("retargeting funnel", EMPTY)
        assert "Retargeting" in message.visualization.title

    def test_audience_builder(self, synthesizer):
        message = synthesizer.audience_builder("Build an audience of lapsed Alaska customers", EMPTY)
        preview = message.visualization.data
        assert message.visualization.type == VisualizationType.AUDIENCE_PREVIEW
        assert preview.criteria.segment == [CustomerSegment.LAPSED]
        assert preview.criteria.preferred_itinerary == [Itinerary.ALASKA]
        for customer in preview.sample:
            assert customer.segment == CustomerSegment.LAPSED
            assert customer.preferred_itinerary == Itinerary.ALASKA
        assert preview.roi_projection.audience_size == preview.count
        assert message.actions[0].label == f"Launch Campaign ({preview.count})"

    def test_audience_builder_defaults_to_reactivation_preset(self, synthesizer):
        message = synthesizer.audience_builder("Build me an audience", EMPTY)
        criteria = message.visualization.data.criteria
        assert criteria.segment == [CustomerSegment.LAPSED]
        assert criteria.min_ltv == 8000
        assert criteria.churn_risk is True

    def test_audience_builder_ltv_parsing(self, synthesizer):
        message = synthesizer.audience_builder("Build an audience of gold customers with LTV over $20k", EMPTY)
        criteria = message.visualization.data.criteria
        assert criteria.min_ltv == 20_000
        assert all(c.lifetime_value >= 20_000 for c in message.visualization.data.sample)

    def test_empty_audience_offers_refine(self, synthesizer):
        message = synthesizer.audience_builder("Build an audience with LTV over $9,000,000", EMPTY)
        assert message.visualization.data.count == 0
        assert message.actions[0].action == ActionKind.REFINE_AUDIENCE

    def test_recommendation(self, synthesizer):
        message = synthesizer.campaign_recommendation("What campaign for lapsed customers?", EMPTY)
        labels = [m.label for m in message.visualization.data]
        assert labels[:2] == ["Campaign Type", "Channel"]
        assert message.visualization.data[0].value == "Reactivation"

    def test_roi_projection_defaults_to_reactivation(self, synthesizer):
        message = synthesizer.roi_projection("What's the ROI?", EMPTY)
        assert message.visualization.title == "ROI Projection: Reactivation"
        assert message.visualization.data[2].value == "2.3%"

    def test_roi_projection_campaign_type(self, synthesizer):
        message = synthesizer.roi_projection("ROI of a prospecting campaign to lapsed customers", EMPTY)
        assert message.visualization.title == "ROI Projection: Prospecting"

    def test_channel_quality_table(self, synthesizer):
        message = synthesizer.channel_quality("q", EMPTY)
        rows = message.visualization.data.rows
        assert len(rows) == len(forensic_audit.CHANNEL_QUALITY)
        assert "Pinterest" in message.content
        assert "95.2%" in message.content

    def test_exotic_opportunity(self, synthesizer):
        message = synthesizer.exotic_opportunity("q", EMPTY)
        assert "101,153" in message.content
        assert "6.18" in message.content

    def test_guardrail_focus_from_query(self, synthesizer):
        hawaii = synthesizer.guardrail_effect("Hawaii guardrail", EMPTY)
        asia = synthesizer.guardrail_effect("What about Asia?", EMPTY)
        assert "$2,400" in hawaii.content
        assert "$3,300" in asia.content
        assert hawaii.visualization.type == VisualizationType.GROUPED_BAR
        assert len(hawaii.visualization.data) == 2 * len(forensic_audit.GUARDRAIL_EFFECTS)

    def test_relevance_premium(self, synthesizer):
        message = synthesizer.relevance_premium("q", EMPTY)
        assert "+$870" in message.content
        assert "$5,593" in message.content

    def test_dark_social(self, synthesizer):
        message = synthesizer.dark_social("q", EMPTY)
        assert "19.2M" in message.content
        assert "143" in message.content

    def test_recent_insights(self, synthesizer):
        message = synthesizer.recent_insights("q", EMPTY)
        assert len(message.visualization.data.rows) == 4

    def test_generic_why(self, synthesizer):
        message = synthesizer.why_question("why is europe so so?", EMPTY)
        assert message.visualization is None
        assert "Why is Alaska underperforming?" in message.content

    def test_alaska_why(self, synthesizer):
        message = synthesizer.why_question("Why is Alaska underperforming?", EMPTY)
        assert message.actions[0].id == "alaska-reactivation"

    def test_exclude_uses_last_metric(self, synthesizer):
        bookings = synthesizer.exclude_itinerary(
            "exclude caribbean", QueryContext(last_query="bookings by itinerary", last_metric="bookings")
        )
        revenue = synthesizer.exclude_itinerary(
            "exclude caribbean and europe", QueryContext(last_query="revenue", last_metric="revenue")
        )
        assert [d.label for d in bookings.visualization.data] == ["Alaska", "Europe", "Mediterranean"]
        assert [d.label for d in revenue.visualization.data] == ["Alaska", "Mediterranean"]
        assert revenue.visualization.y_key == "revenue"

    def test_exclude_revenue_text_uses_thousands_separator(self, synthesizer):
        message = synthesizer.exclude_itinerary(
            "exclude alaska", QueryContext(last_query="revenue by itinerary", last_metric="revenue")
        )
        best = max(message.visualization.data, key=lambda d: d.value)
        assert best.value >= 1000
        assert f"leads with ${best.value:,}k revenue" in message.content

    def test_year_over_year(self, synthesizer):
        message = synthesizer.year_over_year("yoy", EMPTY)
        assert [m.change for m in message.visualization.data] == [18, 22, 8, 4]
