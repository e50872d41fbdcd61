"""
Response synthesizer.

Turns aggregated figures into assistant chat messages: narrative text, an
optional visualization descriptor and optional action buttons. Every handler
has the signature ``handler(query, context) -> ChatMessage`` so the intent
router can dispatch to any of them. Phrase pools only vary the wording around
the numbers, never the numbers themselves.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from models.audience import AudienceCriteria
from models.chat import (
    ActionButton,
    ActionKind,
    ChartDataPoint,
    ChatMessage,
    MetricData,
    QueryContext,
    TableColumn,
    TableData,
    Visualization,
    VisualizationType,
)
from models.dataset import CampaignType, Customer, Itinerary
from repositories import forensic_audit
from repositories.insights import get_recent_insights
from services.analytics_service import AnalyticsService
from services.audience_service import AudienceService
from services.phrasing import PhraseBank
from services.query_parsing import extract_criteria, find_campaign_type, find_itineraries
from services.recommendation_service import RecommendationService
from utils.logging_config import get_logger
from utils.numbers import round_half_up

logger = get_logger(__name__)

CHURN_TABLE_LIMIT = 10

FALLBACK_TEXT = (
    "I can help you analyze your campaign performance data. Try asking about:\n\n"
    "• ROAS by itinerary, cabin type, or campaign type\n"
    "• Bookings and revenue breakdowns\n"
    "• Customer segments and loyalty tiers\n"
    "• Churn risk analysis\n"
    "• Revenue trends over time\n"
    "• Building an audience or projecting campaign ROI"
)

CHURN_COLUMNS = [
    TableColumn(key="name", label="Customer"),
    TableColumn(key="loyaltyTier", label="Tier"),
    TableColumn(key="lifetimeValue", label="LTV"),
    TableColumn(key="lastCruiseDate", label="Last Cruise"),
    TableColumn(key="preferredItinerary", label="Preferred Itinerary"),
]


def create_message(
    content: str,
    visualization: Optional[Visualization] = None,
    actions: Optional[List[ActionButton]] = None,
) -> ChatMessage:
    return ChatMessage(content=content, visualization=visualization, actions=actions)


def action(
    action_id: str,
    label: str,
    icon: str,
    kind: ActionKind,
    payload: Optional[Dict[str, Any]] = None,
) -> ActionButton:
    return ActionButton(id=action_id, label=label, icon=icon, action=kind, payload=payload)


def export_csv(action_id: str, label: str = "Export CSV") -> ActionButton:
    return action(action_id, label, "download", ActionKind.EXPORT_CSV)


def _value_of(data: Sequence[ChartDataPoint], label: str) -> float:
    return next((d.value for d in data if d.label == label), 0)


def _in_thousands(data: Sequence[ChartDataPoint]) -> List[ChartDataPoint]:
    return [ChartDataPoint(label=d.label, value=round_half_up(d.value / 1000)) for d in data]


def _millions(value: float) -> str:
    return f"${value / 1_000_000:.1f}M"


def _churn_row(customer: Customer) -> Dict[str, Any]:
    return {
        "name": customer.full_name,
        "loyaltyTier": customer.loyalty_tier.value,
        "lifetimeValue": customer.lifetime_value,
        "lastCruiseDate": customer.last_cruise_date.isoformat(),
        "preferredItinerary": customer.preferred_itinerary.value,
    }


class ResponseSynthesizer:
    """Builds assistant messages from the aggregation layer."""

    def __init__(
        self,
        analytics: AnalyticsService,
        audience: AudienceService,
        recommender: Optional[RecommendationService] = None,
        phrases: Optional[PhraseBank] = None,
        churn_threshold_months: int = 18,
    ):
        self.analytics = analytics
        self.audience = audience
        self.recommender = recommender or audience.recommender
        self.phrases = phrases or PhraseBank()
        self.churn_threshold_months = churn_threshold_months

    # ---- ROAS ------------------------------------------------------------

    def roas_by_itinerary(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.roas_by_itinerary()
        ranked = sorted(data, key=lambda d: d.value, reverse=True)
        best, runner_up, worst = ranked[0], ranked[1], ranked[-1]

        content = (
            f"{self.phrases.opening('analysis')} {best.label} is your top performer at "
            f"{best.value}x ROAS, with {runner_up.label} close behind at {runner_up.value}x. "
            f"{worst.label} is lagging at {worst.value}x — this is often due to campaign mix "
            f"and cabin type skew toward Inside cabins.{self.phrases.follow_up('itinerary')}"
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="ROAS by Itinerary", data=data, y_key="roas"),
            [
                export_csv("export-roas"),
                action("schedule-roas", "Schedule Report", "calendar", ActionKind.SCHEDULE_REPORT),
            ],
        )

    def roas_by_cabin_type(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.roas_by_cabin_type()
        best = max(data, key=lambda d: d.value)
        content = (
            f"{best.label} cabins deliver the highest ROAS at {best.value:.1f}x, driven by their "
            "premium pricing. Suite bookings, while fewer in volume, generate outsized returns "
            f"due to high average order value.{self.phrases.follow_up('cabin')}"
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="ROAS by Cabin Type", data=data, y_key="roas"),
            [export_csv("export-cabin-roas")],
        )

    def roas_by_campaign_type(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.roas_by_campaign_type()
        reactivation = _value_of(data, CampaignType.REACTIVATION.value)
        prospecting = _value_of(data, CampaignType.PROSPECTING.value)
        content = (
            f"Reactivation campaigns deliver {reactivation:.1f}x ROAS, significantly outperforming "
            f"Prospecting at {prospecting:.1f}x. This suggests an opportunity to shift more budget "
            "toward re-engaging lapsed customers."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="ROAS by Campaign Type", data=data, y_key="roas"),
            [export_csv("export-campaign-roas")],
        )

    # ---- bookings and revenue --------------------------------------------

    def bookings_revenue_by_cabin(self, query: str, context: QueryContext) -> ChatMessage:
        bookings = self.analytics.bookings_by_cabin_type()
        revenue = self.analytics.revenue_by_cabin_type()
        volume_leader = max(bookings, key=lambda d: d.value)
        content = (
            f"{volume_leader.label} cabins lead in volume with {volume_leader.value} bookings, "
            "while Suites generate the highest revenue per booking. Balcony cabins offer a "
            "strong balance of volume and value."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.BAR,
                title="Revenue by Cabin Type ($k)",
                data=_in_thousands(revenue),
                y_key="revenue",
            ),
            [export_csv("export-cabin")],
        )

    def bookings_by_itinerary(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.bookings_by_itinerary()
        total = sum(d.value for d in data)
        best = max(data, key=lambda d: d.value)
        share = round_half_up(best.value / total * 100) if total else 0
        content = (
            f"{best.label} accounts for {share}% of all bookings ({best.value} of {total} total). "
            "This reflects both consumer demand and our campaign focus on this popular destination."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="Bookings by Itinerary", data=data),
            [export_csv("export-itinerary")],
        )

    def campaign_type_comparison(self, query: str, context: QueryContext) -> ChatMessage:
        roas = self.analytics.roas_by_campaign_type()
        bookings = self.analytics.bookings_by_campaign_type()
        prospecting = _value_of(roas, CampaignType.PROSPECTING.value)
        reactivation = _value_of(roas, CampaignType.REACTIVATION.value)
        ratio = reactivation / prospecting if prospecting else 0.0

        metrics = [
            MetricData(label="Prospecting ROAS", value=f"{prospecting:.1f}x"),
            MetricData(label="Reactivation ROAS", value=f"{reactivation:.1f}x"),
            MetricData(label="Prospecting Bookings", value=_value_of(bookings, CampaignType.PROSPECTING.value)),
            MetricData(label="Reactivation Bookings", value=_value_of(bookings, CampaignType.REACTIVATION.value)),
        ]
        content = (
            f"{self.phrases.opening('analysis')} Reactivation is crushing it — {ratio:.1f}x more "
            "efficient than Prospecting. That makes sense: you're reaching people who already "
            "know and like you.\n\nFor high-demand sail dates, lean into Reactivation to maximize "
            f"revenue per dollar spent.{self.phrases.follow_up('campaign')}"
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.METRICS, data=metrics),
            [action("create-reactivation", "Create Reactivation Audience", "users", ActionKind.CREATE_AUDIENCE)],
        )

    # ---- customers -------------------------------------------------------

    def loyalty_tiers(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.customers_by_loyalty_tier()
        total = sum(d.value for d in data)
        content = (
            f"Your customer base of {total} is primarily Bronze tier ({_value_of(data, 'Bronze')}), "
            f"with {_value_of(data, 'Platinum')} Platinum members representing your most valuable "
            "segment. Consider tier-specific campaigns to drive upgrades."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="Customers by Loyalty Tier", data=data),
            [export_csv("export-tiers")],
        )

    def customer_segments(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.customers_by_segment()
        content = (
            f"Your customer base includes {_value_of(data, 'Active')} Active customers and "
            f"{_value_of(data, 'VIP')} VIPs. The {_value_of(data, 'Lapsed')} Lapsed customers "
            "represent a significant reactivation opportunity."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="Customers by Segment", data=data),
            [action("target-lapsed", "Target Lapsed Segment", "users", ActionKind.CREATE_AUDIENCE)],
        )

    def churn_risk(self, query: str, context: QueryContext) -> ChatMessage:
        at_risk = self.analytics.churn_risk_customers(self.churn_threshold_months)
        high_value = self.analytics.high_value_lapsed_customers()
        top = sorted(at_risk, key=lambda c: c.lifetime_value, reverse=True)[:CHURN_TABLE_LIMIT]

        content = (
            f"{self.phrases.opening('concern')} I found {len(at_risk)} customers who haven't sailed "
            f"in {self.churn_threshold_months}+ months but have solid lifetime value — they're at "
            f"risk of churning. {len(high_value)} lapsed customers have LTV over $15k, so they're "
            "worth prioritizing.\n\nA personalized win-back campaign based on their preferred "
            f"itinerary could bring them back.{self.phrases.follow_up('churn')}"
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.TABLE,
                title="High Churn Risk Customers",
                data=TableData(columns=CHURN_COLUMNS, rows=[_churn_row(c) for c in top]),
            ),
            [
                action(
                    "create-winback",
                    f"Create Win-Back Audience ({len(at_risk)})",
                    "users",
                    ActionKind.CREATE_AUDIENCE,
                    {"count": len(at_risk)},
                ),
                export_csv("export-churn", "Export Full List"),
            ],
        )

    def ltv_by_channel(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.ltv_by_acquisition_channel()
        best = max(data, key=lambda d: d.value)
        content = (
            f"Customers acquired via {best.label} have the highest average LTV at ${best.value:,}. "
            f"This suggests {best.label} attracts higher-intent prospects who convert to repeat cruisers."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.BAR,
                title="Average LTV by Acquisition Channel",
                data=data,
                y_key="revenue",
            ),
            [export_csv("export-ltv")],
        )

    def high_value_customers(self, query: str, context: QueryContext) -> ChatMessage:
        metrics = self.analytics.overall_metrics()
        content = (
            f"Your {metrics['active_customers']} active customers (including VIPs) represent your "
            "most engaged segment. VIP customers average 8+ cruises and $50k+ lifetime value."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.METRICS,
                data=[
                    MetricData(label="Total Customers", value=metrics["total_customers"]),
                    MetricData(label="Active + VIP", value=metrics["active_customers"]),
                    MetricData(label="Avg Order Value", value=f"${metrics['average_order_value']:,}"),
                    MetricData(label="Overall ROAS", value=f"{metrics['overall_roas']}x"),
                ],
            ),
            [export_csv("export-vip", "Export VIP List")],
        )

    # ---- trends and summary ----------------------------------------------

    def revenue_over_time(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.revenue_over_time(12)
        content = (
            "Revenue shows strong seasonality with peaks in Q4 and Q1, driven by holiday booking "
            "and new year promotions. The trend is positive year-over-year."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.LINE,
                title="Monthly Revenue ($k, Last 12 Months)",
                data=_in_thousands(data),
                y_key="revenue",
            ),
            [export_csv("export-revenue-trend")],
        )

    def bookings_over_time(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.bookings_over_time(12)
        content = (
            "Booking volume tracks closely with revenue, with consistent performance across most "
            "months. Q4 campaigns drove a notable spike in booking activity."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.LINE, title="Monthly Bookings (Last 12 Months)", data=data),
            [export_csv("export-booking-trend")],
        )

    def overall_metrics(self, query: str, context: QueryContext) -> ChatMessage:
        metrics = self.analytics.overall_metrics()
        revenue = _millions(metrics["total_revenue"])
        content = (
            f"Here's your campaign performance summary. Total attributed revenue is {revenue} from "
            f"{metrics['attributed_bookings']} attributed bookings, delivering "
            f"{metrics['overall_roas']}x overall ROAS."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.METRICS,
                data=[
                    MetricData(label="Total Bookings", value=metrics["total_bookings"]),
                    MetricData(label="Attributed Bookings", value=metrics["attributed_bookings"]),
                    MetricData(label="Total Revenue", value=revenue),
                    MetricData(label="Ad Spend", value=f"${metrics['total_spend'] / 1000:.0f}k"),
                    MetricData(label="Overall ROAS", value=f"{metrics['overall_roas']}x"),
                    MetricData(label="Avg Order Value", value=f"${metrics['average_order_value']:,}"),
                ],
            ),
            [
                export_csv("export-summary", "Export Summary"),
                action("schedule-summary", "Schedule Weekly Report", "calendar", ActionKind.SCHEDULE_REPORT),
            ],
        )

    def why_question(self, query: str, context: QueryContext) -> ChatMessage:
        lowered = query.lower()

        if "alaska" in lowered and ("underperform" in lowered or "low" in lowered):
            return create_message(
                "Alaska's lower ROAS can be attributed to several factors:\n\n"
                "1. **Campaign Mix**: Alaska campaigns ran 60% Prospecting vs 40% Reactivation. "
                "Prospecting typically delivers 0.6x lower ROAS.\n\n"
                "2. **Cabin Mix**: Alaska sailings are 45% Inside cabins, which have the lowest AOV "
                "($2,400 avg vs $4,200 for Balcony).\n\n"
                "3. **Seasonality**: Alaska is a seasonal destination (May-Sept), limiting campaign "
                "optimization windows.\n\n"
                "**Recommendation**: Shift Alaska budget toward Reactivation campaigns targeting past "
                "Alaska cruisers, and promote Balcony cabin upgrades.",
                actions=[
                    action("alaska-reactivation", "Create Alaska Reactivation Audience", "users",
                           ActionKind.CREATE_AUDIENCE),
                ],
            )

        if "mediterranean" in lowered and "outperform" in lowered:
            return create_message(
                "Mediterranean's strong performance is driven by:\n\n"
                "1. **Premium Cabin Mix**: 40% of Mediterranean bookings are Balcony or Suite, vs 25% "
                "for other itineraries.\n\n"
                "2. **Reactivation Success**: Q4 2024 Mediterranean Reactivation campaign achieved "
                "5.2x ROAS by targeting customers with Mediterranean preference.\n\n"
                "3. **Higher AOV**: Mediterranean average order value is $5,100, 22% above portfolio "
                "average.\n\n"
                "**Recommendation**: Expand Mediterranean Reactivation campaigns and test "
                "Suite-focused creative.",
                actions=[
                    action("med-suite", "Create Mediterranean Suite Audience", "users",
                           ActionKind.CREATE_AUDIENCE),
                ],
            )

        return create_message(
            "To provide a detailed explanation, I'd need to know which specific metric or "
            "comparison you'd like me to analyze. Try asking:\n\n"
            '• "Why is Alaska underperforming?"\n'
            '• "Why does Reactivation outperform Prospecting?"\n'
            '• "Why did Mediterranean revenue increase?"',
            actions=[],
        )

    # ---- funnel ----------------------------------------------------------

    def conversion_funnel(self, query: str, context: QueryContext) -> ChatMessage:
        campaign_type = find_campaign_type(query)
        if campaign_type:
            stages = self.analytics.funnel_by_campaign_type(campaign_type)
            scope = f"{campaign_type.value} campaigns"
        else:
            stages = self.analytics.funnel()
            scope = "all campaigns"

        impressions, visits, booked = stages
        content = (
            f"{self.phrases.opening('analysis')} across {scope}, {impressions.count:,.0f} estimated "
            f"impressions drove {visits.count:,} site visits ({impressions.conversion_rate:.1f}%) "
            f"and {booked.count:,} bookings ({visits.conversion_rate:.2f}% of visitors)."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.FUNNEL, title=f"Conversion Funnel: {scope}", data=stages),
            [export_csv("export-funnel")],
        )

    # ---- audiences and campaigns -----------------------------------------

    def _criteria_from(self, query: str) -> AudienceCriteria:
        criteria = extract_criteria(query)
        return self.audience.reactivation_criteria() if criteria.is_empty() else criteria

    def audience_builder(self, query: str, context: QueryContext) -> ChatMessage:
        criteria = self._criteria_from(query)
        preview = self.audience.preview(criteria, find_campaign_type(query))
        logger.info(
            "Audience preview built",
            extra={"criteria": criteria.describe(), "count": preview.count},
        )

        if preview.count == 0:
            return create_message(
                f"No customers match {criteria.describe()}. Try loosening the criteria, for "
                "example dropping the LTV floor or adding another itinerary.",
                Visualization(type=VisualizationType.AUDIENCE_PREVIEW, title="Audience Preview", data=preview),
                [action("refine-audience", "Refine Audience", "sliders", ActionKind.REFINE_AUDIENCE)],
            )

        projection = preview.roi_projection
        recommendation = preview.recommendation
        content = (
            f"I found {preview.count} customers matching {criteria.describe()}. A "
            f"{recommendation.campaign_type.value} campaign via {recommendation.channel.value} at a "
            f"{projection.historical_response_rate * 100:.1f}% response rate projects "
            f"${projection.realistic_revenue:,} in revenue against ${projection.estimated_cost:,} in "
            f"cost ({projection.estimated_roi:.1f}x ROI).{self.phrases.follow_up('audience')}"
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.AUDIENCE_PREVIEW, title="Audience Preview", data=preview),
            [
                action(
                    "launch-campaign",
                    f"Launch Campaign ({preview.count})",
                    "send",
                    ActionKind.LAUNCH_CAMPAIGN,
                    {"count": preview.count, "campaignType": recommendation.campaign_type.value},
                ),
                action("refine-audience", "Refine Audience", "sliders", ActionKind.REFINE_AUDIENCE),
                export_csv("export-audience", "Export Audience"),
            ],
        )

    def campaign_recommendation(self, query: str, context: QueryContext) -> ChatMessage:
        criteria = self._criteria_from(query)
        customers = self.audience.filter_customers(criteria)
        recommendation = self.recommender.recommend(customers)

        content = (
            f"For {len(customers)} customers ({criteria.describe()}), I'd run a "
            f"**{recommendation.campaign_type.value}** campaign via "
            f"**{recommendation.channel.value}**. {recommendation.rationale}.\n\n"
            f"Messaging: {recommendation.messaging}"
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.METRICS,
                title="Campaign Recommendation",
                data=[
                    MetricData(label="Campaign Type", value=recommendation.campaign_type.value),
                    MetricData(label="Channel", value=recommendation.channel.value),
                    MetricData(
                        label="Expected Response",
                        value=f"{recommendation.expected_response_rate * 100:.1f}%",
                    ),
                    MetricData(label="Confidence", value=recommendation.confidence.title()),
                    MetricData(label="Audience Size", value=len(customers)),
                ],
            ),
            [
                action(
                    "create-recommended-audience",
                    f"Create Audience ({len(customers)})",
                    "users",
                    ActionKind.CREATE_AUDIENCE,
                    {"count": len(customers)},
                ),
                action("launch-recommended", "Launch Campaign", "send", ActionKind.LAUNCH_CAMPAIGN),
            ],
        )

    def roi_projection(self, query: str, context: QueryContext) -> ChatMessage:
        criteria = self._criteria_from(query)
        campaign_type = find_campaign_type(query) or CampaignType.REACTIVATION
        projection = self.audience.roi_projection_for(criteria, campaign_type)

        content = (
            f"Mailing {projection.audience_size} customers ({criteria.describe()}) with a "
            f"{campaign_type.value} campaign at the historical "
            f"{projection.historical_response_rate * 100:.1f}% response rate projects "
            f"${projection.realistic_revenue:,} in revenue (up to ${projection.optimistic_revenue:,} "
            f"in a strong scenario) for ${projection.estimated_cost:,} in print and postage. "
            f"That's an estimated {projection.estimated_roi:.1f}x return."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.METRICS,
                title=f"ROI Projection: {campaign_type.value}",
                data=[
                    MetricData(label="Audience Size", value=projection.audience_size),
                    MetricData(label="Avg Order Value", value=f"${projection.avg_order_value:,}"),
                    MetricData(label="Response Rate", value=f"{projection.historical_response_rate * 100:.1f}%"),
                    MetricData(label="Realistic Revenue", value=f"${projection.realistic_revenue:,}"),
                    MetricData(label="Optimistic Revenue", value=f"${projection.optimistic_revenue:,}"),
                    MetricData(label="Estimated Cost", value=f"${projection.estimated_cost:,}"),
                    MetricData(label="Estimated ROI", value=f"{projection.estimated_roi:.1f}x"),
                ],
            ),
            [
                action(
                    "create-roi-audience",
                    f"Create Audience ({projection.audience_size})",
                    "users",
                    ActionKind.CREATE_AUDIENCE,
                    {"count": projection.audience_size, "campaignType": campaign_type.value},
                ),
            ],
        )

    # ---- forensic audit --------------------------------------------------

    def channel_quality(self, query: str, context: QueryContext) -> ChatMessage:
        channels = forensic_audit.CHANNEL_QUALITY
        best = max(channels, key=lambda c: c.elite_rate)
        worst = max(channels, key=lambda c: c.junk_rate)
        rows = [
            {
                "channel": c.channel,
                "eliteRate": c.elite_rate,
                "junkRate": c.junk_rate,
                "totalVisitors": c.total_visitors,
                "verdict": c.verdict,
            }
            for c in channels
        ]
        content = (
            f"{self.phrases.opening('analysis')} {best.channel} is the quality benchmark with "
            f"{best.elite_rate}% Elite visitors. At the other end, {worst.junk_rate}% of "
            f"{worst.channel} traffic is bots or immediate bounces and only {worst.elite_rate}% "
            "are Elite buyers.\n\nCutting the Waste channels frees budget to fund matched "
            "creative where intent is highest."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.TABLE,
                title="Channel Quality Scorecard",
                data=TableData(
                    columns=[
                        TableColumn(key="channel", label="Channel"),
                        TableColumn(key="eliteRate", label="Elite %"),
                        TableColumn(key="junkRate", label="Junk %"),
                        TableColumn(key="totalVisitors", label="Visitors"),
                        TableColumn(key="verdict", label="Verdict"),
                    ],
                    rows=rows,
                ),
            ),
            [export_csv("export-channel-quality", "Export Scorecard")],
        )

    def exotic_opportunity(self, query: str, context: QueryContext) -> ChatMessage:
        data = [
            ChartDataPoint(label=h.destination.value, value=h.elite_households)
            for h in forensic_audit.ELITE_HOUSEHOLDS
        ]
        exotic = list(forensic_audit.EXOTIC_DESTINATIONS)
        known_fans = self.audience.filter_customers(AudienceCriteria(preferred_itinerary=exotic))
        names = "/".join(d.value for d in exotic)

        if known_fans:
            seed_note = (
                f"{len(known_fans)} customers in your file already prefer these destinations, "
                "which makes a ready seed audience for a matched-creative test."
            )
        else:
            seed_note = (
                "None of your current customers list these as a preferred itinerary, so this "
                "is net-new demand for a Prospecting test."
            )
        content = (
            f"{self.phrases.opening('concern')} {forensic_audit.EXOTIC_ELITE_HOUSEHOLDS:,} Elite "
            f"households are researching {names} with an average propensity score of "
            f"{forensic_audit.EXOTIC_AVG_PROPENSITY}, the highest of any destination, yet they see "
            f"0% matched creative. Every one of them gets generic Caribbean messaging.\n\n{seed_note}"
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="Elite Households by Destination", data=data),
            [
                action(
                    "exotic-audience",
                    f"Create {names} Audience ({len(known_fans)})",
                    "users",
                    ActionKind.CREATE_AUDIENCE,
                    {"count": len(known_fans)},
                ),
            ],
        )

    def relevance_premium(self, query: str, context: QueryContext) -> ChatMessage:
        premium = forensic_audit.RELEVANCE_PREMIUM
        content = (
            f"{self.phrases.opening('good')} when creative matches the visitor's destination intent, "
            f"average order value rises from ${premium.mismatched_creative_aov:,} to "
            f"${premium.matched_creative_aov:,}. That's +${premium.aov_lift:,} "
            f"(+{premium.aov_lift_percentage}%) on every booking, before any volume gains."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.METRICS,
                title="Relevance Premium",
                data=[
                    MetricData(label="Matched Creative AOV", value=f"${premium.matched_creative_aov:,}"),
                    MetricData(label="Mismatched Creative AOV", value=f"${premium.mismatched_creative_aov:,}"),
                    MetricData(label="AOV Lift", value=f"+${premium.aov_lift:,}", change=premium.aov_lift_percentage),
                    MetricData(label="Lift %", value=f"+{premium.aov_lift_percentage}%"),
                ],
            ),
            [],
        )

    def guardrail_effect(self, query: str, context: QueryContext) -> ChatMessage:
        effects = forensic_audit.GUARDRAIL_EFFECTS
        asked = find_itineraries(query)
        focus = next((e for e in effects if e.destination in asked), effects[0])

        data: List[ChartDataPoint] = []
        for effect in effects:
            data.append(ChartDataPoint(label=effect.destination.value,
                                       value=effect.retention_with_matched_card, group="Matched Card"))
            data.append(ChartDataPoint(label=effect.destination.value,
                                       value=effect.retention_with_generic_card, group="Generic Card"))

        content = (
            f"{self.phrases.opening('concern')} {focus.destination.value} intenders who see a matched "
            f"card stay on {focus.destination.value} {focus.retention_with_matched_card:.0f}% of the "
            f"time. Show them a generic card and only {focus.retention_with_generic_card:.0f}% stay. "
            f"Each switch costs ${focus.loss_per_switch:,} "
            f"(${focus.retained_aov:,} retained vs ${focus.switched_aov:,} switched AOV)."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.GROUPED_BAR,
                title="Retention: Matched vs Generic Card",
                data=data,
                group_key="group",
            ),
            [export_csv("export-guardrail")],
        )

    def destination_quality(self, query: str, context: QueryContext) -> ChatMessage:
        destinations = forensic_audit.DESTINATION_QUALITY
        least_served = min(destinations, key=lambda d: (d.current_match_rate, -d.avg_propensity_score))
        rows = [
            {
                "destination": d.destination.value,
                "eliteHouseholds": d.elite_households,
                "avgPropensityScore": d.avg_propensity_score,
                "currentMatchRate": d.current_match_rate,
                "matchedAov": d.matched_aov,
                "mismatchedAov": d.mismatched_aov,
            }
            for d in destinations
        ]
        content = (
            f"{self.phrases.opening('analysis')} propensity rises as destinations get more exotic, "
            f"while matched creative coverage falls. {least_served.destination.value} has "
            f"{least_served.elite_households:,} Elite households at a "
            f"{least_served.avg_propensity_score} propensity score and a "
            f"{least_served.current_match_rate:.0f}% match rate."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.TABLE,
                title="Destination Quality",
                data=TableData(
                    columns=[
                        TableColumn(key="destination", label="Destination"),
                        TableColumn(key="eliteHouseholds", label="Elite Households"),
                        TableColumn(key="avgPropensityScore", label="Avg Propensity"),
                        TableColumn(key="currentMatchRate", label="Match Rate %"),
                        TableColumn(key="matchedAov", label="Matched AOV"),
                        TableColumn(key="mismatchedAov", label="Mismatched AOV"),
                    ],
                    rows=rows,
                ),
            ),
            [export_csv("export-destinations")],
        )

    def dark_social(self, query: str, context: QueryContext) -> ChatMessage:
        dark = forensic_audit.DARK_SOCIAL
        visitors = f"{dark.unclassified_visitors / 1_000_000:.1f}M"
        content = (
            f"{self.phrases.opening('concern')} {visitors} social visitors arrive without usable "
            f"source tags across {dark.untagged_campaigns} untagged campaigns, "
            f"{dark.share_of_social_traffic:.0f}% of all social traffic. {dark.junk_rate}% of it is "
            f"junk and only {dark.elite_rate}% is Elite. Fixing the tagging governance gap is the "
            "prerequisite for optimizing any of this spend."
        )
        return create_message(
            content,
            Visualization(
                type=VisualizationType.METRICS,
                title="Dark Social",
                data=[
                    MetricData(label="Unclassified Visitors", value=visitors),
                    MetricData(label="Junk Rate", value=f"{dark.junk_rate}%"),
                    MetricData(label="Elite Rate", value=f"{dark.elite_rate}%"),
                    MetricData(label="Untagged Campaigns", value=dark.untagged_campaigns),
                    MetricData(label="Share of Social", value=f"{dark.share_of_social_traffic:.0f}%"),
                ],
            ),
            [],
        )

    def recent_insights(self, query: str, context: QueryContext) -> ChatMessage:
        insights = get_recent_insights()
        rows = [
            {"title": i.title, "type": i.type, "metric": i.metric or "", "date": i.timestamp.date().isoformat()}
            for i in insights
        ]
        headline = "\n".join(f"• {i.title}" for i in insights)
        return create_message(
            f"Here's what I've noticed recently:\n\n{headline}\n\nAsk about any of these for the details.",
            Visualization(
                type=VisualizationType.TABLE,
                title="Recent Insights",
                data=TableData(
                    columns=[
                        TableColumn(key="title", label="Insight"),
                        TableColumn(key="type", label="Type"),
                        TableColumn(key="metric", label="Metric"),
                        TableColumn(key="date", label="Date"),
                    ],
                    rows=rows,
                ),
            ),
            [],
        )

    # ---- follow-ups ------------------------------------------------------

    def breakdown_by_cabin(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.roas_by_cabin_type()
        content = (
            f"Breaking down by cabin type: Suite cabins lead with {_value_of(data, 'Suite'):.1f}x "
            "ROAS, though they represent lower volume. Balcony offers the best balance of volume "
            "and return."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title="ROAS by Cabin Type", data=data, y_key="roas"),
            [export_csv("export-cabin-breakdown")],
        )

    def breakdown_by_itinerary(self, query: str, context: QueryContext) -> ChatMessage:
        data = self.analytics.roas_by_itinerary()
        return create_message(
            "Breaking down by itinerary: Caribbean and Mediterranean are your top performers, "
            "while Alaska lags behind due to seasonal constraints and cabin mix.",
            Visualization(type=VisualizationType.BAR, title="ROAS by Itinerary", data=data, y_key="roas"),
            [export_csv("export-itinerary-breakdown")],
        )

    def exclude_itinerary(self, query: str, context: QueryContext) -> ChatMessage:
        """Re-derive the previous itinerary breakdown without the named destinations."""
        excluded: List[Itinerary] = find_itineraries(query)
        metric = context.last_metric

        if metric == "roas":
            names = {i.value for i in excluded}
            data = [d for d in self.analytics.roas_by_itinerary() if d.label not in names]
            title, y_key, unit = "ROAS by Itinerary", "roas", "x ROAS"
        elif metric == "revenue":
            data = _in_thousands(self.analytics.revenue_by_itinerary(exclude=excluded))
            title, y_key, unit = "Revenue by Itinerary ($k)", "revenue", "k revenue"
        else:
            data = self.analytics.bookings_by_itinerary(exclude=excluded)
            title, y_key, unit = "Bookings by Itinerary", None, " bookings"

        removed = " and ".join(i.value for i in excluded)
        if not data:
            return create_message(f"With {removed} excluded there is nothing left to compare.", actions=[])

        best = max(data, key=lambda d: d.value)
        prefix = "$" if metric == "revenue" else ""
        content = (
            f"Excluding {removed}, {best.label} leads with {prefix}{best.value:,}{unit}. "
            f"The remaining {len(data)} itineraries are shown below."
        )
        return create_message(
            content,
            Visualization(type=VisualizationType.BAR, title=f"{title} (excl. {removed})", data=data, y_key=y_key),
            [export_csv("export-excluded")],
        )

    def year_over_year(self, query: str, context: QueryContext) -> ChatMessage:
        return create_message(
            "Year-over-year comparison: Q1 2025 bookings are tracking 18% ahead of Q1 2024, with "
            "revenue up 22% due to stronger Suite and Balcony mix. Reactivation campaigns are "
            "driving the majority of this growth.\n\n*Note: Full YoY comparison requires 2023 data "
            "which is not included in this dataset.*",
            Visualization(
                type=VisualizationType.METRICS,
                data=[
                    MetricData(label="YoY Bookings", value="+18%", change=18),
                    MetricData(label="YoY Revenue", value="+22%", change=22),
                    MetricData(label="YoY ROAS", value="+0.3x", change=8),
                    MetricData(label="YoY AOV", value="+4%", change=4),
                ],
            ),
            [],
        )

    def fallback(self, query: str, context: QueryContext) -> ChatMessage:
        return create_message(FALLBACK_TEXT, actions=[])
