"""
Intent router.

Ordered regex rule tables map a free-text question to a synthesizer handler.
Declaration order is the only tie-breaker, so specific rules must precede
broad ones (e.g. the audience builder before the churn rule, whose
``lapsed.*customer`` pattern would otherwise catch "Build an audience of
lapsed Alaska customers").
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Sequence

from models.chat import ChatMessage, QueryContext
from services.response_synthesizer import ResponseSynthesizer
from utils.logging_config import get_logger

logger = get_logger(__name__)

Handler = Callable[[str, QueryContext], ChatMessage]

FALLBACK_RULE = "fallback"

_DIMENSION_KEYWORDS = (
    ("itinerar", "itinerary"),
    ("cabin", "cabin_type"),
    ("campaign", "campaign_type"),
    ("channel", "channel"),
    ("tier", "loyalty_tier"),
)

_METRIC_KEYWORDS = (
    (("roas", "return"), "roas"),
    (("revenue",), "revenue"),
    (("booking",), "bookings"),
    (("ltv", "lifetime"), "ltv"),
)


def extract_dimension(query: str) -> Optional[str]:
    lowered = query.lower()
    return next((dim for keyword, dim in _DIMENSION_KEYWORDS if keyword in lowered), None)


def extract_metric(query: str) -> Optional[str]:
    lowered = query.lower()
    return next(
        (metric for keywords, metric in _METRIC_KEYWORDS if any(k in lowered for k in keywords)),
        None,
    )


@dataclass(frozen=True)
class Rule:
    """Named handler with case-insensitive patterns (OR semantics)."""

    name: str
    patterns: Sequence[Pattern]
    handler: Handler

    @classmethod
    def of(cls, name: str, patterns: Sequence[str], handler: Handler) -> "Rule":
        return cls(name, tuple(re.compile(p, re.IGNORECASE) for p in patterns), handler)

    def matches(self, normalized: str) -> bool:
        return any(p.search(normalized) for p in self.patterns)


@dataclass(frozen=True)
class RouteResult:
    message: ChatMessage
    context: QueryContext
    rule: str


class IntentRouter:
    """Dispatches a query to the first matching rule."""

    def __init__(self, primary_rules: List[Rule], follow_up_rules: List[Rule], fallback: Handler):
        self.primary_rules = primary_rules
        self.follow_up_rules = follow_up_rules
        self.fallback = fallback

    def route(self, query: str, context: Optional[QueryContext] = None) -> RouteResult:
        """Follow-ups first when there is history, then primary rules, else the fallback.

        Handlers receive the original text; matching runs on the trimmed,
        lower-cased form. Unmatched queries return the same context object.
        """
        context = context if context is not None else QueryContext()
        normalized = query.strip().lower()

        if context.has_history:
            for rule in self.follow_up_rules:
                if rule.matches(normalized):
                    message = rule.handler(query, context)
                    return RouteResult(message, context.model_copy(update={"last_query": query}), rule.name)

        for rule in self.primary_rules:
            if rule.matches(normalized):
                message = rule.handler(query, context)
                fresh = QueryContext(
                    last_query=query,
                    last_dimension=extract_dimension(query),
                    last_metric=extract_metric(query),
                )
                return RouteResult(message, fresh, rule.name)

        logger.info("No intent matched", extra={"query_length": len(query)})
        return RouteResult(self.fallback(query, context), context, FALLBACK_RULE)


def build_default_router(synthesizer: ResponseSynthesizer) -> IntentRouter:
    """The production rule table. Order matters; tests pin the tricky cases."""
    s = synthesizer
    primary = [
        Rule.of("roas_by_itinerary", [
            r"roas.*itinerar",
            r"roas.*(caribbean|alaska|europe|mediterranean)",
            r"return.*ad.*spend.*itinerar",
        ], s.roas_by_itinerary),
        Rule.of("roas_by_cabin_type", [
            r"roas.*cabin",
            r"roas.*(inside|ocean|balcony|suite)",
        ], s.roas_by_cabin_type),
        Rule.of("roas_by_campaign_type", [
            r"roas.*(prospecting|reactivation|retargeting)",
            r"roas.*campaign.*type",
        ], s.roas_by_campaign_type),
        Rule.of("bookings_revenue_by_cabin", [
            r"booking.*revenue.*cabin",
            r"cabin.*type.*booking",
            r"revenue.*cabin",
        ], s.bookings_revenue_by_cabin),
        Rule.of("bookings_by_itinerary", [
            r"booking.*itinerar",
            r"itinerar.*booking",
        ], s.bookings_by_itinerary),
        Rule.of("campaign_type_comparison", [
            r"prospecting.*reactivation",
            r"reactivation.*prospecting",
            r"sail.*date.*responsive",
            r"campaign.*type.*compar",
        ], s.campaign_type_comparison),
        Rule.of("conversion_funnel", [
            r"funnel",
            r"impressions?.*(visit|booking)",
            r"conversion.*stage",
        ], s.conversion_funnel),
        # audience, recommendation and ROI rules precede the customer rules below
        Rule.of("audience_builder", [
            r"build.*audience",
            r"create.*audience",
            r"audience.*preview",
            r"target.*audience",
        ], s.audience_builder),
        Rule.of("campaign_recommendation", [
            r"recommend.*campaign",
            r"campaign.*recommend",
            r"what campaign",
            r"which campaign.*should",
        ], s.campaign_recommendation),
        Rule.of("roi_projection", [
            r"\broi\b",
            r"project.*revenue",
            r"revenue.*projection",
        ], s.roi_projection),
        Rule.of("loyalty_tiers", [
            r"loyalty.*tier",
            r"customer.*tier",
            r"how many.*customer",
        ], s.loyalty_tiers),
        Rule.of("customer_segments", [
            r"customer.*segment",
            r"segment.*breakdown",
        ], s.customer_segments),
        Rule.of("churn_risk", [
            r"churn",
            r"at risk",
            r"risk.*customer",
            r"haven't cruised",
            r"lapsed.*customer",
        ], s.churn_risk),
        Rule.of("ltv_by_channel", [
            r"ltv.*channel",
            r"lifetime.*value.*channel",
            r"acquisition.*channel",
        ], s.ltv_by_channel),
        Rule.of("revenue_over_time", [
            r"revenue.*over.*time",
            r"revenue.*trend",
            r"monthly.*revenue",
        ], s.revenue_over_time),
        Rule.of("bookings_over_time", [
            r"booking.*over.*time",
            r"booking.*trend",
            r"monthly.*booking",
        ], s.bookings_over_time),
        Rule.of("why_question", [
            r"why.*(alaska|caribbean|mediterranean|europe)",
            r"why.*underperform",
            r"why.*outperform",
        ], s.why_question),
        Rule.of("high_value_customers", [
            r"high.*value.*customer",
            r"vip.*customer",
            r"top.*customer",
        ], s.high_value_customers),
        Rule.of("overall_metrics", [
            r"overall.*metric",
            r"summary",
            r"dashboard",
            r"overview",
        ], s.overall_metrics),
        Rule.of("channel_quality", [
            r"channel.*quality",
            r"scorecard",
            r"junk.*traffic",
            r"pinterest",
            r"elite.*(rate|buyer)",
        ], s.channel_quality),
        Rule.of("exotic_opportunity", [
            r"exotic",
            r"\b(asia|australia)\b",
            r"elite.*household",
        ], s.exotic_opportunity),
        Rule.of("relevance_premium", [
            r"relevance",
            r"matched.*creative",
            r"aov.*lift",
        ], s.relevance_premium),
        Rule.of("guardrail_effect", [
            r"guardrail",
            r"hawaii",
        ], s.guardrail_effect),
        Rule.of("destination_quality", [
            r"destination.*quality",
            r"propensity",
        ], s.destination_quality),
        Rule.of("dark_social", [
            r"dark.*social",
            r"unclassified",
            r"untagged",
        ], s.dark_social),
        Rule.of("recent_insights", [
            r"insight",
            r"what.*new",
            r"anything.*notice",
        ], s.recent_insights),
    ]

    follow_ups = [
        Rule.of("breakdown_by_cabin", [r"break.*down.*cabin", r"by cabin"], s.breakdown_by_cabin),
        Rule.of("breakdown_by_itinerary", [r"break.*down.*itinerar", r"by itinerar"], s.breakdown_by_itinerary),
        Rule.of("exclude_itinerary", [r"exclude.*(alaska|caribbean|mediterranean|europe)"], s.exclude_itinerary),
        Rule.of("year_over_year", [r"compare.*last.*year", r"year.*over.*year", r"yoy"], s.year_over_year),
    ]

    return IntentRouter(primary, follow_ups, s.fallback)
