"""Insight catalog entries and forensic audit fixture shapes."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from models.base import CamelModel
from models.dataset import Itinerary


class Insight(CamelModel):
    """Pre-authored proactive insight shown in the sidebar."""

    id: str
    type: Literal["warning", "success", "info"]
    title: str
    description: str
    metric: Optional[str] = None
    change: Optional[float] = None
    timestamp: datetime


class ChannelQuality(CamelModel):
    """Visitor quality for one traffic source."""

    channel: str
    elite_rate: float  # % of visitors above the buyer propensity threshold
    junk_rate: float  # % of visitors below the bot/bounce threshold
    total_visitors: int
    verdict: Literal[
        "Benchmark", "High Performance", "Good", "Waste/Cut", "Waste/Kill", "Low Quality"
    ]


class DestinationQuality(CamelModel):
    destination: Itinerary
    elite_households: int
    avg_propensity_score: float
    retention_with_matched_creative: float
    retention_with_generic_creative: float
    matched_aov: int
    mismatched_aov: int
    current_match_rate: float


class EliteHousehold(CamelModel):
    destination: Itinerary
    elite_households: int
    avg_propensity_score: float
    current_creative_strategy: Literal["Matched", "Generic/Caribbean (Mismatch)"]
    estimated_demand_value: int


class RelevancePremium(CamelModel):
    matched_creative_aov: int
    mismatched_creative_aov: int
    aov_lift: int
    aov_lift_percentage: float


class GuardrailEffect(CamelModel):
    destination: Itinerary
    retention_with_matched_card: float
    retention_with_generic_card: float
    retention_drop: float
    retained_aov: int
    switched_aov: int
    loss_per_switch: int


class DarkSocialMetrics(CamelModel):
    """Traffic that arrives without usable source tagging."""

    unclassified_visitors: int
    junk_rate: float
    elite_rate: float
    untagged_campaigns: int
    share_of_social_traffic: float
