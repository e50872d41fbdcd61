"""
Forensic audit findings on visitor intent data.

These are fixed narrative figures from the traffic audit, independent of the
generated booking population. Nothing here is recomputed at query time.
"""

from typing import List

from models.dataset import Itinerary
from models.insight import (
    ChannelQuality,
    DarkSocialMetrics,
    DestinationQuality,
    EliteHousehold,
    GuardrailEffect,
    RelevancePremium,
)

ELITE_PROPENSITY_THRESHOLD = 2.25
JUNK_PROPENSITY_THRESHOLD = 0.10

CHANNEL_QUALITY: List[ChannelQuality] = [
    ChannelQuality(channel="Email (CRM)", elite_rate=42.3, junk_rate=6.8, total_visitors=5_400_000, verdict="Benchmark"),
    ChannelQuality(channel="Google Search", elite_rate=40.1, junk_rate=11.2, total_visitors=13_700_000, verdict="High Performance"),
    ChannelQuality(channel="Bing Search", elite_rate=36.4, junk_rate=14.5, total_visitors=2_100_000, verdict="Good"),
    ChannelQuality(channel="Organic Search", elite_rate=31.8, junk_rate=19.7, total_visitors=8_900_000, verdict="Good"),
    ChannelQuality(channel="Display", elite_rate=6.2, junk_rate=64.1, total_visitors=7_300_000, verdict="Low Quality"),
    ChannelQuality(channel="Programmatic Display", elite_rate=3.9, junk_rate=78.6, total_visitors=11_800_000, verdict="Waste/Cut"),
    ChannelQuality(channel="TikTok", elite_rate=2.6, junk_rate=86.9, total_visitors=4_200_000, verdict="Waste/Cut"),
    ChannelQuality(channel="Pinterest", elite_rate=1.7, junk_rate=95.2, total_visitors=3_600_000, verdict="Waste/Kill"),
]

DESTINATION_QUALITY: List[DestinationQuality] = [
    DestinationQuality(destination=Itinerary.CARIBBEAN, elite_households=412_880, avg_propensity_score=3.42,
                       retention_with_matched_creative=64, retention_with_generic_creative=61,
                       matched_aov=4_980, mismatched_aov=4_860, current_match_rate=92),
    DestinationQuality(destination=Itinerary.ALASKA, elite_households=187_340, avg_propensity_score=4.05,
                       retention_with_matched_creative=68, retention_with_generic_creative=37,
                       matched_aov=5_240, mismatched_aov=4_410, current_match_rate=58),
    DestinationQuality(destination=Itinerary.EUROPE, elite_households=156_920, avg_propensity_score=4.61,
                       retention_with_matched_creative=66, retention_with_generic_creative=34,
                       matched_aov=5_870, mismatched_aov=4_790, current_match_rate=41),
    DestinationQuality(destination=Itinerary.MEDITERRANEAN, elite_households=171_450, avg_propensity_score=4.83,
                       retention_with_matched_creative=72, retention_with_generic_creative=33,
                       matched_aov=6_120, mismatched_aov=4_880, current_match_rate=47),
    DestinationQuality(destination=Itinerary.HAWAII, elite_households=64_210, avg_propensity_score=5.12,
                       retention_with_matched_creative=70, retention_with_generic_creative=15,
                       matched_aov=5_600, mismatched_aov=3_200, current_match_rate=22),
    DestinationQuality(destination=Itinerary.ASIA, elite_households=58_412, avg_propensity_score=6.24,
                       retention_with_matched_creative=74, retention_with_generic_creative=12,
                       matched_aov=7_450, mismatched_aov=4_150, current_match_rate=0),
    DestinationQuality(destination=Itinerary.AUSTRALIA, elite_households=42_741, avg_propensity_score=6.10,
                       retention_with_matched_creative=71, retention_with_generic_creative=14,
                       matched_aov=7_180, mismatched_aov=4_020, current_match_rate=0),
]

ELITE_HOUSEHOLDS: List[EliteHousehold] = [
    EliteHousehold(destination=Itinerary.CARIBBEAN, elite_households=412_880, avg_propensity_score=3.42,
                   current_creative_strategy="Matched", estimated_demand_value=2_056_142_400),
    EliteHousehold(destination=Itinerary.ALASKA, elite_households=187_340, avg_propensity_score=4.05,
                   current_creative_strategy="Matched", estimated_demand_value=981_661_600),
    EliteHousehold(destination=Itinerary.MEDITERRANEAN, elite_households=171_450, avg_propensity_score=4.83,
                   current_creative_strategy="Matched", estimated_demand_value=1_049_274_000),
    EliteHousehold(destination=Itinerary.EUROPE, elite_households=156_920, avg_propensity_score=4.61,
                   current_creative_strategy="Matched", estimated_demand_value=921_120_400),
    EliteHousehold(destination=Itinerary.HAWAII, elite_households=64_210, avg_propensity_score=5.12,
                   current_creative_strategy="Generic/Caribbean (Mismatch)", estimated_demand_value=359_576_000),
    EliteHousehold(destination=Itinerary.ASIA, elite_households=58_412, avg_propensity_score=6.24,
                   current_creative_strategy="Generic/Caribbean (Mismatch)", estimated_demand_value=326_698_316),
    EliteHousehold(destination=Itinerary.AUSTRALIA, elite_households=42_741, avg_propensity_score=6.10,
                   current_creative_strategy="Generic/Caribbean (Mismatch)", estimated_demand_value=239_050_413),
]

EXOTIC_DESTINATIONS = (Itinerary.ASIA, Itinerary.AUSTRALIA)
EXOTIC_ELITE_HOUSEHOLDS = 101_153
EXOTIC_AVG_PROPENSITY = 6.18

RELEVANCE_PREMIUM = RelevancePremium(
    matched_creative_aov=5_593,
    mismatched_creative_aov=4_723,
    aov_lift=870,
    aov_lift_percentage=18.4,
)

GUARDRAIL_EFFECTS: List[GuardrailEffect] = [
    GuardrailEffect(destination=Itinerary.HAWAII, retention_with_matched_card=70, retention_with_generic_card=15,
                    retention_drop=55, retained_aov=5_600, switched_aov=3_200, loss_per_switch=2_400),
    GuardrailEffect(destination=Itinerary.ASIA, retention_with_matched_card=74, retention_with_generic_card=12,
                    retention_drop=62, retained_aov=7_450, switched_aov=4_150, loss_per_switch=3_300),
    GuardrailEffect(destination=Itinerary.AUSTRALIA, retention_with_matched_card=71, retention_with_generic_card=14,
                    retention_drop=57, retained_aov=7_180, switched_aov=4_020, loss_per_switch=3_160),
    GuardrailEffect(destination=Itinerary.MEDITERRANEAN, retention_with_matched_card=72, retention_with_generic_card=33,
                    retention_drop=39, retained_aov=6_120, switched_aov=4_880, loss_per_switch=1_240),
    GuardrailEffect(destination=Itinerary.ALASKA, retention_with_matched_card=68, retention_with_generic_card=37,
                    retention_drop=31, retained_aov=5_240, switched_aov=4_410, loss_per_switch=830),
    GuardrailEffect(destination=Itinerary.EUROPE, retention_with_matched_card=66, retention_with_generic_card=34,
                    retention_drop=32, retained_aov=5_870, switched_aov=4_790, loss_per_switch=1_080),
]

DARK_SOCIAL = DarkSocialMetrics(
    unclassified_visitors=19_200_000,
    junk_rate=69.6,
    elite_rate=4.8,
    untagged_campaigns=143,
    share_of_social_traffic=61.0,
)
