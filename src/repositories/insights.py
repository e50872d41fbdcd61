"""Pre-authored insights for the proactive sidebar, drawn from the forensic audit."""

from datetime import datetime, timezone
from typing import List, Optional

from models.insight import Insight


def _ts(month: int, day: int) -> datetime:
    return datetime(2025, month, day, tzinfo=timezone.utc)


INSIGHTS: List[Insight] = [
    Insight(
        id="insight-exotic",
        type="info",
        title="View the Exotic Opportunity",
        description="101,153 Elite households for Asia/Australia with 0% matched creative — $500M+ demand pool.",
        metric="$500M+",
        timestamp=_ts(2, 2),
    ),
    Insight(
        id="insight-channels",
        type="info",
        title="View Channel Quality Scorecard",
        description="See which channels deliver Elite buyers vs. junk traffic. Find the funding source for the fix.",
        metric="Scorecard",
        timestamp=_ts(2, 2),
    ),
    Insight(
        id="insight-001",
        type="warning",
        title="Pinterest traffic 95% junk",
        description="95.2% of Pinterest visitors are bots or immediate bounces. Only 1.7% are Elite buyers.",
        metric="95%",
        change=-95,
        timestamp=_ts(2, 1),
    ),
    Insight(
        id="insight-002",
        type="warning",
        title="100% leakage on Asia/Australia",
        description="Zero matched creative for 101,153 Elite households with propensity score 6.18.",
        metric="0%",
        change=-100,
        timestamp=_ts(1, 31),
    ),
    Insight(
        id="insight-003",
        type="success",
        title="Relevance Premium confirmed: +$870 AOV",
        description="When creative matches intent, AOV jumps from $4,723 to $5,593. That's +18% per booking.",
        metric="+$870",
        change=18,
        timestamp=_ts(1, 30),
    ),
    Insight(
        id="insight-004",
        type="warning",
        title="Hawaii guardrail failing: 70% → 15%",
        description="Hawaii intenders with a matched card retain 70%. With a generic card only 15% stay, a $2,400 loss per switch.",
        metric="-55 pts",
        change=-55,
        timestamp=_ts(1, 29),
    ),
    Insight(
        id="insight-005",
        type="success",
        title="Google Search delivering 40% Elite",
        description="13.7M visitors at a 40.1% Elite rate. The workhorse channel nearly matches CRM quality.",
        metric="40.1%",
        change=40,
        timestamp=_ts(1, 28),
    ),
    Insight(
        id="insight-006",
        type="info",
        title="Dark Social: 19.2M unclassified",
        description="Tagging failures hide social spend with a 69.6% junk rate. Fix the governance gap to optimize these campaigns.",
        metric="19.2M",
        timestamp=_ts(1, 27),
    ),
]


def get_insight(insight_id: str) -> Optional[Insight]:
    return next((i for i in INSIGHTS if i.id == insight_id), None)


def get_recent_insights(limit: int = 4) -> List[Insight]:
    """Newest first; ties keep catalog order."""
    return sorted(INSIGHTS, key=lambda i: i.timestamp, reverse=True)[:limit]


def get_insights_by_type(insight_type: str) -> List[Insight]:
    return [i for i in INSIGHTS if i.type == insight_type]
