"""Proactive chat messages for catalog insights."""

from __future__ import annotations

from typing import Dict, List

from models.chat import ChatMessage, QueryContext
from models.insight import Insight
from repositories.insights import get_insight, get_recent_insights
from services.intent_router import Handler
from services.response_synthesizer import ResponseSynthesizer, create_message
from utils.error_handling import NotFoundError


class InsightService:
    """Maps each catalog insight to the synthesizer handler that explains it."""

    def __init__(self, synthesizer: ResponseSynthesizer):
        s = synthesizer
        self._handlers: Dict[str, Handler] = {
            "insight-exotic": s.exotic_opportunity,
            "insight-channels": s.channel_quality,
            "insight-001": s.channel_quality,
            "insight-002": s.exotic_opportunity,
            "insight-003": s.relevance_premium,
            "insight-004": s.guardrail_effect,
            "insight-005": s.channel_quality,
            "insight-006": s.dark_social,
        }

    def list_recent(self, limit: int = 4) -> List[Insight]:
        return get_recent_insights(limit)

    def respond_to(self, insight: Insight) -> ChatMessage:
        handler = self._handlers.get(insight.id)
        if handler is None:
            return create_message(f"I noticed {insight.title.lower()}. {insight.description}")
        # The title carries the destination for guardrail insights ("Hawaii guardrail ...").
        return handler(insight.title, QueryContext())

    def respond(self, insight_id: str) -> ChatMessage:
        insight = get_insight(insight_id)
        if insight is None:
            raise NotFoundError(f"Insight {insight_id} not found")
        return self.respond_to(insight)
