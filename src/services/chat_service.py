"""
Chat orchestration service.

Validates a chat payload, routes it to a handler, optionally enhances the text
and returns the message together with the context for the next turn.
"""

from __future__ import annotations

import time
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from config.settings import Settings, get_settings
from models.chat import ChatRequest, ChatResponse
from repositories.dataset import Dataset, get_dataset
from services.analytics_service import AnalyticsService
from services.audience_service import AudienceService
from services.enhancement_service import EnhancementService
from services.intent_router import IntentRouter, build_default_router
from services.phrasing import PhraseBank
from services.recommendation_service import RecommendationService
from services.response_synthesizer import ResponseSynthesizer
from utils.error_handling import ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)


def build_synthesizer(settings: Settings, dataset: Dataset) -> ResponseSynthesizer:
    """Wire the aggregation layer and recommender into a synthesizer."""
    recommender = RecommendationService()
    return ResponseSynthesizer(
        analytics=AnalyticsService(dataset),
        audience=AudienceService(dataset, recommender, settings.churn_threshold_months),
        recommender=recommender,
        phrases=PhraseBank(seed=settings.phrase_seed),
        churn_threshold_months=settings.churn_threshold_months,
    )


def _first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or "payload"
    return f"{location}: {error.get('msg', 'invalid value')}"


class ChatService:
    """validate -> route -> enhance -> respond."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        dataset: Optional[Dataset] = None,
        router: Optional[IntentRouter] = None,
        enhancer: Optional[EnhancementService] = None,
    ):
        self.settings = settings or get_settings()
        self.dataset = dataset or get_dataset()
        self.synthesizer = build_synthesizer(self.settings, self.dataset)
        self.router = router or build_default_router(self.synthesizer)
        self.enhancer = enhancer or EnhancementService(self.settings)

    @staticmethod
    def parse_request(payload: Any) -> ChatRequest:
        """Validate the inbound payload; failures become client errors."""
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            return ChatRequest.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(_first_error(exc)) from exc

    def handle(self, payload: Any, correlation_id: str = "") -> ChatResponse:
        request = self.parse_request(payload)

        start = time.perf_counter()
        result = self.router.route(request.message, request.context)
        route_ms = int((time.perf_counter() - start) * 1000)

        message = result.message
        enhanced = self.enhancer.enhance(request.message, message, request.context)
        if enhanced:
            message = message.model_copy(update={"content": enhanced})

        logger.info(
            "Chat handled",
            extra={
                "correlation_id": correlation_id,
                "rule": result.rule,
                "route_latency_ms": route_ms,
                "total_latency_ms": int((time.perf_counter() - start) * 1000),
                "enhanced": bool(enhanced),
                "has_visualization": message.visualization is not None,
            },
        )
        return ChatResponse(message=message, context=result.context)
