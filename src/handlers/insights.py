"""
Proactive insight routes.

GET /insights?limit=n lists recent insights; POST /insights/{id}/respond
returns the chat message that explains one of them.
"""

from __future__ import annotations

import uuid
from typing import Dict, Optional

from utils.error_handling import (
    AppError,
    NotFoundError,
    ValidationError,
    internal_error_response,
    json_response,
    to_response,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 4
MAX_LIMIT = 20

_insight_service: Optional["InsightService"] = None


def _get_insight_service():
    """Lazy-load InsightService on top of the process-wide dataset."""
    global _insight_service
    if _insight_service is None:
        from config.settings import get_settings
        from repositories.dataset import get_dataset
        from services.chat_service import build_synthesizer
        from services.insight_service import InsightService
        _insight_service = InsightService(build_synthesizer(get_settings(), get_dataset()))
    return _insight_service


def _parse_limit(event: Dict) -> int:
    raw = (event.get("queryStringParameters") or {}).get("limit")
    if raw is None:
        return DEFAULT_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError("limit must be an integer") from None
    if limit < 1:
        raise ValidationError("limit must be positive")
    return min(limit, MAX_LIMIT)


def _insight_id_from(event: Dict) -> str:
    insight_id = (event.get("pathParameters") or {}).get("insightId")
    if not insight_id:
        # /insights/{id}/respond
        path = event.get("requestContext", {}).get("http", {}).get("path", "")
        parts = [p for p in path.split("/") if p]
        if len(parts) != 3 or parts[0] != "insights" or parts[2] != "respond":
            raise NotFoundError("Route not found")
        insight_id = parts[1]
    return insight_id


def list_handler(event, context) -> Dict:
    correlation_id = str(uuid.uuid4())
    try:
        insights = _get_insight_service().list_recent(_parse_limit(event))
        return json_response(200, {"insights": [i.to_wire() for i in insights]})
    except AppError as exc:
        return to_response(exc)
    except Exception:
        logger.exception("Listing insights failed", extra={"correlation_id": correlation_id})
        return internal_error_response(correlation_id)


def respond_handler(event, context) -> Dict:
    correlation_id = str(uuid.uuid4())
    try:
        insight_id = _insight_id_from(event)
        message = _get_insight_service().respond(insight_id)
        logger.info(
            "Insight response built",
            extra={"correlation_id": correlation_id, "insight_id": insight_id},
        )
        return json_response(200, {"message": message.to_wire()})
    except AppError as exc:
        return to_response(exc)
    except Exception:
        logger.exception("Insight response failed", extra={"correlation_id": correlation_id})
        return internal_error_response(correlation_id)
