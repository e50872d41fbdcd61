"""POST /chat: answer one analytics question."""

from __future__ import annotations

import json
import uuid
from typing import Dict, Optional

from utils.error_handling import AppError, internal_error_response, json_response, to_response
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Lazy-loaded so the dataset is built on first use and reused across warm invocations
_chat_service: Optional["ChatService"] = None


def _get_chat_service():
    """Lazy-load ChatService."""
    global _chat_service
    if _chat_service is None:
        from services.chat_service import ChatService
        _chat_service = ChatService()
    return _chat_service


def lambda_handler(event, context) -> Dict:
    """Validate, route and respond; failures never leak exception text."""
    correlation_id = str(uuid.uuid4())
    try:
        raw_body = event.get("body") or "{}"
        try:
            payload = json.loads(raw_body)
        except json.JSONDecodeError:
            return json_response(400, {"error": "Request body must be valid JSON", "status": "error"})

        response = _get_chat_service().handle(payload, correlation_id=correlation_id)
        return json_response(200, response.to_wire())
    except AppError as exc:
        logger.info(
            "Chat request rejected",
            extra={"correlation_id": correlation_id, "error": str(exc)},
        )
        return to_response(exc)
    except Exception:
        logger.exception("Chat request failed", extra={"correlation_id": correlation_id})
        return internal_error_response(correlation_id)
