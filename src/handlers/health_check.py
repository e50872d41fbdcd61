"""Lightweight health check handler."""

import json
from datetime import datetime, timezone

from config.settings import get_settings


def lambda_handler(event, context):
    """Return a simple 200 response to verify the stack is alive."""
    settings = get_settings()
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(
            {
                "status": "ok",
                "environment": settings.environment,
                "llm_enhancement": settings.llm_enhancement_enabled,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ),
    }
