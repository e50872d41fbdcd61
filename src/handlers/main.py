"""
Single entrypoint Lambda that routes HTTP API requests to thin handler modules.

One Lambda keeps the in-memory dataset and enhancement cache warm across routes.
"""

from typing import Callable, Tuple

from utils.error_handling import json_response

from . import chat, health_check, insights


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    The event contains the HTTP method and path; the first matching prefix in
    the route table wins.
    """
    method = event.get("requestContext", {}).get("http", {}).get("method", "")
    path = event.get("requestContext", {}).get("http", {}).get("path", "")
    route_key = f"{method.upper()} {path}"

    # Prefix match; /insights/{id}/respond is the only POST under /insights/.
    route_table: Tuple[Tuple[str, Callable], ...] = (
        ("GET /health", health_check.lambda_handler),
        ("POST /chat", chat.lambda_handler),
        ("GET /insights", insights.list_handler),
        ("POST /insights/", insights.respond_handler),
    )

    for prefix, handler in route_table:
        if route_key.startswith(prefix):
            return handler(event, context)

    return json_response(404, {"message": "Route not found", "route": route_key})
