"""Custom exceptions and helpers for consistent error responses."""

import json
from typing import Any, Dict

GENERIC_FAILURE_MESSAGE = "Something went wrong while analyzing your question. Please try again."


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(AppError):
    """Raised when a requested resource is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(AppError):
    """Raised when a request payload is rejected before routing."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=400)


def json_response(status: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Format a JSON API Gateway HTTP API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def to_response(error: AppError) -> Dict[str, Any]:
    """Convert an AppError into a Lambda proxy integration response."""
    return json_response(error.status_code, {"error": str(error), "status": "error"})


def internal_error_response(correlation_id: str) -> Dict[str, Any]:
    """Generic 500 that never carries exception detail back to the caller."""
    return json_response(
        500,
        {
            "error": GENERIC_FAILURE_MESSAGE,
            "status": "error",
            "correlation_id": correlation_id,
        },
    )
