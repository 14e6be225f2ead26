"""API v1 endpoints."""

from bulletin.api.v1 import messages, health
from bulletin.api.v1.models import HealthResponse, ErrorResponse

__all__ = [
    "messages",
    "health",
    "HealthResponse",
    "ErrorResponse",
]
