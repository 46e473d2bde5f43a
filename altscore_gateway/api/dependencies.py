"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from altscore_gateway.infrastructure.clients.explanation import ExplanationClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_explanation_client() -> ExplanationClient:
    """Provide generative language client instance"""
    return ExplanationClient()
