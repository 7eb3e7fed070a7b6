"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/routes", status_code=status.HTTP_200_OK)
def health_routes(request: Request) -> dict:
    """Report routing configuration without calling the routing service."""
    limiter = request.app.state.routes_rate_limiter
    return {
        "service": "routes",
        "configured": bool(settings.routes_api_key),
        "max_requests_per_window": limiter.max_requests,
        "window_seconds": limiter.window_seconds,
        "available_slots": limiter.available_slots(),
    }
