"""Itinerary endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from ...config import settings
from ...models.domain import TravelMode
from ...schemas.itinerary import ActivityOrderModel, SuggestOrderRequest, SuggestOrderResponse
from ...services.routing.errors import ExternalServiceError, SuggestionTimeout
from ...services.routing.service import build_routes_provider, suggest_activity_order

router = APIRouter(prefix="/itinerary", tags=["itinerary"])


@router.post("/suggest-order", response_model=SuggestOrderResponse, status_code=status.HTTP_200_OK)
def suggest_order(payload: SuggestOrderRequest, request: Request) -> SuggestOrderResponse:
    """Suggest a visiting order for one day; the caller keeps its order on any error."""
    if len(payload.spots) < 2:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="At least two spots are needed to suggest an order.",
        )
    provider = build_routes_provider(request.app.state.routes_rate_limiter)
    try:
        result = suggest_activity_order(
            [spot.to_node() for spot in payload.spots],
            [activity.to_node() for activity in payload.other_activities],
            provider=provider,
            start=payload.start.to_node() if payload.start else None,
            end=payload.end.to_node() if payload.end else None,
            transports=[transport.to_override() for transport in payload.transports],
            travel_mode=payload.travel_mode or TravelMode(settings.default_travel_mode),
            day_start_hours=payload.day_start_hours,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ExternalServiceError as exc:
        logging.warning(f"Routing service unavailable for order suggestion: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Routing service error: {exc}",
        ) from exc
    except SuggestionTimeout as exc:
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error suggesting activity order: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to suggest activity order: {str(exc)}",
        ) from exc

    return SuggestOrderResponse(
        orders=[ActivityOrderModel(activity_id=o.activity_id, order=o.order) for o in result.orders],
        metadata=result.metadata,
    )
