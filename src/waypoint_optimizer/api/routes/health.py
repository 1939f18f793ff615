"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.routing import CapabilitiesResponse
from ...services.routing.service import describe_capabilities

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/capabilities", response_model=CapabilitiesResponse, status_code=status.HTTP_200_OK)
def health_capabilities() -> CapabilitiesResponse:
    """Report which routing capabilities are configured and the strategy they select."""
    return describe_capabilities()
