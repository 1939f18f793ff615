"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RouteOptimizationRequest(BaseModel):
    starting_point: str = Field(..., min_length=1, description="Address the trip starts from and returns to.")
    addresses: List[str] = Field(default_factory=list, description="Intermediate stops to order.")
    close_loop: Optional[bool] = Field(
        default=None,
        description="Count the return leg to the starting point in brute-force cost. Defaults to settings.",
    )

    @field_validator("starting_point")
    @classmethod
    def _strip_start(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("starting_point must not be blank")
        return value

    @field_validator("addresses")
    @classmethod
    def _reject_blank_addresses(cls, value: List[str]) -> List[str]:
        if any(not address.strip() for address in value):
            raise ValueError("addresses must not contain blank entries")
        return value


class RouteOptimizationResponse(BaseModel):
    ordered_addresses: List[str]
    encoded_path: Optional[str] = None
    strategy: str
    metadata: dict


class CapabilitiesResponse(BaseModel):
    has_route_provider: bool
    has_matrix_provider: bool
    mock_allowed: bool
    strategy: Optional[str]
    max_brute_force_waypoints: int
    close_loop: bool
