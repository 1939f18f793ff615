"""Routing orchestration service."""

from __future__ import annotations

import logging

from ...config import settings
from ...models.domain import Capabilities
from ...schemas.routing import (
    CapabilitiesResponse,
    RouteOptimizationRequest,
    RouteOptimizationResponse,
)
from .google_client import GoogleRoutesClient
from .ors_client import OpenRouteServiceClient
from .selector import compute_optimal_route, preferred_strategy_name
from .strategies import OptimizerOptions

logger = logging.getLogger(__name__)


def _build_options(payload: RouteOptimizationRequest | None = None) -> OptimizerOptions:
    close_loop = settings.close_loop
    if payload is not None and payload.close_loop is not None:
        close_loop = payload.close_loop
    return OptimizerOptions(
        close_loop=close_loop,
        max_intermediates=settings.max_brute_force_waypoints,
        max_parallel_geocode_requests=settings.max_parallel_geocode_requests,
        allow_mock=settings.allow_mock_strategy,
        mock_seed=settings.mock_seed,
        mock_latency_seconds=settings.mock_latency_seconds,
    )


def describe_capabilities() -> CapabilitiesResponse:
    capabilities = Capabilities.from_settings(settings)
    return CapabilitiesResponse(
        has_route_provider=capabilities.has_route_provider,
        has_matrix_provider=capabilities.has_matrix_provider,
        mock_allowed=settings.allow_mock_strategy,
        strategy=preferred_strategy_name(capabilities, allow_mock=settings.allow_mock_strategy),
        max_brute_force_waypoints=settings.max_brute_force_waypoints,
        close_loop=settings.close_loop,
    )


def optimize_route(payload: RouteOptimizationRequest) -> RouteOptimizationResponse:
    capabilities = Capabilities.from_settings(settings)
    route_provider = None
    ors_client = None
    if capabilities.has_route_provider:
        route_provider = GoogleRoutesClient()
    elif capabilities.has_matrix_provider:
        ors_client = OpenRouteServiceClient()

    logger.info(
        f"Computing route from '{payload.starting_point}' through {len(payload.addresses)} addresses"
    )
    result = compute_optimal_route(
        payload.addresses,
        payload.starting_point,
        capabilities,
        route_provider=route_provider,
        geocoder=ors_client,
        matrix_provider=ors_client,
        options=_build_options(payload),
    )
    return RouteOptimizationResponse(
        ordered_addresses=result.ordered_addresses,
        encoded_path=result.encoded_path,
        strategy=result.metadata.get("strategy", "unknown"),
        metadata=result.metadata,
    )
