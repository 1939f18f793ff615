"""Capability-based strategy selection and the core route entry point."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import Address, Capabilities, RouteRequest, RouteResult, StrategyOutcome
from .collaborators import Geocoder, MatrixProvider, RouteProvider
from .errors import MockStrategyDisabled
from .normalizer import normalize_result
from .strategies import (
    MatrixBruteForceStrategy,
    OptimizerOptions,
    ProviderOptimizedStrategy,
    RandomMockStrategy,
    RouteStrategy,
)

logger = logging.getLogger(__name__)


def preferred_strategy_name(capabilities: Capabilities, *, allow_mock: bool = True) -> str | None:
    """Name of the strategy ``select_strategy`` would pick, or None when none may run."""
    if capabilities.has_route_provider:
        return ProviderOptimizedStrategy.name
    if capabilities.has_matrix_provider:
        return MatrixBruteForceStrategy.name
    return RandomMockStrategy.name if allow_mock else None


def select_strategy(
    capabilities: Capabilities,
    *,
    route_provider: RouteProvider | None = None,
    geocoder: Geocoder | None = None,
    matrix_provider: MatrixProvider | None = None,
    options: OptimizerOptions | None = None,
) -> RouteStrategy:
    """Pick the highest-priority strategy the capabilities allow.

    Priority is provider, then matrix brute force, then random mock. The
    choice is fixed for the call; a failure of the chosen strategy never
    falls through to a lower one.
    """
    options = options or OptimizerOptions()

    if capabilities.has_route_provider:
        if route_provider is None:
            raise ValueError("Route provider capability is enabled but no route provider was supplied.")
        return ProviderOptimizedStrategy(route_provider)

    if capabilities.has_matrix_provider:
        if geocoder is None or matrix_provider is None:
            raise ValueError(
                "Matrix provider capability is enabled but the geocoder or matrix provider is missing."
            )
        return MatrixBruteForceStrategy(geocoder, matrix_provider, options)

    if not options.allow_mock:
        raise MockStrategyDisabled()
    return RandomMockStrategy(options)


def compute_optimal_route(
    addresses: Sequence[Address],
    starting_point: Address,
    capabilities: Capabilities,
    *,
    route_provider: RouteProvider | None = None,
    geocoder: Geocoder | None = None,
    matrix_provider: MatrixProvider | None = None,
    options: OptimizerOptions | None = None,
) -> RouteResult:
    """Order ``addresses`` for a trip leaving from ``starting_point``.

    Args:
        addresses: Intermediate stops, in caller order.
        starting_point: Fixed origin (and destination) of the trip.
        capabilities: Which external capabilities may be used for this call.
        route_provider: Required when ``capabilities.has_route_provider``.
        geocoder: Required when the matrix strategy is selected.
        matrix_provider: Required when the matrix strategy is selected.
        options: Search and mock settings; defaults come from settings.

    Returns:
        RouteResult with the ordered addresses (the starting point excluded)
        and the provider path artifact when one was produced.

    Raises:
        RoutingError subclasses for collaborator failures, missing matrix
        data, oversized exact searches, or a disabled mock fallback.
    """
    request = RouteRequest(addresses=list(addresses), starting_point=starting_point)
    strategy = select_strategy(
        capabilities,
        route_provider=route_provider,
        geocoder=geocoder,
        matrix_provider=matrix_provider,
        options=options,
    )
    logger.info(f"Ordering {len(request.addresses)} addresses with strategy '{strategy.name}'")

    if not request.addresses:
        outcome = StrategyOutcome(order=[], encoded_path=None, metadata={"strategy": strategy.name})
    else:
        outcome = strategy.compute_order(request)

    return normalize_result(request.addresses, outcome)
