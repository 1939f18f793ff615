"""Interchangeable strategies that decide a visiting order."""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Address, Coordinate, RouteRequest, StrategyOutcome
from .collaborators import Geocoder, MatrixProvider, RouteProvider
from .errors import GeocodingFailure, MockStrategyDisabled, ProviderFailure
from .normalizer import is_permutation_of_range
from .optimizer import ensure_tractable, find_best_route

logger = logging.getLogger(__name__)

START_INDEX = 0


@dataclass(slots=True)
class OptimizerOptions:
    """Search and mock options; unset fields read the current settings."""

    close_loop: bool = field(default_factory=lambda: settings.close_loop)
    max_intermediates: Optional[int] = field(default_factory=lambda: settings.max_brute_force_waypoints)
    max_parallel_geocode_requests: int = field(default_factory=lambda: settings.max_parallel_geocode_requests)
    allow_mock: bool = field(default_factory=lambda: settings.allow_mock_strategy)
    mock_seed: Optional[int] = field(default_factory=lambda: settings.mock_seed)
    mock_latency_seconds: float = field(default_factory=lambda: settings.mock_latency_seconds)


class RouteStrategy(ABC):
    """Contract for route ordering strategies."""

    name: str

    @abstractmethod
    def compute_order(self, request: RouteRequest) -> StrategyOutcome:
        raise NotImplementedError


class ProviderOptimizedStrategy(RouteStrategy):
    """Delegate the whole ordering decision to an external route provider."""

    name = "provider"

    def __init__(self, route_provider: RouteProvider) -> None:
        self.route_provider = route_provider

    def compute_order(self, request: RouteRequest) -> StrategyOutcome:
        provider_route = self.route_provider.optimize(
            request.starting_point,
            request.starting_point,
            request.addresses,
        )
        order = list(provider_route.order)
        if not is_permutation_of_range(order, len(request.addresses)):
            raise ProviderFailure(
                f"Route provider returned order {order}, expected a permutation of "
                f"0..{len(request.addresses) - 1}."
            )
        return StrategyOutcome(
            order=order,
            encoded_path=provider_route.encoded_path,
            metadata={"strategy": self.name},
        )


class MatrixBruteForceStrategy(RouteStrategy):
    """Geocode every stop, fetch a distance matrix, and search all orderings."""

    name = "matrix_brute_force"

    def __init__(
        self,
        geocoder: Geocoder,
        matrix_provider: MatrixProvider,
        options: OptimizerOptions | None = None,
    ) -> None:
        self.geocoder = geocoder
        self.matrix_provider = matrix_provider
        self.options = options or OptimizerOptions()

    def _geocode_all(self, addresses: Sequence[Address]) -> list[Coordinate]:
        """Geocode concurrently; the first failure cancels pending lookups."""
        coordinates: list[Coordinate | None] = [None] * len(addresses)
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self.options.max_parallel_geocode_requests, len(addresses)))
        )
        try:
            future_to_position = {
                executor.submit(self.geocoder.geocode, address): position
                for position, address in enumerate(addresses)
            }
            for future in as_completed(future_to_position):
                position = future_to_position[future]
                try:
                    coordinates[position] = future.result()
                except GeocodingFailure:
                    raise
                except Exception as exc:
                    raise GeocodingFailure(addresses[position], str(exc)) from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return coordinates

    def compute_order(self, request: RouteRequest) -> StrategyOutcome:
        ensure_tractable(len(request.addresses), self.options.max_intermediates)

        trip = [request.starting_point, *request.addresses]
        logger.info(f"Step 1: geocoding {len(trip)} addresses")
        coordinates = self._geocode_all(trip)

        logger.info("Step 2: requesting distance matrix")
        matrix = self.matrix_provider.matrix(coordinates)

        logger.info(f"Step 3: searching all orderings of {len(request.addresses)} waypoints")
        best = find_best_route(
            matrix,
            START_INDEX,
            list(range(1, len(trip))),
            close_loop=self.options.close_loop,
            max_intermediates=self.options.max_intermediates,
        )
        return StrategyOutcome(
            order=[index - 1 for index in best.permutation],
            encoded_path=None,
            metadata={
                "strategy": self.name,
                "total_cost": best.total_cost,
                "close_loop": self.options.close_loop,
            },
        )


class RandomMockStrategy(RouteStrategy):
    """Shuffle the addresses. The result is not optimized."""

    name = "random_mock"

    def __init__(self, options: OptimizerOptions | None = None) -> None:
        self.options = options or OptimizerOptions()

    def compute_order(self, request: RouteRequest) -> StrategyOutcome:
        if not self.options.allow_mock:
            raise MockStrategyDisabled()

        logger.warning(
            "No route provider or distance matrix provider configured, using random mock ordering"
        )
        order = list(range(len(request.addresses)))
        random.Random(self.options.mock_seed).shuffle(order)
        if self.options.mock_latency_seconds:
            time.sleep(self.options.mock_latency_seconds)
        return StrategyOutcome(order=order, encoded_path=None, metadata={"strategy": self.name})
