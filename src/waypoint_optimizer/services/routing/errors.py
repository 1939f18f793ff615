"""Error kinds raised while computing a route."""

from __future__ import annotations


class RoutingError(Exception):
    """Base class for every failure surfaced by route computation."""


class MissingDistanceData(RoutingError):
    def __init__(self, from_index: int, to_index: int) -> None:
        self.from_index = from_index
        self.to_index = to_index
        super().__init__(f"Distance matrix has no value for leg {from_index} -> {to_index}.")


class GeocodingFailure(RoutingError):
    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        super().__init__(f"Failed to geocode '{address}': {reason}")


class MatrixFailure(RoutingError):
    pass


class ProviderFailure(RoutingError):
    pass


class PermutationExplosion(RoutingError):
    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(
            f"{count} waypoints exceed the exact search limit of {limit}. "
            f"Reduce the waypoint count or configure a route provider."
        )


class MockStrategyDisabled(RoutingError):
    def __init__(self) -> None:
        super().__init__(
            "No route provider or distance matrix provider is configured and the mock "
            "strategy is disabled."
        )
