"""Route ordering engine and its collaborators."""

from .errors import (
    GeocodingFailure,
    MatrixFailure,
    MissingDistanceData,
    MockStrategyDisabled,
    PermutationExplosion,
    ProviderFailure,
    RoutingError,
)
from .selector import compute_optimal_route, select_strategy

__all__ = [
    "compute_optimal_route",
    "select_strategy",
    "RoutingError",
    "MissingDistanceData",
    "GeocodingFailure",
    "MatrixFailure",
    "ProviderFailure",
    "PermutationExplosion",
    "MockStrategyDisabled",
]
