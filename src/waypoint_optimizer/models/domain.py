"""Domain models for waypoint ordering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

Address = str
DistanceMatrix = Sequence[Sequence[Optional[float]]]


@dataclass(slots=True, frozen=True)
class Coordinate:
    """A geocoded location."""

    latitude: float
    longitude: float

    def as_lon_lat(self) -> list[float]:
        return [self.longitude, self.latitude]


@dataclass(slots=True, frozen=True)
class Capabilities:
    """Which external routing capabilities are available for a call."""

    has_route_provider: bool = False
    has_matrix_provider: bool = False

    @classmethod
    def from_settings(cls, settings) -> "Capabilities":
        return cls(
            has_route_provider=bool(settings.google_maps_api_key),
            has_matrix_provider=bool(settings.openroute_service_api_key),
        )


@dataclass(slots=True)
class CandidateRoute:
    """A visiting order of intermediate waypoint indices with its total cost."""

    permutation: list[int]
    total_cost: float


@dataclass(slots=True)
class ProviderRoute:
    """Ordering returned by an external route provider."""

    order: list[int]
    encoded_path: Optional[str] = None


@dataclass(slots=True)
class RouteRequest:
    addresses: list[Address]
    starting_point: Address


@dataclass(slots=True)
class StrategyOutcome:
    """Zero-based ordering of the request addresses produced by a strategy."""

    order: list[int]
    encoded_path: Optional[str] = None
    metadata: dict = field(default_factory=dict)


@dataclass(slots=True)
class RouteResult:
    ordered_addresses: list[Address]
    encoded_path: Optional[str]
    metadata: dict
