"""Contracts for the external services used by the routing strategies."""

from __future__ import annotations

from typing import Protocol, Sequence

from ...models.domain import Address, Coordinate, DistanceMatrix, ProviderRoute


class Geocoder(Protocol):
    def geocode(self, address: Address) -> Coordinate:
        """Resolve an address; raise GeocodingFailure when it cannot."""
        ...


class MatrixProvider(Protocol):
    def matrix(self, coordinates: Sequence[Coordinate]) -> DistanceMatrix:
        """Return travel costs between every pair of coordinates; raise MatrixFailure on error."""
        ...


class RouteProvider(Protocol):
    def optimize(
        self,
        origin: Address,
        destination: Address,
        intermediates: Sequence[Address],
    ) -> ProviderRoute:
        """Return the provider's visiting order for ``intermediates``; raise ProviderFailure on error."""
        ...
