"""OpenRouteService client for geocoding and distance matrices."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import Address, Coordinate
from .errors import GeocodingFailure, MatrixFailure
from .http import RetryingHTTPClient, describe_http_error

logger = logging.getLogger(__name__)


class OpenRouteServiceClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        profile: str | None = None,
        country: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.openroute_service_api_key
        if not self.api_key:
            raise ValueError("OpenRouteService API key is not configured.")
        self.profile = profile or settings.ors_profile
        self.country = country or settings.geocode_country
        self.language = language or settings.language_code
        self.http = RetryingHTTPClient(
            base_url=(base_url or settings.ors_base_url).rstrip("/"),
            timeout=timeout,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
            transport=transport,
        )

    def geocode(self, address: Address) -> Coordinate:
        """Resolve ``address`` to the coordinate of the best matching feature."""
        try:
            data = self.http.request_json(
                "GET",
                "/geocode/search",
                params={
                    "api_key": self.api_key,
                    "text": address,
                    "boundary.country": self.country,
                },
                headers={"Accept-Language": self.language},
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise GeocodingFailure(address, describe_http_error(exc)) from exc

        features = data.get("features") if isinstance(data, dict) else None
        if not features:
            raise GeocodingFailure(address, "no matching location")
        try:
            longitude, latitude = features[0]["geometry"]["coordinates"][:2]
            coordinate = Coordinate(latitude=float(latitude), longitude=float(longitude))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise GeocodingFailure(address, "malformed geocoding response") from exc

        logger.debug(f"Geocoded '{address}' to ({coordinate.latitude}, {coordinate.longitude})")
        return coordinate

    def matrix(self, coordinates: Sequence[Coordinate]) -> list[list[float | None]]:
        """Get the driving distance matrix (meters) between all coordinates.

        Unreachable pairs are reported by OpenRouteService as null and kept as None.
        """
        if len(coordinates) < 2:
            raise MatrixFailure("At least two coordinates are required for a distance matrix.")

        try:
            data = self.http.request_json(
                "POST",
                f"/v2/matrix/{self.profile}",
                json={
                    "metrics": ["distance"],
                    "locations": [coordinate.as_lon_lat() for coordinate in coordinates],
                },
                headers={"Authorization": self.api_key},
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise MatrixFailure(f"Distance matrix request failed: {describe_http_error(exc)}") from exc

        distances = data.get("distances") if isinstance(data, dict) else None
        size = len(coordinates)
        if not isinstance(distances, list) or len(distances) != size:
            raise MatrixFailure("Distance matrix response is missing distances.")
        if any(not isinstance(row, list) or len(row) != size for row in distances):
            raise MatrixFailure(f"Distance matrix response is not {size}x{size}.")

        try:
            return [[float(value) if value is not None else None for value in row] for row in distances]
        except (TypeError, ValueError) as exc:
            raise MatrixFailure("Distance matrix response contains non-numeric values.") from exc
