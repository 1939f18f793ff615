"""Google Routes API client used as the external route provider."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import Address, ProviderRoute
from .errors import ProviderFailure
from .http import RetryingHTTPClient, describe_http_error

logger = logging.getLogger(__name__)

FIELD_MASK = "routes.optimizedIntermediateWaypointIndex,routes.polyline"
# departureTime is rejected when it is already in the past on arrival
DEPARTURE_LEAD = timedelta(minutes=1)


class GoogleRoutesClient:
    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        region_code: str | None = None,
        language_code: str | None = None,
        avoid_tolls: bool | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.url = url or settings.google_routes_url
        self.region_code = region_code or settings.region_code
        self.language_code = language_code or settings.language_code
        self.avoid_tolls = settings.avoid_tolls if avoid_tolls is None else avoid_tolls
        self.http = RetryingHTTPClient(
            timeout=timeout,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
            transport=transport,
        )

    def _build_body(self, origin: Address, destination: Address, intermediates: Sequence[Address]) -> dict:
        departure = datetime.now(timezone.utc) + DEPARTURE_LEAD
        return {
            "origin": {"address": origin},
            "destination": {"address": destination},
            "intermediates": [{"address": address} for address in intermediates],
            "regionCode": self.region_code,
            "travelMode": "DRIVE",
            "routingPreference": "TRAFFIC_AWARE",
            "departureTime": departure.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "computeAlternativeRoutes": False,
            "routeModifiers": {
                "avoidTolls": self.avoid_tolls,
                "avoidHighways": False,
                "avoidFerries": False,
            },
            "optimizeWaypointOrder": True,
            "languageCode": self.language_code,
            "units": "METRIC",
        }

    def optimize(
        self,
        origin: Address,
        destination: Address,
        intermediates: Sequence[Address],
    ) -> ProviderRoute:
        """Ask Google to order ``intermediates`` between ``origin`` and ``destination``.

        Returns:
            ProviderRoute with zero-based positions into ``intermediates`` and the
            encoded polyline of the whole trip.
        """
        try:
            data = self.http.request_json(
                "POST",
                self.url,
                json=self._build_body(origin, destination, intermediates),
                headers={
                    "X-Goog-Api-Key": self.api_key,
                    "X-Goog-FieldMask": FIELD_MASK,
                },
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderFailure(f"Google Routes request failed: {describe_http_error(exc)}") from exc

        if not isinstance(data, dict):
            raise ProviderFailure("Google Routes returned an unexpected payload.")
        if data.get("error"):
            logger.error(f"Error while retrieving Google route: {data['error']}")
            raise ProviderFailure(f"Google Routes returned an error: {data['error']}")

        routes = data.get("routes") or []
        if not routes:
            raise ProviderFailure("Google Routes returned no route.")
        route = routes[0]

        order = route.get("optimizedIntermediateWaypointIndex")
        if order is None:
            # Google omits the field when there is nothing to reorder
            if len(intermediates) > 1:
                raise ProviderFailure("Google Routes response has no optimized waypoint order.")
            order = list(range(len(intermediates)))

        try:
            order = [int(index) for index in order]
        except (TypeError, ValueError) as exc:
            raise ProviderFailure(f"Google Routes returned a malformed waypoint order: {order!r}") from exc

        encoded_path = (route.get("polyline") or {}).get("encodedPolyline")
        return ProviderRoute(order=order, encoded_path=encoded_path)
