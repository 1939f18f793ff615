import threading

import pytest

from waypoint_optimizer.config import settings
from waypoint_optimizer.models.domain import (
    Capabilities,
    Coordinate,
    ProviderRoute,
    RouteRequest,
    StrategyOutcome,
)
from waypoint_optimizer.services.routing.errors import (
    GeocodingFailure,
    MatrixFailure,
    MockStrategyDisabled,
    PermutationExplosion,
    ProviderFailure,
)
from waypoint_optimizer.services.routing.normalizer import normalize_result
from waypoint_optimizer.services.routing.selector import compute_optimal_route, select_strategy
from waypoint_optimizer.services.routing.strategies import (
    MatrixBruteForceStrategy,
    OptimizerOptions,
    ProviderOptimizedStrategy,
    RandomMockStrategy,
)

START = "1 Pl. du Président Thomas Wilson, 31000 Toulouse"
ADDRESS_A = "6 Rue Ampère, 31670 Labège"
ADDRESS_B = "36 Rte de Bayonne, 31000 Toulouse"


def _options(**overrides) -> OptimizerOptions:
    values = dict(
        close_loop=False,
        max_intermediates=8,
        max_parallel_geocode_requests=4,
        allow_mock=True,
        mock_seed=42,
        mock_latency_seconds=0.0,
    )
    values.update(overrides)
    return OptimizerOptions(**values)


class DummyRouteProvider:
    def __init__(self, order, encoded_path="_p~iF~ps|U_ulLnnqC", error=None):
        self.order = order
        self.encoded_path = encoded_path
        self.error = error
        self.calls = []

    def optimize(self, origin, destination, intermediates):
        self.calls.append((origin, destination, list(intermediates)))
        if self.error:
            raise self.error
        return ProviderRoute(order=self.order, encoded_path=self.encoded_path)


class DummyGeocoder:
    def __init__(self, failing=None, error=None):
        self.failing = failing
        self.error = error
        self.calls = []

    def geocode(self, address):
        self.calls.append(address)
        if address == self.failing:
            raise self.error or GeocodingFailure(address, "no matching location")
        return Coordinate(latitude=43.6 + len(self.calls) / 100, longitude=1.44)


class DummyMatrixProvider:
    def __init__(self, matrix=None, error=None):
        # S -> A = 10, S -> B = 1, A -> B = 5, B -> A = 2
        self.matrix_data = matrix or [
            [0, 10, 1],
            [7, 0, 5],
            [7, 2, 0],
        ]
        self.error = error
        self.calls = []

    def matrix(self, coordinates):
        self.calls.append(list(coordinates))
        if self.error:
            raise self.error
        return self.matrix_data


def test_provider_strategy_is_the_only_one_used_when_both_capabilities_exist():
    provider = DummyRouteProvider(order=[1, 0])
    geocoder = DummyGeocoder()
    matrix_provider = DummyMatrixProvider()

    result = compute_optimal_route(
        [ADDRESS_A, ADDRESS_B],
        START,
        Capabilities(has_route_provider=True, has_matrix_provider=True),
        route_provider=provider,
        geocoder=geocoder,
        matrix_provider=matrix_provider,
        options=_options(),
    )

    assert result.ordered_addresses == [ADDRESS_B, ADDRESS_A]
    assert result.encoded_path == "_p~iF~ps|U_ulLnnqC"
    assert result.metadata["strategy"] == "provider"
    assert provider.calls == [(START, START, [ADDRESS_A, ADDRESS_B])]
    assert geocoder.calls == []
    assert matrix_provider.calls == []


def test_provider_failure_does_not_fall_back_to_matrix():
    provider = DummyRouteProvider(order=[], error=ProviderFailure("quota exceeded"))
    geocoder = DummyGeocoder()

    with pytest.raises(ProviderFailure, match="quota exceeded"):
        compute_optimal_route(
            [ADDRESS_A, ADDRESS_B],
            START,
            Capabilities(has_route_provider=True, has_matrix_provider=True),
            route_provider=provider,
            geocoder=geocoder,
            matrix_provider=DummyMatrixProvider(),
            options=_options(),
        )

    assert geocoder.calls == []


@pytest.mark.parametrize("order", [[0], [0, 0], [0, 2], [1, 0, 2]])
def test_provider_order_must_be_a_permutation(order):
    strategy = ProviderOptimizedStrategy(DummyRouteProvider(order=order))

    with pytest.raises(ProviderFailure):
        strategy.compute_order(RouteRequest(addresses=[ADDRESS_A, ADDRESS_B], starting_point=START))


def test_provider_order_with_non_integer_positions_is_provider_failure():
    provider = DummyRouteProvider(order=[1.0, 0.0])

    with pytest.raises(ProviderFailure):
        compute_optimal_route(
            [ADDRESS_A, ADDRESS_B],
            START,
            Capabilities(has_route_provider=True),
            route_provider=provider,
            options=_options(),
        )


def test_matrix_brute_force_orders_addresses_by_one_way_cost():
    geocoder = DummyGeocoder()
    matrix_provider = DummyMatrixProvider()

    result = compute_optimal_route(
        [ADDRESS_A, ADDRESS_B],
        START,
        Capabilities(has_matrix_provider=True),
        geocoder=geocoder,
        matrix_provider=matrix_provider,
        options=_options(),
    )

    assert result.ordered_addresses == [ADDRESS_B, ADDRESS_A]
    assert result.encoded_path is None
    assert result.metadata["strategy"] == "matrix_brute_force"
    assert result.metadata["total_cost"] == 3
    assert sorted(geocoder.calls) == sorted([START, ADDRESS_A, ADDRESS_B])
    assert len(matrix_provider.calls[0]) == 3


def test_matrix_brute_force_geocodes_concurrently():
    barrier = threading.Barrier(3, timeout=5)

    class BarrierGeocoder(DummyGeocoder):
        def geocode(self, address):
            barrier.wait()
            return super().geocode(address)

    strategy = MatrixBruteForceStrategy(BarrierGeocoder(), DummyMatrixProvider(), _options())
    coordinates = strategy._geocode_all([START, ADDRESS_A, ADDRESS_B])

    assert len(coordinates) == 3
    assert all(isinstance(coordinate, Coordinate) for coordinate in coordinates)


def test_geocoding_failure_aborts_without_matrix_request():
    geocoder = DummyGeocoder(failing=ADDRESS_B)
    matrix_provider = DummyMatrixProvider()

    with pytest.raises(GeocodingFailure) as excinfo:
        compute_optimal_route(
            [ADDRESS_A, ADDRESS_B],
            START,
            Capabilities(has_matrix_provider=True),
            geocoder=geocoder,
            matrix_provider=matrix_provider,
            options=_options(),
        )

    assert excinfo.value.address == ADDRESS_B
    assert matrix_provider.calls == []


def test_geocoding_failure_cancels_pending_lookups():
    release = threading.Event()

    class BlockingGeocoder(DummyGeocoder):
        def geocode(self, address):
            if address != START:
                self.calls.append(address)
                release.wait(timeout=5)
                return Coordinate(latitude=43.6, longitude=1.44)
            return super().geocode(address)

    addresses = [f"{number} Rue Alsace-Lorraine, 31000 Toulouse" for number in range(1, 6)]
    geocoder = BlockingGeocoder(failing=START)
    matrix_provider = DummyMatrixProvider()

    try:
        with pytest.raises(GeocodingFailure) as excinfo:
            compute_optimal_route(
                addresses,
                START,
                Capabilities(has_matrix_provider=True),
                geocoder=geocoder,
                matrix_provider=matrix_provider,
                options=_options(max_parallel_geocode_requests=1),
            )
    finally:
        release.set()

    assert excinfo.value.address == START
    assert geocoder.calls[0] == START
    # the single worker may already hold the next lookup; everything queued after it is cancelled
    assert len(geocoder.calls) <= 2
    assert matrix_provider.calls == []


def test_optimizer_options_follow_current_settings(monkeypatch):
    monkeypatch.setattr(settings, "close_loop", True)
    monkeypatch.setattr(settings, "max_brute_force_waypoints", 3)
    monkeypatch.setattr(settings, "allow_mock_strategy", False)

    options = OptimizerOptions()

    assert options.close_loop is True
    assert options.max_intermediates == 3
    with pytest.raises(MockStrategyDisabled):
        select_strategy(Capabilities())


def test_unexpected_geocoder_error_is_reported_as_geocoding_failure():
    geocoder = DummyGeocoder(failing=ADDRESS_A, error=RuntimeError("socket closed"))

    with pytest.raises(GeocodingFailure, match="socket closed"):
        compute_optimal_route(
            [ADDRESS_A, ADDRESS_B],
            START,
            Capabilities(has_matrix_provider=True),
            geocoder=geocoder,
            matrix_provider=DummyMatrixProvider(),
            options=_options(),
        )


def test_matrix_failure_propagates_unchanged():
    error = MatrixFailure("Distance matrix request failed: HTTP 503")

    with pytest.raises(MatrixFailure) as excinfo:
        compute_optimal_route(
            [ADDRESS_A, ADDRESS_B],
            START,
            Capabilities(has_matrix_provider=True),
            geocoder=DummyGeocoder(),
            matrix_provider=DummyMatrixProvider(error=error),
            options=_options(),
        )

    assert excinfo.value is error


def test_permutation_bound_is_checked_before_any_lookup():
    geocoder = DummyGeocoder()

    with pytest.raises(PermutationExplosion):
        compute_optimal_route(
            [ADDRESS_A, ADDRESS_B],
            START,
            Capabilities(has_matrix_provider=True),
            geocoder=geocoder,
            matrix_provider=DummyMatrixProvider(),
            options=_options(max_intermediates=1),
        )

    assert geocoder.calls == []


def test_mock_strategy_returns_every_address_once():
    addresses = [f"{number} Rue de Metz, 31000 Toulouse" for number in range(1, 7)]

    result = compute_optimal_route(addresses, START, Capabilities(), options=_options())

    assert sorted(result.ordered_addresses) == sorted(addresses)
    assert result.encoded_path is None
    assert result.metadata["strategy"] == "random_mock"


def test_mock_strategy_is_reproducible_with_seed():
    addresses = [f"{number} Allée Jean Jaurès, 31000 Toulouse" for number in range(1, 9)]

    first = compute_optimal_route(addresses, START, Capabilities(), options=_options(mock_seed=3))
    second = compute_optimal_route(addresses, START, Capabilities(), options=_options(mock_seed=3))

    assert first.ordered_addresses == second.ordered_addresses


def test_mock_strategy_can_be_disallowed():
    with pytest.raises(MockStrategyDisabled):
        compute_optimal_route([ADDRESS_A], START, Capabilities(), options=_options(allow_mock=False))

    with pytest.raises(MockStrategyDisabled):
        RandomMockStrategy(_options(allow_mock=False)).compute_order(
            RouteRequest(addresses=[ADDRESS_A], starting_point=START)
        )


def test_select_strategy_priority():
    provider = DummyRouteProvider(order=[])
    geocoder = DummyGeocoder()
    matrix_provider = DummyMatrixProvider()
    collaborators = dict(route_provider=provider, geocoder=geocoder, matrix_provider=matrix_provider)

    assert isinstance(
        select_strategy(Capabilities(True, True), **collaborators), ProviderOptimizedStrategy
    )
    assert isinstance(
        select_strategy(Capabilities(False, True), **collaborators), MatrixBruteForceStrategy
    )
    assert isinstance(
        select_strategy(Capabilities(False, False), **collaborators, options=_options()), RandomMockStrategy
    )


def test_select_strategy_requires_collaborators_for_declared_capability():
    with pytest.raises(ValueError):
        select_strategy(Capabilities(has_route_provider=True))
    with pytest.raises(ValueError):
        select_strategy(Capabilities(has_matrix_provider=True), geocoder=DummyGeocoder())


def test_empty_address_list_skips_collaborators():
    provider = DummyRouteProvider(order=[0])

    result = compute_optimal_route(
        [], START, Capabilities(has_route_provider=True), route_provider=provider, options=_options()
    )

    assert result.ordered_addresses == []
    assert result.encoded_path is None
    assert provider.calls == []


def test_normalize_result_maps_positions_one_to_one():
    addresses = ["a", "b", "c"]

    result = normalize_result(addresses, StrategyOutcome(order=[2, 0, 1], encoded_path="xyz"))

    assert result.ordered_addresses == ["c", "a", "b"]
    assert result.encoded_path == "xyz"


def test_normalize_result_rejects_incomplete_order():
    with pytest.raises(ValueError):
        normalize_result(["a", "b", "c"], StrategyOutcome(order=[0, 0, 1]))
