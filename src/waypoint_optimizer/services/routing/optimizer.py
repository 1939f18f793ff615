"""Brute-force route optimizer over a distance matrix."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import CandidateRoute, DistanceMatrix
from .errors import MatrixFailure, MissingDistanceData, PermutationExplosion
from .permutations import iter_permutations

logger = logging.getLogger(__name__)


def _cell(matrix: DistanceMatrix, from_index: int, to_index: int) -> float:
    try:
        value = matrix[from_index][to_index]
    except (IndexError, TypeError):
        # short or absent row
        raise MissingDistanceData(from_index, to_index) from None
    if value is None:
        raise MissingDistanceData(from_index, to_index)
    if value < 0:
        raise MatrixFailure(f"Distance matrix has negative value {value} for leg {from_index} -> {to_index}.")
    return float(value)


def ensure_tractable(count: int, limit: int | None) -> None:
    """Raise PermutationExplosion when ``count`` waypoints are too many to search exhaustively."""
    if limit is not None and count > limit:
        raise PermutationExplosion(count, limit)


def route_cost(
    matrix: DistanceMatrix,
    start: int,
    permutation: Sequence[int],
    *,
    close_loop: bool = False,
) -> float:
    """Sum the legs start -> P[0] -> ... -> P[n-1].

    The leg from the last waypoint back to ``start`` only counts when
    ``close_loop`` is set.
    """
    if not permutation:
        return 0.0

    total = _cell(matrix, start, permutation[0])
    for previous, current in zip(permutation, permutation[1:]):
        total += _cell(matrix, previous, current)
    if close_loop:
        total += _cell(matrix, permutation[-1], start)
    return total


def validate_matrix(
    matrix: DistanceMatrix,
    start: int,
    intermediates: Sequence[int],
    *,
    close_loop: bool = False,
) -> None:
    """Check every leg the search can traverse is present."""
    for index in intermediates:
        _cell(matrix, start, index)
        if close_loop:
            _cell(matrix, index, start)
        for other in intermediates:
            if other != index:
                _cell(matrix, index, other)


def find_best_route(
    matrix: DistanceMatrix,
    start: int,
    intermediates: Sequence[int],
    *,
    close_loop: bool = False,
    max_intermediates: int | None = None,
) -> CandidateRoute:
    """Evaluate every ordering of ``intermediates`` and return the cheapest.

    Exact ties keep the ordering generated first.
    """
    ensure_tractable(len(intermediates), max_intermediates)
    validate_matrix(matrix, start, intermediates, close_loop=close_loop)

    best: CandidateRoute | None = None
    evaluated = 0
    for permutation in iter_permutations(intermediates):
        evaluated += 1
        cost = route_cost(matrix, start, permutation, close_loop=close_loop)
        if best is None or cost < best.total_cost:
            best = CandidateRoute(permutation=permutation, total_cost=cost)

    logger.debug(
        f"Evaluated {evaluated} permutations of {len(intermediates)} waypoints; "
        f"best cost {best.total_cost} for order {best.permutation}"
    )
    return best
