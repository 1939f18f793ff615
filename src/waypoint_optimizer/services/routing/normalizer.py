"""Map strategy orderings back to caller addresses."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import Address, RouteResult, StrategyOutcome


def is_permutation_of_range(order: Sequence[int], size: int) -> bool:
    if any(type(position) is not int for position in order):
        return False
    return len(order) == size and sorted(order) == list(range(size))


def normalize_result(addresses: Sequence[Address], outcome: StrategyOutcome) -> RouteResult:
    if not is_permutation_of_range(outcome.order, len(addresses)):
        raise ValueError(
            f"Order {list(outcome.order)} is not a permutation of {len(addresses)} address positions."
        )
    return RouteResult(
        ordered_addresses=[addresses[position] for position in outcome.order],
        encoded_path=outcome.encoded_path or None,
        metadata=dict(outcome.metadata),
    )
