"""Exhaustive permutation generation for small waypoint sets."""

from __future__ import annotations

from itertools import permutations
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")


def iter_permutations(items: Sequence[T]) -> Iterator[list[T]]:
    """Yield every ordering of ``items``.

    The first element varies slowest, so the sequence is reproducible and is
    used as the tie-break order by the optimizer. Equal values are treated as
    distinct by position. An empty input yields a single empty ordering.
    O(n!) orderings; callers bound ``len(items)``.
    """
    for ordering in permutations(items):
        yield list(ordering)


def generate_permutations(items: Sequence[T]) -> list[list[T]]:
    return list(iter_permutations(items))
