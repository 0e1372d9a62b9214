"""Weighted selection primitive shared by every weight-driven draw."""

from __future__ import annotations

import math
from numbers import Real
from typing import Hashable, Iterable, Mapping, TypeVar, Union

from .errors import InvalidWeightError
from .random_source import RandomSource

K = TypeVar("K", bound=Hashable)

WeightedEntries = Union[Mapping[K, Real], Iterable[tuple[K, Real]]]


def _as_pairs(entries: WeightedEntries) -> list[tuple[K, Real]]:
    if isinstance(entries, Mapping):
        return list(entries.items())
    return list(entries)


def _check_weight(key: Hashable, weight: Real) -> None:
    try:
        finite = math.isfinite(float(weight))
    except (TypeError, ValueError) as exc:
        raise InvalidWeightError(f"Weight for {key!r} must be a number") from exc
    if not finite or weight < 0:
        raise InvalidWeightError(
            f"Weight for {key!r} must be a finite, non-negative number"
        )


def max_weight_key(entries: WeightedEntries) -> K:
    """Return the first key holding the largest weight."""
    pairs = _as_pairs(entries)
    if not pairs:
        raise InvalidWeightError("Cannot select from an empty set of weights")
    best_key, best_weight = pairs[0]
    for key, weight in pairs[1:]:
        if weight > best_weight:
            best_key, best_weight = key, weight
    return best_key


def weighted_pick(entries: WeightedEntries, rng: RandomSource) -> K:
    """Draw one key with probability proportional to its weight.

    The draw walks the cumulative distribution in the order the entries are
    given: a ticket ``r`` is drawn in ``[1, total]`` and each weight is
    subtracted until ``r`` drops to zero or below. Integral weights use an
    integer ticket; when any weight is fractional the ticket is drawn
    uniformly from ``(0, total]`` instead.

    Parameters
    ----------
    entries : Mapping[K, Real] | Iterable[tuple[K, Real]]
        Keys with their non-negative weights. Order fixes the tie-break.
    rng : RandomSource
        Source of the ticket.

    Returns
    -------
    K
        The selected key. If floating point rounding lets the walk run off
        the end, the first key holding the largest weight is returned.

    Raises
    ------
    InvalidWeightError
        If a weight is negative or not finite, or the total is not positive.
    """
    pairs = _as_pairs(entries)
    for key, weight in pairs:
        _check_weight(key, weight)

    total = sum(weight for _, weight in pairs)
    if total <= 0:
        raise InvalidWeightError("Total weight must be greater than zero.")

    if all(weight == int(weight) for _, weight in pairs):
        scan = [(key, int(weight)) for key, weight in pairs]
        ticket: Real = rng.randint(1, int(total))
    else:
        scan = [(key, float(weight)) for key, weight in pairs]
        ticket = float(total) * (1.0 - rng.random())

    for key, weight in scan:
        ticket -= weight
        if ticket <= 0:
            return key

    return max_weight_key(pairs)


__all__ = ["max_weight_key", "weighted_pick"]
