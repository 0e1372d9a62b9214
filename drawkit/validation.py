"""Structural checks run before a draw touches its pool."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from .errors import EmptyPoolError, InvalidRangeError, MissingFieldError
from .items import Item

NAME_ONLY = ("name",)

REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "probability": ("name", "weight"),
    "weightedElimination": ("name", "weight"),
    "weightedBatch": ("name", "weight"),
    "timeBased": ("name", "weight", "time"),
    "rangeWeighted": ("name", "min", "max", "weight"),
}
"""Fields each strategy needs; strategies not listed only need ``name``."""

CHANCE_ENTRY_FIELDS = ("item", "chances", "amounts")


def _strategy_name(strategy: Any) -> str:
    # Accept both enum members and their plain string values.
    return getattr(strategy, "value", strategy)


def required_fields(strategy: str) -> tuple[str, ...]:
    return REQUIRED_FIELDS.get(_strategy_name(strategy), NAME_ONLY)


def check_items(strategy: str, items: Sequence[Item]) -> None:
    """Validate ``items`` for ``strategy``.

    Raises
    ------
    EmptyPoolError
        If ``items`` is empty.
    MissingFieldError
        If an item lacks a field the strategy requires.
    InvalidRangeError
        For ``rangeWeighted`` items whose ``min`` is not below ``max``.
    """
    if not items:
        raise EmptyPoolError("Items array must contain at least one item.")

    strategy = _strategy_name(strategy)
    required = required_fields(strategy)
    for index, item in enumerate(items):
        missing = item.missing(required)
        if missing:
            raise MissingFieldError(index, missing, strategy)
        if strategy == "rangeWeighted" and item.min >= item.max:
            raise InvalidRangeError(
                f"Item at index {index}: for rangeWeighted draw, 'min' should be less than 'max'."
            )


def check_chance_entries(entries: Sequence[Mapping[str, Any]]) -> None:
    """Validate the entries handed to :class:`~drawkit.lucky.ChanceAllocator`."""
    if not entries:
        raise EmptyPoolError("Items array must contain at least one item.")

    for index, entry in enumerate(entries):
        missing = [key for key in CHANCE_ENTRY_FIELDS if entry.get(key) is None]
        if missing:
            raise MissingFieldError(index, missing)


__all__ = [
    "CHANCE_ENTRY_FIELDS",
    "REQUIRED_FIELDS",
    "check_chance_entries",
    "check_items",
    "required_fields",
]
