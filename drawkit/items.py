"""Value objects describing the entries of a draw pool."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Optional, Union


class TimeInterval(str, Enum):
    """Recency categories understood by the ``timeBased`` draw."""

    MINUTE = "minute"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def seconds(self) -> int:
        return _INTERVAL_SECONDS[self]


_INTERVAL_SECONDS = {
    TimeInterval.MINUTE: 60,
    TimeInterval.HOURLY: 60 * 60,
    TimeInterval.DAILY: 24 * 60 * 60,
    TimeInterval.WEEKLY: 7 * 24 * 60 * 60,
    # A month is approximated as 30 days.
    TimeInterval.MONTHLY: 30 * 24 * 60 * 60,
}


def interval_seconds(time: Optional[str]) -> int:
    """Return the threshold for ``time``; unknown or absent values mean daily."""
    try:
        return TimeInterval(time).seconds
    except ValueError:
        return TimeInterval.DAILY.seconds


@dataclass(frozen=True)
class Item:
    """A single candidate in a :class:`~drawkit.flexible.DrawPool`.

    Attributes
    ----------
    name : Optional[str]
        Identifier returned when the item wins.
    weight : Optional[float]
        Relative selection likelihood; need not be an integer.
    min, max : Optional[float]
        Bounds of the continuous range used by ``rangeWeighted`` draws.
    time : Optional[str]
        One of the :class:`TimeInterval` values, used by ``timeBased`` draws.

    Every attribute is optional so that incomplete input can be reported
    field by field by :func:`drawkit.validation.check_items`.
    """

    name: Optional[str] = None
    weight: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    time: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Item":
        """Build an item from a mapping, ignoring keys that are not fields."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def missing(self, required: tuple[str, ...]) -> list[str]:
        """Return the names in ``required`` whose value is ``None``."""
        return [name for name in required if getattr(self, name) is None]

    @property
    def has_range(self) -> bool:
        return None not in (self.min, self.max, self.weight)


ItemLike = Union[Item, Mapping[str, Any]]


def to_item(value: ItemLike) -> Item:
    if isinstance(value, Item):
        return value
    return Item.from_mapping(value)


__all__ = ["Item", "ItemLike", "TimeInterval", "interval_seconds", "to_item"]
