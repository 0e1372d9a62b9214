"""Draw pool offering interchangeable selection strategies over one item list."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from .errors import (
    EmptyPoolError,
    InvalidCountError,
    NoRangesError,
    UnknownStrategyError,
)
from .items import Item, ItemLike, interval_seconds, to_item
from .random_source import RandomSource, make_random_source
from .validation import check_items
from .weighted import weighted_pick

logger = logging.getLogger(__name__)

CUMULATIVE_INCREMENT = (1, 100)
"""Closed range of the random score added to every non-winner per cumulative round."""


class Strategy(str, Enum):
    """Names accepted by :meth:`DrawPool.draw`."""

    PROBABILITY = "probability"
    ELIMINATION = "elimination"
    WEIGHTED_ELIMINATION = "weightedElimination"
    ROUND_ROBIN = "roundRobin"
    SEQUENTIAL = "sequential"
    CUMULATIVE = "cumulative"
    BATCHED = "batched"
    TIME_BASED = "timeBased"
    WEIGHTED_BATCH = "weightedBatch"
    RANGE_WEIGHTED = "rangeWeighted"


DrawResult = Union[str, list[str], float]


class DrawPool:
    """A pool of items plus the session state its strategies accumulate.

    The pool owns every piece of mutable state (remaining items, the cyclic
    cursor, cumulative scores and last-pick timestamps) so independent pools
    never interfere with one another.
    """

    def __init__(
        self,
        items: Iterable[ItemLike],
        check: bool = True,
        *,
        rng: Optional[RandomSource] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Create a pool.

        Parameters
        ----------
        items : Iterable[Item | Mapping[str, Any]]
            Candidates, either :class:`Item` objects or mappings with the
            same keys.
        check : bool, default: True
            Validate the pool for the requested strategy before every draw.
        rng : Optional[RandomSource], default: None
            Random source; one is built from the environment when omitted.
        clock : Callable[[], float], default: time.time
            Returns the current time in seconds, used by ``timeBased`` draws.
        """
        self.items: list[Item] = [to_item(item) for item in items]
        self.ranges: list[Item] = [item for item in self.items if item.has_range]
        self._check = check
        self._rng = rng or make_random_source()
        self._clock = clock
        self._cursor = 0
        self.cumulative_scores: dict[str, int] = {}
        self.last_picked_timestamps: dict[str, float] = {}
        self.last_picked_name: str = ""

        self._strategies: dict[Strategy, Callable[[int, bool], DrawResult]] = {
            Strategy.PROBABILITY: lambda count, replace: self._probability_draw(),
            Strategy.ELIMINATION: lambda count, replace: self._elimination_draw(),
            Strategy.WEIGHTED_ELIMINATION: lambda count, replace: self._weighted_elimination_draw(),
            Strategy.ROUND_ROBIN: lambda count, replace: self._cyclic_draw(),
            Strategy.SEQUENTIAL: lambda count, replace: self._cyclic_draw(),
            Strategy.CUMULATIVE: lambda count, replace: self._cumulative_draw(),
            Strategy.BATCHED: self._batched_draw,
            Strategy.TIME_BASED: lambda count, replace: self._time_based_draw(),
            Strategy.WEIGHTED_BATCH: lambda count, replace: self._weighted_batch_draw(count),
            Strategy.RANGE_WEIGHTED: lambda count, replace: self._range_weighted_draw(),
        }

    @property
    def cursor(self) -> int:
        """Index of the item the next cyclic draw returns."""
        return self._cursor % len(self.items) if self.items else 0

    def check(self, strategy: Union[Strategy, str] = "") -> None:
        """Validate the current pool for ``strategy``.

        An empty or unknown strategy only requires every item to have a name.

        Raises
        ------
        EmptyPoolError
            If the pool has no items left.
        MissingFieldError
            If an item lacks a field the strategy needs.
        InvalidRangeError
            For ``rangeWeighted`` items whose ``min`` is not below ``max``.
        """
        check_items(strategy, self.items)

    def draw(
        self,
        strategy: Union[Strategy, str],
        count: int = 1,
        with_replacement: bool = False,
    ) -> DrawResult:
        """Run one draw with ``strategy``.

        Parameters
        ----------
        strategy : Strategy | str
            One of the :class:`Strategy` names.
        count : int, default: 1
            Number of picks for ``batched`` and ``weightedBatch`` draws.
        with_replacement : bool, default: False
            For ``batched`` draws, leave the pool intact between picks.

        Returns
        -------
        str | list[str] | float
            A name for single draws, a list of names for batch draws, and a
            number for ``rangeWeighted`` draws.

        Raises
        ------
        UnknownStrategyError
            If ``strategy`` is not a supported name.
        EmptyPoolError
            If the pool has no items left.
        """
        try:
            resolved = Strategy(strategy)
        except ValueError as exc:
            raise UnknownStrategyError(f"Unknown draw type: {strategy}") from exc

        if self._check:
            self.check(resolved)
        elif not self.items:
            raise EmptyPoolError("Items array must contain at least one item.")

        result = self._strategies[resolved](count, with_replacement)
        logger.debug("%s draw picked %r", resolved.value, result)
        return result

    # -------- strategies --------
    def _weights(self, items: Iterable[Item]) -> list[tuple[int, float]]:
        # Keyed by position so duplicate names still map to a single entry.
        return [(index, item.weight) for index, item in enumerate(items)]

    def _probability_draw(self) -> str:
        index = weighted_pick(self._weights(self.items), self._rng)
        return self.items[index].name

    def _elimination_draw(self) -> str:
        index = self._rng.randbelow(len(self.items))
        return self.items.pop(index).name

    def _weighted_elimination_draw(self) -> str:
        index = weighted_pick(self._weights(self.items), self._rng)
        return self.items.pop(index).name

    def _cyclic_draw(self) -> str:
        # roundRobin and sequential share one cursor.
        size = len(self.items)
        self._cursor %= size
        picked = self.items[self._cursor].name
        self._cursor = (self._cursor + 1) % size
        return picked

    def _cumulative_draw(self) -> str:
        low, high = CUMULATIVE_INCREMENT
        names = list(dict.fromkeys(item.name for item in self.items))
        for name in names:
            self.cumulative_scores.setdefault(name, 0)
            if name != self.last_picked_name:
                self.cumulative_scores[name] += self._rng.randint(low, high)

        picked = names[0]
        for name in names[1:]:
            if self.cumulative_scores[name] > self.cumulative_scores[picked]:
                picked = name

        self.cumulative_scores[picked] = 0
        self.last_picked_name = picked
        return picked

    def _batched_draw(self, count: int, with_replacement: bool) -> list[str]:
        if count <= 0:
            raise InvalidCountError("Count must be a positive integer.")

        picked: list[str] = []
        while len(picked) < count and self.items:
            if with_replacement:
                picked.append(self._rng.choice(self.items).name)
            else:
                picked.append(self._elimination_draw())
        return picked

    def _time_based_draw(self) -> str:
        now = self._clock()

        def is_due(item: Item) -> bool:
            last = self.last_picked_timestamps.get(item.name, 0)
            return now - last >= interval_seconds(item.time)

        # Due items first, then heavier items; the pool itself keeps its order.
        ordered = sorted(self.items, key=lambda item: (not is_due(item), -(item.weight or 0)))
        index = weighted_pick(self._weights(ordered), self._rng)
        picked = ordered[index].name
        self.last_picked_timestamps[picked] = now
        return picked

    def _weighted_batch_draw(self, count: int) -> list[str]:
        if count <= 0:
            raise InvalidCountError("Count must be a positive integer.")
        return [self._probability_draw() for _ in range(count)]

    def _range_weighted_draw(self) -> float:
        if not self.ranges:
            raise NoRangesError("No ranges defined for range-weighted draw.")

        index = weighted_pick(self._weights(self.ranges), self._rng)
        selected = self.ranges[index]
        return selected.min + self._rng.random() * (selected.max - selected.min)


__all__ = ["CUMULATIVE_INCREMENT", "DrawPool", "DrawResult", "Strategy"]
