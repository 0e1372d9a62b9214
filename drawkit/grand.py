"""Unique winner sampling over large external record sources."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from . import config
from .errors import SourceUnavailableError
from .random_source import RandomSource, make_random_source
from .sources import FileRecordSource, RecordSource

logger = logging.getLogger(__name__)


@dataclass
class SelectionRegistry:
    """Indices and identifiers already claimed during one sampling session."""

    indices: set[int] = field(default_factory=set)
    identifiers: list[str] = field(default_factory=list)
    _identifier_set: set[str] = field(default_factory=set, repr=False)

    def __len__(self) -> int:
        return len(self.indices)

    def is_claimed(self, index: int, identifier: Optional[str] = None) -> bool:
        if index in self.indices:
            return True
        return identifier is not None and identifier in self._identifier_set

    def claim(self, index: int, identifier: str) -> None:
        self.indices.add(index)
        self.identifiers.append(identifier)
        self._identifier_set.add(identifier)


@dataclass(frozen=True)
class RetryExhausted:
    """Notice that an item group stopped short of its requested winners.

    Attributes
    ----------
    item : str
        Item whose group was cut short.
    requested : int
        Winners the caller asked for.
    drawn : int
        Winners actually drawn.
    failures : int
        Consecutive misses that ended the loop.
    """

    item: str
    requested: int
    drawn: int
    failures: int


class UniqueFileSampler:
    """Draw distinct winners per item from a :class:`RecordSource`.

    Sampling guesses random indices and gives up on an item after
    ``retry_count`` consecutive collisions, so a sparse or nearly exhausted
    source yields fewer winners instead of an error. No index or identifier
    is handed to more than one item within a single :meth:`get_winners` call.
    """

    def __init__(
        self,
        source: Optional[RecordSource] = None,
        items: Optional[Mapping[str, int]] = None,
        *,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self._source = source
        self._items: dict[str, int] = dict(items or {})
        self._rng = rng or make_random_source()
        self.exhausted: list[RetryExhausted] = []

    def set_source(self, source: RecordSource) -> "UniqueFileSampler":
        self._source = source
        return self

    def set_record_file(
        self,
        path: Union[str, os.PathLike],
        delimiter: Optional[str] = None,
    ) -> "UniqueFileSampler":
        """Use the delimited file at ``path`` as the record source.

        Raises
        ------
        SourceUnavailableError
            If the file does not exist or is not readable.
        """
        return self.set_source(FileRecordSource(path, delimiter=delimiter))

    def set_items(self, items: Mapping[str, int]) -> "UniqueFileSampler":
        """Set the number of winners wanted per item, in drawing order."""
        self._items = dict(items)
        return self

    def get_winners(self, retry_count: Optional[int] = None) -> dict[str, list[str]]:
        """Draw winners for every configured item.

        Parameters
        ----------
        retry_count : Optional[int], default: None
            Consecutive misses tolerated per item before giving up. Defaults
            to ``DRAWKIT_RETRY_COUNT`` (10).

        Returns
        -------
        dict[str, list[str]]
            Winning identifiers per item, in the configured item order. A
            list may be shorter than requested; see :attr:`exhausted`.

        Raises
        ------
        SourceUnavailableError
            If no record source is configured or it cannot be read.
        """
        if self._source is None:
            raise SourceUnavailableError("No record source configured for the draw")
        if retry_count is None:
            retry_count = config.DEFAULT_RETRY_COUNT

        total = self._source.count()
        registry = SelectionRegistry()
        self.exhausted = []
        logger.debug("Sampling %d item group(s) from %d record(s)", len(self._items), total)

        winners: dict[str, list[str]] = {}
        for item, desired in self._items.items():
            winners[item] = self._draw(item, desired, total, retry_count, registry)
        return winners

    def _draw(
        self,
        item: str,
        desired: int,
        total: int,
        retry_count: int,
        registry: SelectionRegistry,
    ) -> list[str]:
        target = max(0, min(desired, total - len(registry)))
        winners: list[str] = []
        failures = 0

        while len(winners) < target and failures < retry_count:
            index = self._rng.randbelow(total)
            if registry.is_claimed(index):
                failures += 1
                continue
            identifier = self._source.record_at(index)
            if not identifier or registry.is_claimed(index, identifier):
                failures += 1
                continue
            registry.claim(index, identifier)
            winners.append(identifier)
            failures = 0

        if len(winners) < desired and failures >= retry_count:
            notice = RetryExhausted(item, desired, len(winners), failures)
            self.exhausted.append(notice)
            logger.warning(
                "Stopped drawing %r after %d consecutive misses (%d of %d winners)",
                item,
                failures,
                len(winners),
                desired,
            )
        return winners


__all__ = ["RetryExhausted", "SelectionRegistry", "UniqueFileSampler"]
