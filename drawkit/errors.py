"""Exception hierarchy raised by the draw components."""

from __future__ import annotations

from typing import Optional, Sequence


class DrawError(Exception):
    """Base class for every error raised by :mod:`drawkit`."""


class EmptyPoolError(DrawError, ValueError):
    """Raised when a draw is attempted on a pool with no items."""


class MissingFieldError(DrawError, ValueError):
    """Raised when an item lacks a field required by the requested draw.

    Attributes
    ----------
    index : int
        Position of the offending item in the pool.
    fields : tuple[str, ...]
        Names of the missing fields, in declaration order.
    strategy : Optional[str]
        Strategy being validated, or ``None`` for chance entries.
    """

    def __init__(
        self,
        index: int,
        fields: Sequence[str],
        strategy: Optional[str] = None,
    ) -> None:
        self.index = index
        self.fields = tuple(fields)
        self.strategy = strategy
        suffix = f" for {strategy} draw" if strategy else ""
        super().__init__(
            f"Item at index {index} is missing required keys{suffix}: "
            + ", ".join(self.fields)
        )


class InvalidWeightError(DrawError, ValueError):
    """Raised when weights are negative or do not sum to a positive total."""


class InvalidCountError(DrawError, ValueError):
    """Raised when a batch draw is requested with a non-positive count."""


class NoRangesError(DrawError, ValueError):
    """Raised by ``rangeWeighted`` draws when no item carries a range."""


class InvalidRangeError(DrawError, ValueError):
    """Raised for malformed amount ranges or ranges where ``min >= max``."""


class InvalidBiasError(DrawError, ValueError):
    """Raised when an amount range carries a non-positive bias."""


class UnknownStrategyError(DrawError, ValueError):
    """Raised when :meth:`DrawPool.draw` receives an unsupported strategy."""


class SourceUnavailableError(DrawError, RuntimeError):
    """Raised when a record source cannot be opened or queried."""


__all__ = [
    "DrawError",
    "EmptyPoolError",
    "InvalidBiasError",
    "InvalidCountError",
    "InvalidRangeError",
    "InvalidWeightError",
    "MissingFieldError",
    "NoRangesError",
    "SourceUnavailableError",
    "UnknownStrategyError",
]
