"""Randomized winner selection for contests, giveaways and prize allocation."""

from .errors import (
    DrawError,
    EmptyPoolError,
    InvalidBiasError,
    InvalidCountError,
    InvalidRangeError,
    InvalidWeightError,
    MissingFieldError,
    NoRangesError,
    SourceUnavailableError,
    UnknownStrategyError,
)
from .flexible import DrawPool, Strategy
from .grand import RetryExhausted, SelectionRegistry, UniqueFileSampler
from .items import Item, TimeInterval
from .lucky import ChanceAllocator, ChancePick, weighted_amount_range
from .random_source import RandomSource, make_random_source
from .sources import FileRecordSource, RecordSource, SqlRecordSource
from .weighted import weighted_pick

__all__ = [
    "ChanceAllocator",
    "ChancePick",
    "DrawError",
    "DrawPool",
    "EmptyPoolError",
    "FileRecordSource",
    "InvalidBiasError",
    "InvalidCountError",
    "InvalidRangeError",
    "InvalidWeightError",
    "Item",
    "MissingFieldError",
    "NoRangesError",
    "RandomSource",
    "RecordSource",
    "RetryExhausted",
    "SelectionRegistry",
    "SourceUnavailableError",
    "SqlRecordSource",
    "Strategy",
    "TimeInterval",
    "UniqueFileSampler",
    "UnknownStrategyError",
    "make_random_source",
    "weighted_amount_range",
    "weighted_pick",
]
