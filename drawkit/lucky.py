"""Chance-based prize allocation with decimal-exact weighting."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence, Union

from .errors import InvalidBiasError, InvalidRangeError, InvalidWeightError
from .random_source import RandomSource, make_random_source
from .validation import check_chance_entries
from .weighted import weighted_pick

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class FixedAmounts:
    """Plain list of amounts; one is picked uniformly."""

    values: tuple[Any, ...]


@dataclass(frozen=True)
class WeightedAmounts:
    """Amounts mapped to their relative weights."""

    weights: tuple[tuple[Any, Number], ...]


@dataclass(frozen=True)
class AmountRange:
    """Continuous amount range ``[min, max]`` sampled with a bias exponent.

    Attributes
    ----------
    min, max : Decimal
        Bounds of the range, kept as decimals so their precision is known.
    bias : float
        ``1`` samples uniformly, larger values lean towards ``min`` and
        values between 0 and 1 lean towards ``max``.
    """

    min: Decimal
    max: Decimal
    bias: float


Amounts = Union[FixedAmounts, WeightedAmounts, AmountRange]


@dataclass(frozen=True)
class ChancePick:
    """Outcome of :meth:`ChanceAllocator.pick`."""

    item: str
    amount: Any


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # Going through str() keeps the literal digits of floats such as 0.1.
    return Decimal(str(value).strip())


def fraction_digits(values: Sequence[Any]) -> int:
    """Return the largest count of significant digits after the decimal point."""
    digits = 0
    for value in values:
        exponent = _to_decimal(value).normalize().as_tuple().exponent
        if isinstance(exponent, int) and exponent < 0:
            digits = max(digits, -exponent)
    return digits


def scale_chances(chances: Mapping[str, Any]) -> dict[str, int]:
    """Turn positive decimal chances into proportional integer weights.

    Non-positive chances are dropped. Every remaining chance is multiplied by
    ``10 ** fraction_digits`` in decimal arithmetic and truncated, so
    ``{a: 0.1, b: 0.2}`` becomes ``{a: 1, b: 2}`` exactly.

    Raises
    ------
    InvalidWeightError
        If a chance is not a decimal number.
    """
    parsed: dict[str, Decimal] = {}
    for item, chance in chances.items():
        try:
            value = _to_decimal(chance)
        except (InvalidOperation, ValueError) as exc:
            raise InvalidWeightError(
                f"Chances for {item!r} should be a positive decimal number"
            ) from exc
        if not value.is_finite():
            raise InvalidWeightError(
                f"Chances for {item!r} should be a positive decimal number"
            )
        if value > 0:
            parsed[item] = value

    multiplier = Decimal(10) ** fraction_digits(list(parsed.values()))
    scaled = {item: int(value * multiplier) for item, value in parsed.items()}
    logger.debug("Scaled %d chance(s) by %s", len(scaled), multiplier)
    return scaled


def parse_amount_range(spec: str) -> AmountRange:
    """Parse a ``"min,max,bias"`` string.

    Raises
    ------
    InvalidRangeError
        If the string does not hold three numbers or ``max`` is not above ``min``.
    InvalidBiasError
        If ``bias`` is not positive.
    """
    fields = next(csv.reader([spec]), [])
    if len(fields) != 3:
        raise InvalidRangeError("Invalid amount range (expected: min,max,bias).")
    try:
        low, high, bias = (_to_decimal(field) for field in fields)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidRangeError("Invalid amount range (expected: min,max,bias).") from exc
    if not all(value.is_finite() for value in (low, high, bias)):
        raise InvalidRangeError("Invalid amount range (expected: min,max,bias).")

    _check_range(low, high, bias)
    return AmountRange(min=low, max=high, bias=float(bias))


def _check_range(low: Any, high: Any, bias: Any) -> None:
    if high <= low:
        raise InvalidRangeError("Maximum value should be greater than minimum.")
    if bias <= 0:
        raise InvalidBiasError("Bias should be greater than 0.")


def weighted_amount_range(
    low: Number,
    high: Number,
    bias: float,
    rng: Optional[RandomSource] = None,
) -> Number:
    """Draw an amount in ``[low, high]`` skewed by ``bias``.

    The raw value is ``low + U ** bias * (high - low + 1)`` for a uniform
    ``U`` in ``[0, 1)``, rounded to the precision of the bounds and clamped
    into the range.

    Parameters
    ----------
    low, high : int | float
        Bounds of the range; ``high`` must exceed ``low``.
    bias : float
        Positive exponent applied to ``U``.
    rng : Optional[RandomSource], default: None
        Random source; one is built from the environment when omitted.

    Returns
    -------
    int | float
        An ``int`` when both bounds are integral, otherwise a ``float``.

    Raises
    ------
    InvalidRangeError
        If ``high`` is not greater than ``low``.
    InvalidBiasError
        If ``bias`` is not positive.
    """
    _check_range(low, high, bias)
    amount_range = AmountRange(_to_decimal(low), _to_decimal(high), float(bias))
    return _sample_range(amount_range, rng or make_random_source())


def _sample_range(amount_range: AmountRange, rng: RandomSource) -> Number:
    low = float(amount_range.min)
    high = float(amount_range.max)
    digits = fraction_digits([amount_range.min, amount_range.max])

    raw = low + rng.random() ** amount_range.bias * (high - low + 1)
    value = max(min(round(raw, digits), high), low)
    return int(value) if digits == 0 else value


def parse_amounts(amounts: Any) -> Amounts:
    """Resolve the ``amounts`` field of a chance entry into its variant.

    A string is an :class:`AmountRange` spec, a list (or a mapping keyed
    ``0..n-1``) is a :class:`FixedAmounts`, and any other mapping is a
    :class:`WeightedAmounts` of ``amount -> weight``.
    """
    if isinstance(amounts, str):
        return parse_amount_range(amounts)
    if isinstance(amounts, Mapping):
        if list(amounts.keys()) == list(range(len(amounts))):
            return FixedAmounts(tuple(amounts.values()))
        return WeightedAmounts(tuple(amounts.items()))
    return FixedAmounts(tuple(amounts))


class ChanceAllocator:
    """Pick a prize item by its chances, then an amount for that item.

    Each entry is a mapping with ``item`` (name), ``chances`` (positive
    decimal) and ``amounts`` (list of values, ``{amount: weight}`` mapping,
    or a ``"min,max,bias"`` range string).
    """

    def __init__(
        self,
        entries: Sequence[Mapping[str, Any]],
        *,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.entries = list(entries)
        self._rng = rng or make_random_source()

    def check(self) -> None:
        check_chance_entries(self.entries)

    def pick(self, check: bool = True) -> ChancePick:
        """Pick an item weighted by its chances and resolve its amount.

        Parameters
        ----------
        check : bool, default: True
            Validate the entries before picking.

        Returns
        -------
        ChancePick
            The winning item name and the amount drawn for it.

        Raises
        ------
        EmptyPoolError
            If there are no entries.
        MissingFieldError
            If an entry lacks ``item``, ``chances`` or ``amounts``.
        InvalidWeightError
            If no entry has a positive chance.

        Notes
        -----
        When several entries share an ``item`` name, the last one supplies
        both the chances and the amounts.
        """
        if check:
            self.check()

        # Later entries for the same item replace earlier ones.
        by_item = {entry["item"]: entry for entry in self.entries}
        weights = scale_chances(
            {item: entry["chances"] for item, entry in by_item.items()}
        )
        picked = weighted_pick(weights, self._rng)
        amount = self.select_amount(parse_amounts(by_item[picked]["amounts"]))
        logger.debug("Picked %r with amount %r", picked, amount)
        return ChancePick(item=picked, amount=amount)

    def select_amount(self, amounts: Amounts) -> Any:
        """Draw one amount from a resolved ``amounts`` variant."""
        if isinstance(amounts, AmountRange):
            return _sample_range(amounts, self._rng)
        if isinstance(amounts, FixedAmounts):
            if not amounts.values:
                raise InvalidRangeError("Amounts must contain at least one value.")
            if len(amounts.values) == 1:
                return amounts.values[0]
            return amounts.values[self._rng.randbelow(len(amounts.values))]
        if len(amounts.weights) == 1:
            return amounts.weights[0][0]
        return weighted_pick(amounts.weights, self._rng)


__all__ = [
    "AmountRange",
    "Amounts",
    "ChanceAllocator",
    "ChancePick",
    "FixedAmounts",
    "WeightedAmounts",
    "fraction_digits",
    "parse_amount_range",
    "parse_amounts",
    "scale_chances",
    "weighted_amount_range",
]
