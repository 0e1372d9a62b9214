"""Injectable source of uniform random numbers shared by the draw components."""

from __future__ import annotations

import random
from typing import Any, Optional, Sequence

from . import config


class RandomSource:
    """Thin wrapper around :mod:`random` that keeps draws off global state.

    With a ``seed`` the sequence is reproducible (useful for audits and
    tests); without one the operating system's entropy pool is used.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._seed = seed
        self._rng: random.Random = (
            random.Random(seed) if seed is not None else random.SystemRandom()
        )

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        """Return a uniform integer in the closed range ``[a, b]``."""
        return self._rng.randint(a, b)

    def random(self) -> float:
        """Return a uniform float in ``[0, 1)``."""
        return self._rng.random()

    def randbelow(self, n: int) -> int:
        """Return a uniform integer in ``[0, n)``."""
        return self._rng.randrange(n)

    def choice(self, seq: Sequence[Any]) -> Any:
        """Return one element of ``seq`` chosen uniformly."""
        return self._rng.choice(seq)


def make_random_source(seed: Optional[int] = None) -> RandomSource:
    """Build a :class:`RandomSource`, falling back to ``DRAWKIT_SEED`` when set."""
    return RandomSource(seed if seed is not None else config.DEFAULT_SEED)


__all__ = ["RandomSource", "make_random_source"]
