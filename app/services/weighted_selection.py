"""Weighted random selection used by the percentage fallback stage."""

import math
import random
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")

_default_rng = random.Random()


class RandomSource(Protocol):
    """Anything with a ``random()`` method returning a float in ``[0, 1)``."""

    def random(self) -> float: ...


@dataclass(frozen=True)
class WeightedPick(Generic[T]):
    """Outcome of :func:`pick_weighted`.

    ``fell_back`` is ``True`` when no cumulative threshold reached the
    draw and the last weighted option was taken instead.
    """

    choice: T
    draw: float
    total: float
    fell_back: bool = False


def pick_weighted(
    options: Sequence[T],
    weight: Callable[[T], float],
    rng: Optional[RandomSource] = None,
) -> Optional[WeightedPick[T]]:
    """Pick one option with probability proportional to its weight.

    Algorithm:

    1. ``total`` is the exact sum of all weights; weights are relative,
       so they do not need to add up to 100.
    2. A draw ``r`` is taken uniformly from ``[0, total)``.
    3. Options are walked in the given order, accumulating a running
       sum; the first positive-weight option with ``r <= running_sum``
       wins.
    4. If accumulated rounding error leaves the running sum short of
       ``r``, the last positive-weight option is returned with
       ``fell_back=True``.

    Returns ``None`` when *options* is empty or the total weight is not
    positive.  Raises ``ValueError`` on a negative weight.
    """
    if not options:
        return None

    weights = [float(weight(option)) for option in options]
    if any(w < 0 for w in weights):
        raise ValueError("weights must be non-negative")

    total = math.fsum(weights)
    if total <= 0:
        return None

    draw = (rng or _default_rng).random() * total

    running_sum = 0.0
    last_weighted: Optional[T] = None
    for option, w in zip(options, weights):
        if w == 0:
            continue
        running_sum += w
        last_weighted = option
        if draw <= running_sum:
            return WeightedPick(choice=option, draw=draw, total=total)

    return WeightedPick(choice=last_weighted, draw=draw, total=total, fell_back=True)
