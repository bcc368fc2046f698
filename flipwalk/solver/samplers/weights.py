"""
This module defines the lookup table mapping break counts to sampling weights.
"""

from __future__ import annotations

#################################################################################

import math
from typing import List

from flipwalk.solver.common import WeightingFamily

#################################################################################
# DOC: OK
#################################################################################

class WeightTable():
    """
    Maps a break count `b` to the (unnormalized) weight of a flip breaking
    `b` clauses, according to a weighting family and a temperature `beta`:
    - Exponential family: `exp(-beta * b)`.
    - Power-law family: `(c0 + b) ** -beta`, with `c0` a small positive offset,
    divided by the weight of `b = 0` (which leaves the sampling distribution
    unchanged).
    - Uniform family: `1`.

    Since the weight only depends on the (integer) break count, weights are
    computed once and looked up afterwards. The table is precomputed up to an
    initial size and extended on demand.

    Note:
        A temperature of 0 is accepted, and makes every weight equal to 1.
    """

    def __init__(self,
        family: WeightingFamily,
        temperature: float,
        power_law_offset: float = 0.9,
        initial_size: int = 0,
    ):

        if temperature < 0:
            raise ValueError("The temperature must be non negative, got {0}.".format(temperature))

        if power_law_offset <= 0:
            raise ValueError("The power-law offset must be positive, got {0}.".format(power_law_offset))

        self.family: WeightingFamily = WeightingFamily(family)

        self.temperature: float = temperature

        self.power_law_offset: float = power_law_offset

        self._weights: List[float] = []

        self._extend_to(max(initial_size, 1))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def _compute(self,
        break_count: int,
    ) -> float:

        match self.family:
            case WeightingFamily.EXPONENTIAL:
                return math.exp(-self.temperature * break_count)
            case WeightingFamily.POWER_LAW:
                # relative to b = 0, so that a large beta underflows instead of overflowing
                return ((self.power_law_offset + break_count) / self.power_law_offset) ** -self.temperature
            case WeightingFamily.UNIFORM:
                return 1.0
            case _:
                assert False

    def _extend_to(self,
        size: int,
    ) -> None:

        for break_count in range(len(self._weights), size):
            self._weights.append(self._compute(break_count))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def __getitem__(self,
        break_count: int,
    ) -> float:

        if break_count >= len(self._weights):
            self._extend_to(max(break_count + 1, 2 * len(self._weights)))

        return self._weights[break_count]

    def __len__(self) -> int:
        """The number of precomputed weights."""
        return len(self._weights)

#################################################################################
