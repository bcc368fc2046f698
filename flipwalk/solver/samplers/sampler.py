"""
This module defines the base class for flip samplers.

Flip samplers are queried by the solver at each step, with a randomly
chosen unsatisfied clause. They choose which of the clause's variables
to flip, so that the clause becomes satisfied.
"""

#################################################################################

from __future__ import annotations

#################################################################################
# FILE CONTENTS:
# - FLIP SAMPLER BASE CLASS
# - WEIGHTED DRAW
#################################################################################

import random
from abc import ABC, abstractmethod
from typing import Sequence, Tuple

from flipwalk.fundamentals import Var
from flipwalk.solver.common import FlipChoice
from flipwalk.solver.formula import Clause
from flipwalk.solver.solver_state import SolverState

#################################################################################
# DOC: OK
#################################################################################

class FlipSampler(ABC):
    """
    Base class (or rather interface) for flip samplers.

    Samplers work on the distinct variables of the targeted clause (in
    order of first appearance), so that a clause repeating a variable
    doesn't yield duplicate or self cancelling flips.
    """

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @abstractmethod
    def sample(self,
        clause: Clause,
        state: SolverState,
        rng: random.Random,
    ) -> FlipChoice:
        """
        Chooses the variables of `clause` to flip.

        Args:
            clause: The targeted clause. Must be currently unsatisfied.

            state: The current solver state. Not modified.

            rng: The random generator to draw from.

        Returns:
            A flip set which, once applied, satisfies `clause`.
        """
        pass

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @staticmethod
    def flip_choice_of(
        clause_vars: Sequence[Var],
        combination: int,
    ) -> FlipChoice:
        """Builds the `FlipChoice` corresponding to a combination bitmask over `clause_vars`."""

        vars_to_flip: Tuple[Var,...] = tuple(var for i, var in enumerate(clause_vars)
                                             if combination >> i & 1)
        return FlipChoice(vars_to_flip, combination)

#################################################################################
# WEIGHTED DRAW | DOC: OK
#################################################################################

def draw_weighted_index(
    weights: Sequence[float],
    rng: random.Random,
    start: int = 0,
) -> int:
    """
    Draws an index `i >= start` with probability proportional to `weights[i]`.

    A number `r` is drawn uniformly in `[0, Z)`, `Z` being the sum of the
    weights, and the smallest index whose cumulative weight is at least `r`
    is returned.

    Note:
        If all weights underflowed to 0 (huge break counts), the draw is
        made uniformly among the indices of maximal weight instead.
        The last index is returned if rounding errors make the cumulative
        weight fall short of `r`.
    """

    total = 0.0
    for i in range(start, len(weights)):
        total += weights[i]

    if not total > 0:
        best = max(weights[start:])
        candidates = [i for i in range(start, len(weights)) if weights[i] == best]
        return candidates[rng.randrange(len(candidates))]

    r = rng.random() * total

    cumulative = 0.0
    for i in range(start, len(weights)):
        cumulative += weights[i]
        if cumulative >= r and weights[i] > 0:
            return i

    return len(weights) - 1

#################################################################################
