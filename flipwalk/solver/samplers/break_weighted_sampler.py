"""
This module defines the break-weighted sampler: all non empty combinations
of the targeted clause's variables are candidate flip sets, and each is drawn
with a probability decreasing with its break count, i.e. the number of
currently satisfied clauses it would make unsatisfied.
"""

from __future__ import annotations

#################################################################################

import random
from typing import List

from flipwalk.fundamentals import distinct_vars_of
from flipwalk.solver.common import BreakCountScope, FlipChoice
from flipwalk.solver.formula import Clause
from flipwalk.solver.samplers.breaks import (break_counts_of_combinations,
                                             collect_neighbour_profiles)
from flipwalk.solver.samplers.sampler import FlipSampler, draw_weighted_index
from flipwalk.solver.samplers.weights import WeightTable
from flipwalk.solver.solver_state import SolverState

#################################################################################
# DOC: OK
#################################################################################

class BreakWeightedSampler(FlipSampler):
    """
    Draws one of the `2^k - 1` non empty combinations of the `k` distinct
    variables of the targeted clause, with weight `w(Break(t))` for
    combination `t` (see `WeightTable`).

    Combinations are enumerated in increasing bitmask order (bit `i` set iff
    the `i`-th distinct variable is flipped), which fixes the order in which
    cumulative weights are compared to the drawn number.

    Note:
        The enumeration is exponential in the clause width, which is fine for
        the small widths of realistic instances.
    """

    def __init__(self,
        weights: WeightTable,
        scope: BreakCountScope = BreakCountScope.SATISFIED,
    ):

        self.weights: WeightTable = weights

        self.scope: BreakCountScope = scope

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def break_counts(self,
        clause: Clause,
        state: SolverState,
    ) -> List[int]:
        """
        Returns:
            The break counts of all combinations of the clause's distinct \
                variables, indexed by combination bitmask (index 0, the empty \
                combination, is always 0).
        """

        clause_vars = distinct_vars_of(clause.literals)
        profiles = collect_neighbour_profiles(clause_vars, state, self.scope)
        return break_counts_of_combinations(len(clause_vars), profiles)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def sample(self,
        clause: Clause,
        state: SolverState,
        rng: random.Random,
    ) -> FlipChoice:

        clause_vars = distinct_vars_of(clause.literals)
        profiles = collect_neighbour_profiles(clause_vars, state, self.scope)
        counts = break_counts_of_combinations(len(clause_vars), profiles)

        weights = [0.0] + [self.weights[b] for b in counts[1:]]
        combination = draw_weighted_index(weights, rng, start=1)

        return self.flip_choice_of(clause_vars, combination)

#################################################################################
