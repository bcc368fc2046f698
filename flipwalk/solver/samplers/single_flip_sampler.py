"""
This module defines the single-flip sampler, in the spirit of probSAT:
exactly one variable of the targeted clause is flipped, chosen with a
probability decreasing with its break count.
"""

from __future__ import annotations

#################################################################################

import random
from typing import List

from flipwalk.fundamentals import distinct_vars_of
from flipwalk.solver.common import BreakCountScope, FlipChoice
from flipwalk.solver.formula import Clause
from flipwalk.solver.samplers.breaks import (break_counts_of_single_flips,
                                             collect_neighbour_profiles)
from flipwalk.solver.samplers.sampler import FlipSampler, draw_weighted_index
from flipwalk.solver.samplers.weights import WeightTable
from flipwalk.solver.solver_state import SolverState

#################################################################################
# DOC: OK
#################################################################################

class SingleFlipSampler(FlipSampler):
    """
    probSAT-style sampler, flipping a single variable of the targeted clause.

    Each distinct variable `v` of the clause is drawn with probability
    proportional to `w(break(v))`, where `break(v)` is the number of
    satisfied clauses that flipping `v` alone would make unsatisfied.
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
            The break count of flipping each distinct variable of the clause alone.
        """

        clause_vars = distinct_vars_of(clause.literals)
        profiles = collect_neighbour_profiles(clause_vars, state, self.scope)
        return break_counts_of_single_flips(len(clause_vars), profiles)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def sample(self,
        clause: Clause,
        state: SolverState,
        rng: random.Random,
    ) -> FlipChoice:

        clause_vars = distinct_vars_of(clause.literals)
        profiles = collect_neighbour_profiles(clause_vars, state, self.scope)
        counts = break_counts_of_single_flips(len(clause_vars), profiles)

        i = draw_weighted_index([self.weights[b] for b in counts], rng)

        return self.flip_choice_of(clause_vars, 1 << i)

#################################################################################
