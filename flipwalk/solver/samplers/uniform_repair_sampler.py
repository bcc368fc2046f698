"""
This module defines the uniform-repair sampler: each variable of the targeted
clause gets a new value by a fair coin flip, and the coins are redrawn until
the clause is satisfied.
"""

from __future__ import annotations

#################################################################################

import random

from flipwalk.fundamentals import distinct_vars_of
from flipwalk.solver.common import FlipChoice
from flipwalk.solver.formula import Clause
from flipwalk.solver.samplers.sampler import FlipSampler
from flipwalk.solver.solver_state import SolverState

#################################################################################
# DOC: OK
#################################################################################

class UniformRepairSampler(FlipSampler):
    """
    Rejection sampler, uniform over the local re-assignments of the targeted
    clause's variables that satisfy it.

    For an unsatisfied clause whose `k` distinct variables are drawn at
    once, an attempt is rejected with probability `2^-k`, so at most 2
    attempts are needed on average. Since every literal of the clause is
    currently false, the accepted draws are exactly the `2^k - 1` non empty
    flip sets, each with the same probability.
    """

    def sample(self,
        clause: Clause,
        state: SolverState,
        rng: random.Random,
    ) -> FlipChoice:

        clause_vars = distinct_vars_of(clause.literals)
        current = state.assignment.values

        while True:
            drawn = { var: rng.random() < 0.5 for var in clause_vars }

            if any(drawn[abs(lit)] == (lit > 0) for lit in clause.literals):
                break

        combination = 0
        for i, var in enumerate(clause_vars):
            if drawn[var] != current[var]:
                combination |= 1 << i

        return self.flip_choice_of(clause_vars, combination)

#################################################################################
