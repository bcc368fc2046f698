"""
This module defines the main high-level class of the solver.

It implements the search loop as a state machine, advanced one step
(one flip) at a time by `Solver.step`.
"""

from __future__ import annotations

#################################################################################
# FILE CONTENTS:
# - MAIN SOLVER CLASS | SEARCH LOOP STATE MACHINE
#################################################################################

import logging
import random
from typing import Optional

from flipwalk.solver.common import (InconsistentStateWarning, SamplingStrategy,
                                    SearchStatistics, SearchStatus, SolveResult)
from flipwalk.solver.config import SolverConfig
from flipwalk.solver.formula import Formula
from flipwalk.solver.samplers.break_weighted_sampler import BreakWeightedSampler
from flipwalk.solver.samplers.sampler import FlipSampler
from flipwalk.solver.samplers.single_flip_sampler import SingleFlipSampler
from flipwalk.solver.samplers.uniform_repair_sampler import UniformRepairSampler
from flipwalk.solver.samplers.weights import WeightTable
from flipwalk.solver.solver_state import Assignment, SolverState

logger = logging.getLogger(__name__)

#################################################################################

class Solver():
    """
    A stochastic local search ("biased random walk") solver.

    At each step, an unsatisfied clause is chosen uniformly at random, the
    sampler chooses a flip set repairing it, the flip set is applied and the
    clauses in which the flipped variables occur are re-evaluated.

    The states of the search are:
    - `SearchStatus.RUNNING`.
    - `SearchStatus.SATISFIED` (terminal): all clauses are satisfied.
    - `SearchStatus.EXHAUSTED_BUDGET` (terminal): the step budget was used
    up without satisfying all clauses.

    Note:
        A solver owns its state and random generator: it must not be shared
        between threads. The formula can be shared between solvers.
    """

    #############################################################################
    # INIT
    #############################################################################

    def __init__(self,
        formula: Formula,
        config: SolverConfig,
        initial_assignment: Optional[Assignment] = None,
    ):

        self.formula: Formula = formula

        self.config: SolverConfig = config

        self.rng: random.Random = random.Random(config.seed)

        self.sampler: FlipSampler = self._make_sampler()

        # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

        if initial_assignment is None:
            initial_assignment = Assignment.random(formula.num_vars, self.rng)

        self.state: SolverState = SolverState(formula, initial_assignment)

        self._status: SearchStatus = SearchStatus.RUNNING

        self._num_steps: int = 0

        self.statistics: SearchStatistics = SearchStatistics(min_num_unsatisfied=self.state.num_unsatisfied)

        logger.debug("Solver created on %r (strategy %s, weighting %s, temperature %s, budget %d, seed %s).",
                     formula, config.strategy.value, config.weighting.value,
                     config.temperature, config.step_budget, config.seed)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def _make_sampler(self) -> FlipSampler:

        config = self.config

        match config.strategy:
            case SamplingStrategy.UNIFORM_REPAIR:
                return UniformRepairSampler()
            case SamplingStrategy.BREAK_WEIGHTED:
                weights = WeightTable(config.weighting, config.temperature,
                                      config.power_law_offset, self.formula.max_occurrences + 1)
                return BreakWeightedSampler(weights, config.break_scope)
            case SamplingStrategy.SINGLE_FLIP:
                weights = WeightTable(config.weighting, config.temperature,
                                      config.power_law_offset, self.formula.max_occurrences + 1)
                return SingleFlipSampler(weights, config.break_scope)
            case _:
                assert False

    #############################################################################
    # QUERIES
    #############################################################################

    @property
    def status(self) -> SearchStatus:
        return self._status

    @property
    def num_steps(self) -> int:
        return self._num_steps

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def result(self) -> SolveResult:
        return SolveResult(self._status,
                           self._num_steps,
                           self.state.assignment.as_tuple(),
                           self.statistics)

    #############################################################################
    # RESET
    #############################################################################

    def reset(self,
        assignment: Optional[Assignment] = None,
    ) -> None:
        """
        Restarts the search from `assignment` (or from a new random assignment
        if None), with a zero step counter and fresh statistics. The random
        generator is not reseeded: successive runs differ.
        """

        self.state.replace_assignment(assignment, self.rng)
        self._status = SearchStatus.RUNNING
        self._num_steps = 0
        self.statistics = SearchStatistics(min_num_unsatisfied=self.state.num_unsatisfied)

        logger.debug("Solver reset (%d unsatisfied clauses).", self.state.num_unsatisfied)

    #############################################################################
    # SEARCH LOOP
    #############################################################################

    def _on_no_unsatisfied_clause(self) -> None:
        """
        Transitions to `SearchStatus.SATISFIED`, after checking (if configured)
        that the assignment does satisfy every clause.

        Raises:
            InconsistentStateWarning: If a clause is actually unsatisfied.
        """

        if self.config.verify_on_satisfied:
            inconsistent = self.state.find_inconsistencies()
            if inconsistent:
                logger.error("No clause is recorded as unsatisfied, but %d clauses are (first: %d).",
                             len(inconsistent), inconsistent[0])
                raise InconsistentStateWarning(("The set of unsatisfied clauses is empty but clauses "
                                                "{0} are not satisfied.").format(inconsistent))

        self._status = SearchStatus.SATISFIED

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def step(self) -> SearchStatus:
        """
        Advances the search by one step, unless it is already in a terminal state.

        If no clause is unsatisfied, the search transitions to
        `SearchStatus.SATISFIED` without counting a step. Otherwise, a random
        unsatisfied clause is repaired by a sampled flip set and the step
        counter is incremented. Once the counter reaches the step budget, the
        search terminates (`SearchStatus.SATISFIED` if the last flip satisfied
        all clauses, `SearchStatus.EXHAUSTED_BUDGET` otherwise).

        Returns:
            The status of the search after the step.
        """

        if self._status is not SearchStatus.RUNNING:
            return self._status

        unsatisfied = self.state.unsatisfied

        if unsatisfied.is_empty():
            self._on_no_unsatisfied_clause()
            return self._status

        clause = self.formula.clause(unsatisfied.pick_random(self.rng))

        choice = self.sampler.sample(clause, self.state, self.rng)

        self.state.flip_variables(choice.vars_to_flip)

        self._num_steps += 1
        self.statistics.record_flip(len(choice.vars_to_flip), len(unsatisfied))

        if self._num_steps >= self.config.step_budget:
            if unsatisfied.is_empty():
                self._on_no_unsatisfied_clause()
            else:
                self._status = SearchStatus.EXHAUSTED_BUDGET

        return self._status

#################################################################################
