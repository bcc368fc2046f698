"""
This module defines the functions driving a solver to a terminal state,
as used by reporting code.
"""

from __future__ import annotations

#################################################################################

import logging
from typing import Callable, Optional, Sequence

from flipwalk.solver.common import SearchStatus, SolveResult
from flipwalk.solver.config import SolverConfig
from flipwalk.solver.formula import Formula
from flipwalk.solver.solver import Solver
from flipwalk.solver.solver_state import Assignment

logger = logging.getLogger(__name__)

#################################################################################
#
#################################################################################

def run_search(
    solver: Solver,
    on_step: Optional[Callable[[Solver], None]] = None,
) -> SolveResult:
    """
    Steps `solver` until it reaches a terminal state.

    Args:
        solver: The solver to run. It is left in its terminal state.

        on_step: Optional callback, invoked with the solver after each \
            counted step (i.e. each applied flip).

    Returns:
        The result of the run.

    Note:
        Logs the progress of the search every `config.report_interval` steps.
    """

    report_interval = solver.config.report_interval

    while True:

        num_steps_before = solver.num_steps
        status = solver.step()

        if solver.num_steps != num_steps_before:

            if on_step is not None:
                on_step(solver)

            if report_interval and solver.num_steps % report_interval == 0:
                logger.info("Steps: %d | unsatisfied: %d | min. unsatisfied: %d | flip sizes: %s",
                            solver.num_steps,
                            solver.state.num_unsatisfied,
                            solver.statistics.min_num_unsatisfied,
                            dict(sorted(solver.statistics.flip_size_histogram.items())))

        if status is not SearchStatus.RUNNING:
            break

    if status is SearchStatus.SATISFIED:
        logger.info("All clauses satisfied after %d steps.", solver.num_steps)
    else:
        logger.info("Step budget exhausted after %d steps (%d clauses unsatisfied, min. %d).",
                    solver.num_steps, solver.state.num_unsatisfied,
                    solver.statistics.min_num_unsatisfied)

    return solver.result()

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

def solve(
    formula: Formula,
    config: SolverConfig,
    initial_assignment: Optional[Sequence[bool]] = None,
    on_step: Optional[Callable[[Solver], None]] = None,
) -> SolveResult:
    """
    Runs a new solver on `formula` until it satisfies it or exhausts its step budget.

    Args:
        formula: The formula to satisfy.

        config: The solver's configuration.

        initial_assignment: The values to start from, where index `i` holds \
            the value of variable `i+1`. If None, a random assignment is drawn \
            from the solver's (seeded) random generator.

        on_step: See `run_search`.

    Raises:
        ValueError: If `initial_assignment` doesn't have one value per variable.
    """

    assignment = Assignment(initial_assignment) if initial_assignment is not None else None
    solver = Solver(formula, config, assignment)
    return run_search(solver, on_step)

#################################################################################
