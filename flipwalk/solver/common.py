"""
This module defines some common "helper" types used by the solver: errors,
enumerations of the configurable behaviours, and the records exchanged
between the samplers, the solver and its callers.
"""

from __future__ import annotations

#################################################################################

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Tuple

from flipwalk.fundamentals import Lit, Var

#################################################################################
# ERRORS | DOC: OK
#################################################################################

class MalformedClauseError(ValueError):
    """
    Raised when a formula is built from a malformed clause: an empty clause,
    a clause containing the literal 0, or a clause mentioning a variable out
    of the declared variable range.
    """
    pass

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

class InvalidConfigurationError(ValueError):
    """
    Raised when a `SolverConfig` is built with invalid parameters
    (e.g. a non positive step budget or temperature, or an unknown
    weighting family). Never raised during a run.
    """
    pass

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

class InconsistentStateWarning(RuntimeWarning):
    """
    Raised when the set of unsatisfied clauses is empty while the assignment
    does not satisfy the formula.

    Note:
        This can only happen if the incremental maintenance of the set of
        unsatisfied clauses is broken. It is never a normal search outcome.
    """
    pass

#################################################################################
# CONFIGURATION ENUMERATIONS | DOC: OK
#################################################################################

class WeightingFamily(str, Enum):
    """The function mapping a break count `b` to a sampling weight."""

    EXPONENTIAL = "exponential"
    """`exp(-beta * b)`"""

    POWER_LAW = "power-law"
    """`(c0 + b) ** -beta`"""

    UNIFORM = "uniform"
    """`1`, whatever the break count."""

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

class SamplingStrategy(str, Enum):
    """The way a flip set is sampled for a targeted unsatisfied clause."""

    BREAK_WEIGHTED = "break-weighted"
    """Any non empty subset of the clause's variables, weighted by break count."""

    UNIFORM_REPAIR = "uniform-repair"
    """Fair coin per variable, redrawn until the clause is repaired."""

    SINGLE_FLIP = "single-flip"
    """Exactly one of the clause's variables, weighted by break count."""

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

class BreakCountScope(str, Enum):
    """Which neighbour clauses may count as "broken" by a flip."""

    SATISFIED = "satisfied"
    """Only neighbour clauses currently marked as satisfied."""

    ALL = "all"
    """Any neighbour clause left without a true literal, whatever its current status."""

#################################################################################
# FLIPS | DOC: OK
#################################################################################

class FlipChoice(NamedTuple):
    """Represents the flip set chosen by a sampler for a targeted clause."""

    vars_to_flip: Tuple[Var,...]
    """The (distinct) variables whose values must be toggled."""

    combination: int
    """
    The bitmask of the flip set over the distinct variables of the targeted
    clause (bit `i` set iff its `i`-th distinct variable is flipped).
    """

#################################################################################
# SEARCH STATUS AND RESULTS | DOC: OK
#################################################################################

class SearchStatus(Enum):
    """The states of the search loop."""

    RUNNING = "running"
    SATISFIED = "satisfied"
    EXHAUSTED_BUDGET = "exhausted-budget"

    @property
    def is_terminal(self) -> bool:
        return self is not SearchStatus.RUNNING

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

@dataclass
class SearchStatistics:
    """
    Optional instrumentation gathered during a run. Not needed by the search itself.
    """
    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    min_num_unsatisfied: int = 0
    """The smallest number of unsatisfied clauses seen so far."""

    flip_size_histogram: Dict[int, int] = field(default_factory=dict)
    """Maps a flip set size to the number of times a flip set of that size was applied."""

    def record_flip(self,
        num_flipped_vars: int,
        num_unsatisfied: int,
    ) -> None:

        self.flip_size_histogram[num_flipped_vars] = self.flip_size_histogram.get(num_flipped_vars, 0) + 1

        if num_unsatisfied < self.min_num_unsatisfied:
            self.min_num_unsatisfied = num_unsatisfied

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

class SolveResult(NamedTuple):
    """The outcome of a run, as exposed to reporting code."""

    status: SearchStatus
    """Either `SearchStatus.SATISFIED` or `SearchStatus.EXHAUSTED_BUDGET`."""

    steps_taken: int
    """The number of flips applied."""

    final_assignment: Tuple[bool,...]
    """The final assignment. Index `i` holds the value of variable `i+1`."""

    statistics: SearchStatistics

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @property
    def is_satisfied(self) -> bool:
        return self.status is SearchStatus.SATISFIED

    def model(self) -> List[Lit]:
        """
        Returns:
            The final assignment as a DIMACS-style list of literals \
                (`v` if variable `v` is true, `-v` otherwise).
        """
        return [Lit(v) if value else Lit(-v)
                for v, value in enumerate(self.final_assignment, start=1)]

#################################################################################
