"""
This module defines the in-memory model of a CNF formula: its clauses, and the
(signed) literal occurrence indexes used by the solver to re-evaluate and
score flips in time proportional to the clauses actually touched.

A `Formula` is read-only once built. All mutable search state (assignment,
satisfaction status of clauses) lives in `SolverState`, which makes it
possible to share a single `Formula` between several solvers.
"""

from __future__ import annotations

#################################################################################
# FILE CONTENTS:
# - CLAUSES
# - FORMULA CLASS
# - FORMULA CONSTRUCTION
#################################################################################

import logging
import numbers
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from flipwalk.fundamentals import Lit
from flipwalk.solver.common import MalformedClauseError

logger = logging.getLogger(__name__)

#################################################################################
# CLAUSES | DOC: OK
#################################################################################

class ClauseId(int):
    """Represents the ID of a clause in a formula (dense, from 0 to `num_clauses-1`)."""
    pass

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

class Clause(NamedTuple):
    """
    Represents a clause, i.e. a disjunction of literals.

    The literals are kept in the order they were given in, as samplers
    address them by index.
    """

    clause_id: ClauseId
    literals: Tuple[Lit,...]

    @property
    def width(self) -> int:
        return len(self.literals)

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

def evaluate_clause(
    literals: Iterable[int],
    values: Sequence[bool],
) -> bool:
    """
    Args:
        literals: The literals of the clause.

        values: The values of variables, indexed by variable id \
            (i.e. 1-based: index 0 is unused).

    Returns:
        Whether at least one of `literals` is true under `values`.
    """

    for lit in literals:
        if lit > 0:
            if values[lit]:
                return True
        elif not values[-lit]:
            return True
    return False

#################################################################################
# FORMULA | DOC: OK
#################################################################################

class Formula():
    """
    Represents a CNF formula, i.e. a conjunction of clauses.

    Besides the clauses, it holds two indexes, built once at construction:
    - The occurrence map, giving for each variable the IDs of the clauses
    containing it (in either polarity).
    - The signed occurrence map, giving for each literal the IDs of the
    clauses containing exactly that literal.

    A clause ID appears at most once in each list, even if the clause
    repeats a literal.
    """

    #############################################################################
    # INIT
    #############################################################################

    def __init__(self,
        num_vars: int,
        names: Optional[Mapping[int, str]] = None,
    ):

        self._num_vars: int = num_vars

        self._clauses: List[Clause] = []

        # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

        self._occurrences: List[List[ClauseId]] = [[] for _ in range(num_vars+1)]
        """Indexed by variable id. Index 0 is unused."""

        self._signed_occurrences: Dict[int, List[ClauseId]] = {}

        # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

        self._names: Dict[int, str] = dict(names) if names is not None else {}
        """Display names of variables. Only used for reporting."""

        self._max_width: int = 0

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def _add_clause(self,
        literals: Tuple[Lit,...],
    ) -> ClauseId:
        """
        Registers a new clause and indexes its literals. Only meant
        to be called by `build_formula`, before the formula is handed out.
        """

        clause_id = ClauseId(len(self._clauses))
        self._clauses.append(Clause(clause_id, literals))

        for lit in set(literals):
            self._signed_occurrences.setdefault(lit, []).append(clause_id)

        for var in set(abs(lit) for lit in literals):
            self._occurrences[var].append(clause_id)

        if len(literals) > self._max_width:
            self._max_width = len(literals)

        return clause_id

    #############################################################################
    # PROPERTIES
    #############################################################################

    @property
    def num_vars(self) -> int:
        return self._num_vars

    @property
    def num_clauses(self) -> int:
        return len(self._clauses)

    @property
    def clauses(self) -> Tuple[Clause,...]:
        return tuple(self._clauses)

    @property
    def max_width(self) -> int:
        """The width of the widest clause."""
        return self._max_width

    @property
    def max_occurrences(self) -> int:
        """The length of the longest occurrence list."""
        return max((len(occ) for occ in self._occurrences), default=0)

    def clause(self,
        clause_id: int,
    ) -> Clause:
        return self._clauses[clause_id]

    #############################################################################
    # OCCURRENCES
    #############################################################################

    def occurrences_of(self,
        var: int,
    ) -> Tuple[ClauseId,...]:
        """
        Returns:
            The IDs of the clauses containing `var` (positively or negatively).
        """

        if 0 < var <= self._num_vars:
            return tuple(self._occurrences[var])
        return ()

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def signed_occurrences_of(self,
        literal: int,
    ) -> Tuple[ClauseId,...]:
        """
        Returns:
            The IDs of the clauses containing exactly `literal`.
        """

        return tuple(self._signed_occurrences.get(literal, ()))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def _occurrences_list(self,
        var: int,
    ) -> List[ClauseId]:
        """
        Same as `occurrences_of`, without copying. For the solver's inner loop only:
        the returned list must not be modified.
        """
        return self._occurrences[var]

    def _signed_occurrences_list(self,
        literal: int,
    ) -> Sequence[ClauseId]:
        """
        Same as `signed_occurrences_of`, without copying. For the samplers'
        inner loops only: the returned list must not be modified.
        """
        return self._signed_occurrences.get(literal, ())

    #############################################################################
    # EVALUATION
    #############################################################################

    def evaluate_clause(self,
        clause_id: int,
        values: Sequence[bool],
    ) -> bool:
        """
        Returns:
            Whether the clause is satisfied under `values` (1-based values of variables).
        """
        return evaluate_clause(self._clauses[clause_id].literals, values)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def unsatisfied_clause_ids(self,
        values: Sequence[bool],
    ) -> List[ClauseId]:
        """
        Returns:
            The IDs of all clauses not satisfied under `values`, found by a full scan.
        """
        return [clause.clause_id for clause in self._clauses
                if not evaluate_clause(clause.literals, values)]

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def is_satisfied_by(self,
        values: Sequence[bool],
    ) -> bool:
        """
        Returns:
            Whether every clause is satisfied under `values`, found by a full scan.
        """
        return all(evaluate_clause(clause.literals, values) for clause in self._clauses)

    #############################################################################
    # REPORTING
    #############################################################################

    def symbol_of(self,
        literal: int,
    ) -> str:
        """
        Returns:
            The display name of `literal`: its variable's name (prefixed with \
                `-` if negative) if one was given, the literal's number otherwise.
        """

        name = self._names.get(abs(literal))
        if name is None:
            return str(literal)
        return name if literal > 0 else "-" + name

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def name_assignment(self,
        values: Sequence[bool],
    ) -> Dict[str, bool]:
        """
        Args:
            values: The values of the variables, where index `i` holds \
                the value of variable `i+1`.

        Returns:
            A mapping from the display name of each variable to its value.
        """

        if len(values) != self._num_vars:
            raise ValueError("Expected {0} values, got {1}.".format(self._num_vars, len(values)))

        return { self.symbol_of(var): bool(value)
                 for var, value in enumerate(values, start=1) }

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def __repr__(self) -> str:
        return "Formula(num_vars={0}, num_clauses={1})".format(self._num_vars, self.num_clauses)

#################################################################################
# FORMULA CONSTRUCTION | DOC: OK
#################################################################################

def build_formula(
    clauses: Iterable[Iterable[int]],
    num_vars: Optional[int] = None,
    names: Optional[Mapping[int, str]] = None,
) -> Formula:
    """
    Builds a formula from a sequence of clauses, each a sequence of literals
    (non zero signed integers).

    Args:
        clauses: The clauses of the formula.

        num_vars: The number of variables of the formula. If None, it is \
            inferred as the largest literal magnitude. Variables that \
            don't appear in any clause are allowed.

        names: Optional display names of variables, only used for reporting.

    Raises:
        MalformedClauseError: If a clause is empty, contains 0 or a non \
            integer literal, or if a literal's magnitude exceeds `num_vars`.
    """

    checked_clauses: List[Tuple[Lit,...]] = []
    max_var = 0

    for i, clause in enumerate(clauses):
        literals = tuple(clause)

        if len(literals) == 0:
            raise MalformedClauseError("Clause #{0} is empty.".format(i))

        for lit in literals:
            if isinstance(lit, bool) or not isinstance(lit, numbers.Integral):
                raise MalformedClauseError("Clause #{0} contains a non integer literal: {1!r}.".format(i, lit))
            if lit == 0:
                raise MalformedClauseError("Clause #{0} contains the literal 0.".format(i))
            max_var = max(max_var, abs(int(lit)))

        checked_clauses.append(tuple(Lit(int(lit)) for lit in literals))

    if num_vars is None:
        num_vars = max_var
    elif num_vars < max_var:
        raise MalformedClauseError(("A literal on variable {0} appears, "
                                    "but only {1} variables are declared.").format(max_var, num_vars))

    formula = Formula(num_vars, names)
    for literals in checked_clauses:
        formula._add_clause(literals)

    logger.debug("Built formula with %d variables and %d clauses (max width %d).",
                 formula.num_vars, formula.num_clauses, formula.max_width)

    return formula

#################################################################################
