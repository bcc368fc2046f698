"""
This module defines the main low-level class of the solver: `SolverState`.

It holds the mutable state of a run (the current assignment and the set of
currently unsatisfied clauses), and contains arguably the most important
method of the whole solver: `flip_variables`, which toggles variables and
incrementally re-evaluates the clauses they occur in.
"""

from __future__ import annotations

#################################################################################
# FILE CONTENTS:
# - ASSIGNMENT
# - UNSATISFIED CLAUSES SET
# - SOLVER STATE CLASS
#################################################################################

import random
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from flipwalk.solver.formula import ClauseId, Formula, evaluate_clause

#################################################################################
# ASSIGNMENT | DOC: OK
#################################################################################

class Assignment():
    """
    Represents a complete assignment of boolean values to the variables
    `1..num_vars` of a formula.

    Mutated in place by the solver. Never resized.
    """

    def __init__(self,
        values: Iterable[bool],
    ):

        self._values: List[bool] = [False]
        """
        The values of the variables, indexed by variable id.
        Index 0 holds a dummy value, so that indexing is 1-based.
        """
        self._values.extend(bool(v) for v in values)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @classmethod
    def random(cls,
        num_vars: int,
        rng: random.Random,
    ) -> Assignment:
        """Syntactic sugar for an assignment of independent fair coin flips."""
        return Assignment(rng.random() < 0.5 for _ in range(num_vars))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @property
    def num_vars(self) -> int:
        return len(self._values) - 1

    @property
    def values(self) -> Sequence[bool]:
        """
        The 1-based values of the variables (index 0 is a dummy).
        Must not be modified: use `flip` or `set_value` instead.
        """
        return self._values

    def __getitem__(self, var: int) -> bool:
        if not 0 < var < len(self._values):
            raise IndexError("Variable {0} out of range.".format(var))
        return self._values[var]

    def __len__(self) -> int:
        return len(self._values) - 1

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Assignment) and self._values[1:] == other._values[1:]

    def __repr__(self) -> str:
        return "Assignment({0})".format(self.as_tuple())

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def literal_value(self,
        literal: int,
    ) -> bool:
        """
        Returns:
            Whether `literal` is true under the assignment.
        """
        if literal > 0:
            return self._values[literal]
        return not self._values[-literal]

    def set_value(self,
        var: int,
        value: bool,
    ) -> None:
        self._values[var] = bool(value)

    def flip(self,
        var: int,
    ) -> None:
        self._values[var] = not self._values[var]

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def copy(self) -> Assignment:
        return Assignment(self._values[1:])

    def as_tuple(self) -> Tuple[bool,...]:
        """
        Returns:
            The values of the variables, where index `i` holds the value of variable `i+1`.
        """
        return tuple(self._values[1:])

#################################################################################
# UNSATISFIED CLAUSES SET | DOC: OK
#################################################################################

class UnsatisfiedClauses():
    """
    Represents the set of currently unsatisfied clauses.

    Implemented as a dense list of members coupled with a dictionary
    mapping each member to its position in the list. This allows:
    - Constant time insertion.
    - Constant time removal (by member, not by position), by moving
    the last member of the list into the removed member's slot.
    - Constant time uniform random picking.

    Note:
        Marking an already satisfied (resp. unsatisfied) clause as satisfied
        (resp. unsatisfied) is a no-op: the membership lookup guards the
        size bookkeeping.
    """

    def __init__(self,
        clause_ids: Iterable[ClauseId] = (),
    ):

        self._members: List[ClauseId] = []

        self._positions: Dict[ClauseId, int] = {}

        for clause_id in clause_ids:
            self.mark_unsatisfied(clause_id)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def mark_unsatisfied(self,
        clause_id: ClauseId,
    ) -> None:
        """Adds `clause_id` to the set, if it isn't in it already."""

        if clause_id in self._positions:
            return

        self._positions[clause_id] = len(self._members)
        self._members.append(clause_id)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def mark_satisfied(self,
        clause_id: ClauseId,
    ) -> None:
        """Removes `clause_id` from the set, if it is in it."""

        position = self._positions.pop(clause_id, None)
        if position is None:
            return

        last = self._members.pop()
        if position < len(self._members):
            self._members[position] = last
            self._positions[last] = position

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def pick_random(self,
        rng: random.Random,
    ) -> ClauseId:
        """
        Returns:
            A member of the set, chosen uniformly at random.

        Raises:
            IndexError: If the set is empty.
        """

        if not self._members:
            raise IndexError("Cannot pick a clause from an empty set.")

        return self._members[rng.randrange(len(self._members))]

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def is_empty(self) -> bool:
        return not self._members

    def clear(self) -> None:
        self._members.clear()
        self._positions.clear()

    def __contains__(self, clause_id: object) -> bool:
        return clause_id in self._positions

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[ClauseId]:
        return iter(tuple(self._members))

#################################################################################
# SOLVER STATE | DOC: OK
#################################################################################

class SolverState():
    """
    Encapsulates the mutable state of a run on a formula: the current
    assignment and the set of currently unsatisfied clauses.

    The set of unsatisfied clauses is the single authoritative record of the
    satisfaction status of clauses: a clause is satisfied iff it isn't in
    the set. Outside of `initialize_partition`, the set is never recomputed
    by a full scan but maintained incrementally by `flip_variables`.

    Note:
        A state must never be shared between concurrently running solvers.
        The formula, however, is only read and can be shared.
    """

    #############################################################################
    # INIT
    #############################################################################

    def __init__(self,
        formula: Formula,
        assignment: Assignment,
    ):

        if len(assignment) != formula.num_vars:
            raise ValueError(("The assignment has {0} variables, "
                              "but the formula has {1}.").format(len(assignment), formula.num_vars))

        self._formula: Formula = formula

        self._assignment: Assignment = assignment

        self._unsatisfied: UnsatisfiedClauses = UnsatisfiedClauses()

        self.initialize_partition()

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def initialize_partition(self) -> None:
        """
        (Re)computes the set of unsatisfied clauses with a full scan of the formula.
        """

        self._unsatisfied.clear()
        for clause_id in self._formula.unsatisfied_clause_ids(self._assignment.values):
            self._unsatisfied.mark_unsatisfied(clause_id)

    #############################################################################
    # QUERIES
    #############################################################################

    @property
    def formula(self) -> Formula:
        return self._formula

    @property
    def assignment(self) -> Assignment:
        return self._assignment

    @property
    def unsatisfied(self) -> UnsatisfiedClauses:
        return self._unsatisfied

    @property
    def num_unsatisfied(self) -> int:
        return len(self._unsatisfied)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def is_clause_satisfied(self,
        clause_id: ClauseId,
    ) -> bool:
        """
        Returns:
            The satisfaction status of the clause, as recorded by the state \
                (not re-evaluated).
        """
        return clause_id not in self._unsatisfied

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def find_inconsistencies(self) -> List[ClauseId]:
        """
        Returns:
            The IDs of the clauses whose recorded satisfaction status differs \
                from their actual one, found by a full scan. Empty when the \
                state is consistent.
        """

        values = self._assignment.values
        return [clause.clause_id for clause in self._formula.clauses
                if evaluate_clause(clause.literals, values) != self.is_clause_satisfied(clause.clause_id)]

    #############################################################################
    # FLIPS
    #############################################################################

    def flip_variables(self,
        vars_to_flip: Iterable[int],
    ) -> None:
        """
        Toggles the values of `vars_to_flip`, and re-evaluates every clause
        in which one of them occurs, updating the set of unsatisfied clauses
        on satisfaction status transitions.

        Note:
            The work done is proportional to the total length of the
            flipped variables' occurrence lists, not to the formula's size.
        """

        vars_to_flip = tuple(vars_to_flip)

        for var in vars_to_flip:
            self._assignment.flip(var)

        values = self._assignment.values
        formula = self._formula
        unsatisfied = self._unsatisfied
        checked = set()

        for var in vars_to_flip:
            for clause_id in formula._occurrences_list(var):

                if clause_id in checked:
                    continue
                checked.add(clause_id)

                was_satisfied = clause_id not in unsatisfied
                now_satisfied = evaluate_clause(formula.clause(clause_id).literals, values)

                if now_satisfied and not was_satisfied:
                    unsatisfied.mark_satisfied(clause_id)
                elif was_satisfied and not now_satisfied:
                    unsatisfied.mark_unsatisfied(clause_id)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def replace_assignment(self,
        assignment: Optional[Assignment],
        rng: random.Random,
    ) -> None:
        """
        Replaces the current assignment (by a random one if `assignment` is
        None) and recomputes the set of unsatisfied clauses.
        """

        if assignment is None:
            assignment = Assignment.random(self._formula.num_vars, rng)
        elif len(assignment) != self._formula.num_vars:
            raise ValueError(("The assignment has {0} variables, "
                              "but the formula has {1}.").format(len(assignment), self._formula.num_vars))

        self._assignment = assignment
        self.initialize_partition()

#################################################################################
