"""
This module defines the basic, fundamental building blocks used in the project:
variables and literals of propositional (CNF) formulas.
"""

from __future__ import annotations

#################################################################################
# FILE CONTENTS:
# - VARIABLES
# - LITERALS
#################################################################################

from typing import Iterable, Tuple

#################################################################################
# DOC: OK
#################################################################################

class Var(int):
    """
    Represents a (boolean) variable, identified by a strictly positive integer.

    Variables are numbered from 1 to N, N being the number of variables of
    the formula they appear in.
    """
    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @property
    def pos(self) -> Lit:
        """The positive (unnegated) literal on this variable."""
        return Lit(int(self))

    @property
    def neg(self) -> Lit:
        """The negative (negated) literal on this variable."""
        return Lit(-int(self))

#################################################################################
# DOC: OK
#################################################################################

class Lit(int):
    """
    Represents a literal, i.e. a variable or its negation, as a signed integer.

    The magnitude of the integer identifies the variable, and its sign the
    polarity: `Lit(3)` stands for `x3` and `Lit(-3)` for `!x3`.

    Note:
        Since `Lit` is an `int`, plain integers can be used wherever a literal
        is expected in performance sensitive code. Arithmetic on literals
        returns plain integers.
    """
    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @property
    def var(self) -> Var:
        """The `Lit`'s variable."""
        return Var(abs(int(self)))

    @property
    def is_positive(self) -> bool:
        """Whether the `Lit` is unnegated."""
        return self > 0

    @property
    def neg(self) -> Lit:
        """The `Lit`'s negation (i.e. negated `Lit`)."""
        return Lit(-int(self))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @classmethod
    def pos(cls,
        var: int,
    ) -> Lit:
        """Syntactic sugar for `Lit(var)`."""
        return Lit(var)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @classmethod
    def negative(cls,
        var: int,
    ) -> Lit:
        """Syntactic sugar for `Lit(-var)`."""
        return Lit(-var)

#################################################################################
# DOC: OK
#################################################################################

def distinct_vars_of(
    literals: Iterable[int],
) -> Tuple[Var,...]:
    """
    Returns:
        The distinct variables of `literals`, in order of first appearance.
    """

    seen = set()
    res = []

    for lit in literals:
        var = abs(lit)
        if var not in seen:
            seen.add(var)
            res.append(Var(var))

    return tuple(res)

#################################################################################
