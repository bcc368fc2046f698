"""
This module computes break counts: for a targeted clause `c` and a
combination of its variables to flip, the number of other clauses that are
currently satisfied and would become unsatisfied if the combination was
applied.

Rather than re-scanning neighbour clauses for each of the `2^k - 1`
combinations of a `k`-wide clause, each neighbour clause `d` is summarised
once, relative to `c`'s distinct variables `v_0, ..., v_{k-1}`, by two bitmasks:
- `kill`: the bits `i` such that `d` contains the currently true literal on `v_i`.
Flipping `v_i` falsifies that literal.
- `save`: the bits `i` such that `d` contains the currently false literal on `v_i`.
Flipping `v_i` makes that literal true.

A neighbour which has a true literal on a variable outside of `c` never breaks.
Otherwise, it breaks under combination `t` iff `kill` is a subset of `t` and
`save` doesn't intersect `t`. Neighbours with the same masks are aggregated,
so the final count only iterates over distinct `(kill, save)` pairs.
"""

from __future__ import annotations

#################################################################################
# FILE CONTENTS:
# - NEIGHBOUR PROFILES
# - BREAK COUNTS OF ALL COMBINATIONS
# - BREAK COUNTS OF SINGLE FLIPS
#################################################################################

from typing import Dict, List, NamedTuple, Sequence, Tuple

from flipwalk.fundamentals import Var
from flipwalk.solver.common import BreakCountScope
from flipwalk.solver.solver_state import SolverState

#################################################################################
# NEIGHBOUR PROFILES | DOC: OK
#################################################################################

class NeighbourProfile(NamedTuple):
    """Summarises how a neighbour clause reacts to flips of the targeted clause's variables."""

    kill: int
    """Bits of the variables whose flip falsifies one of the neighbour's true literals."""

    save: int
    """Bits of the variables whose flip makes one of the neighbour's false literals true."""

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

def collect_neighbour_profiles(
    clause_vars: Sequence[Var],
    state: SolverState,
    scope: BreakCountScope,
) -> Dict[NeighbourProfile, int]:
    """
    Args:
        clause_vars: The distinct variables of the targeted clause. Bit `i` \
            of the masks stands for `clause_vars[i]`.

        state: The current solver state (not modified).

        scope: Whether to skip neighbours not currently marked as satisfied.

    Returns:
        The number of breakable neighbour clauses for each distinct profile.

    Note:
        Neighbours are found through the signed occurrence lists of the
        currently true literals on `clause_vars`. Since they contain a true
        literal, they are necessarily satisfied when the state is consistent:
        both scopes then yield the same profiles.
    """

    formula = state.formula
    values = state.assignment.values
    only_satisfied = scope is BreakCountScope.SATISFIED

    bit_of_var: Dict[int, int] = { int(var): 1 << i for i, var in enumerate(clause_vars) }

    profiles: Dict[NeighbourProfile, int] = {}
    seen = set()

    for var in clause_vars:
        true_literal = var if values[var] else -var

        for clause_id in formula._signed_occurrences_list(true_literal):

            if clause_id in seen:
                continue
            seen.add(clause_id)

            if only_satisfied and not state.is_clause_satisfied(clause_id):
                continue

            kill = 0
            save = 0
            supported_outside = False

            for u in formula.clause(clause_id).literals:
                u_var = u if u > 0 else -u
                u_is_true = values[u_var] if u > 0 else not values[u_var]
                bit = bit_of_var.get(u_var)

                if bit is None:
                    if u_is_true:
                        supported_outside = True
                        break
                elif u_is_true:
                    kill |= bit
                else:
                    save |= bit

            if supported_outside:
                continue

            profile = NeighbourProfile(kill, save)
            profiles[profile] = profiles.get(profile, 0) + 1

    return profiles

#################################################################################
# BREAK COUNTS OF ALL COMBINATIONS | DOC: OK
#################################################################################

def _combinations_breaking(
    profile: NeighbourProfile,
    full: int,
) -> List[int]:
    """
    Returns:
        All combinations (submasks of `full`) under which a neighbour with \
            the given profile breaks, i.e. all `kill | s` where `s` ranges \
            over the submasks of the bits in neither `kill` nor `save`.
    """

    if profile.kill & profile.save:
        return []

    free = full & ~(profile.kill | profile.save)
    res = []

    sub = free
    while True:
        res.append(profile.kill | sub)
        if sub == 0:
            break
        sub = (sub - 1) & free

    return res

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

_THREE_WIDE_BREAKING: Tuple[Tuple[Tuple[int,...],...],...] = tuple(
    tuple(tuple(_combinations_breaking(NeighbourProfile(kill, save), 0b111))
          for save in range(8))
    for kill in range(8)
)
"""
Precomputed `_combinations_breaking` for width 3, indexed by `[kill][save]`.
"""

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

def break_counts_of_combinations(
    width: int,
    profiles: Dict[NeighbourProfile, int],
) -> List[int]:
    """
    Returns:
        A list `b` of length `2^width`, where `b[t]` is the number of \
            neighbours that break under combination `t`. `b[0]` is always 0.
    """

    if width == 3:
        return _break_counts_of_three_wide_combinations(profiles)

    full = (1 << width) - 1
    counts = [0] * (full + 1)

    for profile, num in profiles.items():
        for combination in _combinations_breaking(profile, full):
            counts[combination] += num

    return counts

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

def _break_counts_of_three_wide_combinations(
    profiles: Dict[NeighbourProfile, int],
) -> List[int]:
    """Same as `break_counts_of_combinations`, for width 3, by table lookup."""

    counts = [0] * 8

    for (kill, save), num in profiles.items():
        for combination in _THREE_WIDE_BREAKING[kill][save]:
            counts[combination] += num

    return counts

#################################################################################
# BREAK COUNTS OF SINGLE FLIPS | DOC: OK
#################################################################################

def break_counts_of_single_flips(
    width: int,
    profiles: Dict[NeighbourProfile, int],
) -> List[int]:
    """
    Returns:
        A list `b` of length `width`, where `b[i]` is the number of \
            neighbours that break when only the `i`-th variable is flipped.
    """

    counts = [0] * width

    for (kill, save), num in profiles.items():
        # only neighbours with a single killing variable can break on a single flip
        if kill and kill & (kill - 1) == 0 and not kill & save:
            counts[kill.bit_length() - 1] += num

    return counts

#################################################################################
