"""
This module defines the (immutable) configuration of the solver.
"""

from __future__ import annotations

#################################################################################

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from flipwalk.solver.common import (BreakCountScope, InvalidConfigurationError,
                                    SamplingStrategy, WeightingFamily)

E = TypeVar('E', bound=Enum)

#################################################################################
# DOC: OK
#################################################################################

def _as_enum(
    enum_type: Type[E],
    value: Any,
    parameter: str,
) -> E:

    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        raise InvalidConfigurationError("Unknown {0}: {1!r} (expected one of {2}).".format(
            parameter, value, ", ".join(repr(e.value) for e in enum_type))) from None

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

@dataclass(frozen=True)
class SolverConfig:
    """
    The parameters of a run.

    Raises:
        InvalidConfigurationError: On construction, if a parameter is invalid.
    """
    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    step_budget: int
    """The maximum number of steps (flips) of a run."""

    temperature: float = 1.0
    """
    The penalty coefficient (beta) applied to break counts by the weighting
    family. Ignored by the uniform family and the uniform-repair strategy.
    """

    weighting: WeightingFamily = WeightingFamily.EXPONENTIAL

    seed: Optional[int] = None
    """The seed of the solver's random generator. None for a nondeterministic seed."""

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    strategy: SamplingStrategy = SamplingStrategy.BREAK_WEIGHTED

    power_law_offset: float = 0.9
    """The offset `c0` of the power-law weighting `(c0 + b) ** -beta`."""

    break_scope: BreakCountScope = BreakCountScope.SATISFIED

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    report_interval: int = 100000
    """The number of steps between two progress log lines. 0 to disable them."""

    verify_on_satisfied: bool = True
    """
    Whether to check the assignment against the whole formula when the set
    of unsatisfied clauses becomes empty.
    """

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def __post_init__(self):

        # frozen dataclass: enum coercion has to go through object.__setattr__
        object.__setattr__(self, "weighting", _as_enum(WeightingFamily, self.weighting, "weighting family"))
        object.__setattr__(self, "strategy", _as_enum(SamplingStrategy, self.strategy, "sampling strategy"))
        object.__setattr__(self, "break_scope", _as_enum(BreakCountScope, self.break_scope, "break count scope"))

        if isinstance(self.step_budget, bool) or not isinstance(self.step_budget, int) or self.step_budget <= 0:
            raise InvalidConfigurationError("The step budget must be a positive integer, got {0!r}.".format(self.step_budget))

        if not _is_positive_real(self.temperature):
            raise InvalidConfigurationError("The temperature must be a positive real, got {0!r}.".format(self.temperature))

        if not _is_positive_real(self.power_law_offset):
            raise InvalidConfigurationError("The power-law offset must be a positive real, got {0!r}.".format(self.power_law_offset))

        if isinstance(self.report_interval, bool) or not isinstance(self.report_interval, int) or self.report_interval < 0:
            raise InvalidConfigurationError("The report interval must be a non negative integer, got {0!r}.".format(self.report_interval))

        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise InvalidConfigurationError("The seed must be an integer or None, got {0!r}.".format(self.seed))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    @classmethod
    def from_mapping(cls,
        mapping: Mapping[str, Any],
    ) -> SolverConfig:
        """
        Builds a configuration from plain values, as produced by a configuration
        loader (enumerations are given by their string value, e.g. `"power-law"`).

        Raises:
            InvalidConfigurationError: If a key is unknown, `step_budget` is \
                missing, or a value is invalid.
        """

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise InvalidConfigurationError("Unknown configuration keys: {0}.".format(", ".join(unknown)))

        if "step_budget" not in mapping:
            raise InvalidConfigurationError("Missing configuration key: step_budget.")

        return cls(**mapping)

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

def _is_positive_real(
    value: Any,
) -> bool:
    return (not isinstance(value, bool)
            and isinstance(value, (int, float))
            and math.isfinite(value)
            and value > 0)

#################################################################################
