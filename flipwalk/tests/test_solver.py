from __future__ import annotations

#################################################################################

import random
import unittest

from flipwalk.solver.common import (InconsistentStateWarning, InvalidConfigurationError,
                                    SamplingStrategy, SearchStatus, WeightingFamily,
                                    BreakCountScope)
from flipwalk.solver.config import SolverConfig
from flipwalk.solver.formula import Formula, build_formula
from flipwalk.solver.search import run_search, solve
from flipwalk.solver.solver import Solver
from flipwalk.solver.solver_state import Assignment

#################################################################################

def random_three_sat(
    seed: int,
    num_vars: int,
    num_clauses: int,
) -> Formula:

    rng = random.Random(seed)
    clauses = []
    for _ in range(num_clauses):
        clause_vars = rng.sample(range(1, num_vars + 1), 3)
        clauses.append([v if rng.random() < 0.5 else -v for v in clause_vars])
    return build_formula(clauses, num_vars=num_vars)

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

def planted_three_sat(
    seed: int,
    num_vars: int,
    num_clauses: int,
) -> Formula:
    """Random 3-SAT formula, keeping only clauses satisfied by a hidden assignment."""

    rng = random.Random(seed)
    hidden = [False] + [rng.random() < 0.5 for _ in range(num_vars)]
    clauses = []
    while len(clauses) < num_clauses:
        clause_vars = rng.sample(range(1, num_vars + 1), 3)
        clause = [v if rng.random() < 0.5 else -v for v in clause_vars]
        if any(hidden[abs(lit)] == (lit > 0) for lit in clause):
            clauses.append(clause)
    return build_formula(clauses, num_vars=num_vars)

#################################################################################

class TestSolverConfig(unittest.TestCase):

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_defaults(self):

        config = SolverConfig(step_budget=10)

        self.assertEqual(config.temperature, 1.0)
        self.assertIs(config.weighting, WeightingFamily.EXPONENTIAL)
        self.assertIs(config.strategy, SamplingStrategy.BREAK_WEIGHTED)
        self.assertIs(config.break_scope, BreakCountScope.SATISFIED)
        self.assertEqual(config.power_law_offset, 0.9)
        self.assertIsNone(config.seed)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_invalid_parameters(self):

        invalid = [
            dict(step_budget=0),
            dict(step_budget=-3),
            dict(step_budget=2.5),
            dict(step_budget=True),
            dict(step_budget=10, temperature=0.0),
            dict(step_budget=10, temperature=-1.0),
            dict(step_budget=10, temperature=float("nan")),
            dict(step_budget=10, temperature=float("inf")),
            dict(step_budget=10, weighting="gaussian"),
            dict(step_budget=10, strategy="tabu"),
            dict(step_budget=10, break_scope="some"),
            dict(step_budget=10, power_law_offset=0),
            dict(step_budget=10, report_interval=-1),
            dict(step_budget=10, seed="42"),
        ]

        for kwargs in invalid:
            with self.subTest(**{k: repr(v) for k, v in kwargs.items()}):
                with self.assertRaises(InvalidConfigurationError):
                    SolverConfig(**kwargs)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_from_mapping(self):

        config = SolverConfig.from_mapping({"step_budget": 100,
                                            "temperature": 2.5,
                                            "weighting": "power-law",
                                            "strategy": "single-flip",
                                            "break_scope": "all",
                                            "seed": 4})

        self.assertEqual(config.step_budget, 100)
        self.assertEqual(config.temperature, 2.5)
        self.assertIs(config.weighting, WeightingFamily.POWER_LAW)
        self.assertIs(config.strategy, SamplingStrategy.SINGLE_FLIP)
        self.assertIs(config.break_scope, BreakCountScope.ALL)
        self.assertEqual(config.seed, 4)

        with self.assertRaises(InvalidConfigurationError):
            SolverConfig.from_mapping({"step_budget": 100, "beta": 2.0})

        with self.assertRaises(InvalidConfigurationError):
            SolverConfig.from_mapping({"temperature": 2.0})

#################################################################################

class TestSearchLoop(unittest.TestCase):

    STRATEGIES = tuple(SamplingStrategy)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_unit_clause_is_satisfied_within_one_step(self):

        formula = build_formula([[1]])

        for strategy in self.STRATEGIES:
            for initial_value in (False, True):
                with self.subTest(strategy=strategy, initial_value=initial_value):
                    result = solve(formula,
                                   SolverConfig(step_budget=10, strategy=strategy, seed=0),
                                   initial_assignment=[initial_value])

                    self.assertIs(result.status, SearchStatus.SATISFIED)
                    self.assertTrue(result.is_satisfied)
                    self.assertEqual(result.steps_taken, 0 if initial_value else 1)
                    self.assertEqual(result.final_assignment, (True,))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_budget_is_honored_on_unsatisfiable_formula(self):

        formula = build_formula([[1], [-1]])

        for strategy in self.STRATEGIES:
            for budget in (1, 7, 50):
                with self.subTest(strategy=strategy, budget=budget):
                    result = solve(formula, SolverConfig(step_budget=budget, strategy=strategy, seed=1))

                    self.assertIs(result.status, SearchStatus.EXHAUSTED_BUDGET)
                    self.assertFalse(result.is_satisfied)
                    self.assertEqual(result.steps_taken, budget)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_small_scenario_is_deterministic(self):

        formula = build_formula([[1, 2], [-1, 2], [1, -2]])

        for strategy in self.STRATEGIES:
            with self.subTest(strategy=strategy):
                config = SolverConfig(step_budget=1000, strategy=strategy, seed=2024)

                result_1 = solve(formula, config)
                result_2 = solve(formula, config)

                self.assertIs(result_1.status, SearchStatus.SATISFIED)
                self.assertEqual(result_1.final_assignment, (True, True))
                self.assertEqual(result_1.model(), [1, 2])
                self.assertTrue(all(formula.evaluate_clause(i, [False, *result_1.final_assignment])
                                    for i in range(formula.num_clauses)))

                self.assertEqual(result_1.steps_taken, result_2.steps_taken)
                self.assertEqual(result_1.final_assignment, result_2.final_assignment)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_satisfaction_invariant_after_steps(self):

        # above the 3-SAT threshold: most runs keep going for a while
        formula = random_three_sat(seed=9, num_vars=30, num_clauses=150)

        for strategy in self.STRATEGIES:
            for num_steps in (1, 10, 100, 500):
                with self.subTest(strategy=strategy, num_steps=num_steps):
                    solver = Solver(formula, SolverConfig(step_budget=10000, strategy=strategy, seed=num_steps))

                    for _ in range(num_steps):
                        solver.step()

                    values = solver.state.assignment.values
                    for clause in formula.clauses:
                        self.assertEqual(clause.clause_id in solver.state.unsatisfied,
                                         not formula.evaluate_clause(clause.clause_id, values))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_satisfiable_random_formula_is_solved(self):

        formula = planted_three_sat(seed=3, num_vars=40, num_clauses=100)

        for strategy in self.STRATEGIES:
            for weighting in WeightingFamily:
                with self.subTest(strategy=strategy, weighting=weighting):
                    result = solve(formula, SolverConfig(step_budget=50000,
                                                         temperature=2.0,
                                                         weighting=weighting,
                                                         strategy=strategy,
                                                         seed=5))

                    self.assertIs(result.status, SearchStatus.SATISFIED)
                    self.assertLess(result.steps_taken, 50000)
                    self.assertTrue(formula.is_satisfied_by([False, *result.final_assignment]))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_large_temperature(self):

        formula = build_formula([[1, 2], [-1, 2], [1, -2]])

        for strategy in (SamplingStrategy.BREAK_WEIGHTED, SamplingStrategy.SINGLE_FLIP):
            for weighting in (WeightingFamily.EXPONENTIAL, WeightingFamily.POWER_LAW):
                with self.subTest(strategy=strategy, weighting=weighting):
                    result = solve(formula, SolverConfig(step_budget=100,
                                                         temperature=8000.0,
                                                         weighting=weighting,
                                                         strategy=strategy,
                                                         seed=0))

                    self.assertIs(result.status, SearchStatus.SATISFIED)
                    self.assertEqual(result.final_assignment, (True, True))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_terminal_states_are_sticky(self):

        solver = Solver(build_formula([[1], [-1]]), SolverConfig(step_budget=3, seed=0))

        for _ in range(3):
            solver.step()

        self.assertIs(solver.status, SearchStatus.EXHAUSTED_BUDGET)
        self.assertTrue(solver.status.is_terminal)

        self.assertIs(solver.step(), SearchStatus.EXHAUSTED_BUDGET)
        self.assertEqual(solver.num_steps, 3)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_last_step_satisfying_formula(self):

        solver = Solver(build_formula([[1]]),
                        SolverConfig(step_budget=1, seed=0),
                        Assignment([False]))

        self.assertIs(solver.step(), SearchStatus.SATISFIED)
        self.assertEqual(solver.num_steps, 1)

#################################################################################

class TestSolverLifecycle(unittest.TestCase):

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_reset(self):

        formula = build_formula([[1, 2], [-1, 2], [1, -2]])
        solver = Solver(formula, SolverConfig(step_budget=1000, seed=8))

        first = run_search(solver)
        self.assertTrue(first.is_satisfied)

        solver.reset(Assignment([False, False]))

        self.assertIs(solver.status, SearchStatus.RUNNING)
        self.assertEqual(solver.num_steps, 0)
        self.assertEqual(set(solver.state.unsatisfied), {0})
        self.assertEqual(solver.statistics.min_num_unsatisfied, 1)

        second = run_search(solver)
        self.assertTrue(second.is_satisfied)
        self.assertGreaterEqual(second.steps_taken, 1)

        solver.reset()
        self.assertIs(solver.status, SearchStatus.RUNNING)
        self.assertEqual(solver.state.find_inconsistencies(), [])

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_initial_assignment_size_must_match(self):

        formula = build_formula([[1, 2]])

        with self.assertRaises(ValueError):
            solve(formula, SolverConfig(step_budget=10), initial_assignment=[True])

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_inconsistent_state_is_reported(self):

        formula = build_formula([[1], [2]])
        solver = Solver(formula, SolverConfig(step_budget=10, seed=0), Assignment([False, False]))

        solver.state.unsatisfied.clear()

        with self.assertLogs("flipwalk.solver.solver", level="ERROR"):
            with self.assertRaises(InconsistentStateWarning):
                solver.step()

        unchecked = Solver(formula,
                           SolverConfig(step_budget=10, seed=0, verify_on_satisfied=False),
                           Assignment([False, False]))
        unchecked.state.unsatisfied.clear()

        self.assertIs(unchecked.step(), SearchStatus.SATISFIED)

#################################################################################

class TestInstrumentation(unittest.TestCase):

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_statistics(self):

        formula = random_three_sat(seed=1, num_vars=20, num_clauses=100)

        for strategy in SamplingStrategy:
            with self.subTest(strategy=strategy):
                result = solve(formula, SolverConfig(step_budget=300, strategy=strategy, seed=3))

                histogram = result.statistics.flip_size_histogram
                self.assertEqual(sum(histogram.values()), result.steps_taken)
                self.assertTrue(set(histogram) <= {1, 2, 3})

                if strategy is SamplingStrategy.SINGLE_FLIP:
                    self.assertEqual(set(histogram), {1})

                self.assertLessEqual(result.statistics.min_num_unsatisfied,
                                     len(formula.unsatisfied_clause_ids([False, *result.final_assignment])))

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_on_step_callback(self):

        formula = build_formula([[1], [-1]])
        seen = []

        result = solve(formula, SolverConfig(step_budget=25, seed=0),
                       on_step=lambda solver: seen.append(solver.num_steps))

        self.assertEqual(seen, list(range(1, 26)))
        self.assertEqual(result.steps_taken, 25)

    # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

    def test_progress_is_logged(self):

        formula = build_formula([[1], [-1]])

        with self.assertLogs("flipwalk.solver.search", level="INFO") as logs:
            solve(formula, SolverConfig(step_budget=30, seed=0, report_interval=10))

        progress = [line for line in logs.output if "Steps:" in line]
        self.assertEqual(len(progress), 3)
        self.assertIn("Steps: 10 ", progress[0])
        self.assertIn("budget exhausted after 30 steps", logs.output[-1])

#################################################################################
