#!/usr/bin/env python3
"""
Test suite for the DPLL SAT solver
"""

import unittest

from dpll_sat import (CONFLICTED, SATISFIED, UNDECIDED, Clause, DPLLSolver, Formula,
                      Literal, check_decided, choose_branch_literal, extract_assignment,
                      pure_literal_eliminate, pure_literals, solve_sat, unit_propagate)
from examples import coloring_clauses, pigeonhole_clauses
from sat_exceptions import InternalInvariantError, SolverTimeoutError


class TestDataModel(unittest.TestCase):
    """Tests for Literal, Clause and Formula."""

    def test_literal_equality_and_complement(self):
        self.assertEqual(Literal(3, True), Literal.from_int(3))
        self.assertNotEqual(Literal(3, True), Literal(3, False))
        self.assertTrue(Literal(3, True).is_complement(Literal(3, False)))
        self.assertFalse(Literal(3, True).is_complement(Literal(4, False)))
        self.assertEqual(int(Literal.from_int(-7)), -7)
        self.assertEqual(-Literal(2), Literal(2, False))

    def test_literal_set_queries(self):
        lits = {Literal(1), Literal(2, False)}
        self.assertTrue(Literal(1).matches_any(lits))
        self.assertFalse(Literal(2).matches_any(lits))
        self.assertTrue(Literal(2).complements_any(lits))
        self.assertFalse(Literal(1).complements_any(lits))

    def test_literal_rejects_zero(self):
        with self.assertRaises(ValueError):
            Literal(0)

    def test_clause_collapses_duplicates(self):
        clause = Clause.of(1, 1, -2)
        self.assertEqual(len(clause), 2)
        self.assertEqual(clause.variables(), {1, 2})

    def test_tautology_is_an_ordinary_clause(self):
        clause = Clause.of(1, -1)
        self.assertEqual(len(clause), 2)
        self.assertFalse(clause.is_unit)

    def test_unit_and_empty(self):
        self.assertTrue(Clause.of(4).is_unit)
        self.assertEqual(Clause.of(-4).unit_literal, Literal(4, False))
        self.assertTrue(Clause().is_empty)
        with self.assertRaises(InternalInvariantError):
            Clause.of(1, 2).unit_literal

    def test_formula_keeps_duplicates_and_order(self):
        formula = Formula.from_ints([[1, 2], [-3], [1, 2]])
        self.assertEqual(len(formula), 3)
        self.assertEqual(formula.to_ints(), [[1, 2], [-3], [1, 2]])

    def test_conjoin_shares_clauses(self):
        base = Formula.from_ints([[1, 2], [-2, 3]])
        extended = base.conjoin(Clause.of(1))
        self.assertEqual(len(base), 2)
        self.assertEqual(len(extended), 3)
        self.assertEqual(extended.to_ints(), [[1, 2], [-2, 3], [1]])
        for old, new in zip(base, extended):
            self.assertIs(old, new)

    def test_variables_and_literals(self):
        formula = Formula.from_ints([[1, -2], [2, 3]])
        self.assertEqual(formula.variables(), {1, 2, 3})
        self.assertEqual(formula.literals(),
                         {Literal(1), Literal(2, False), Literal(2), Literal(3)})

    def test_is_satisfied_by(self):
        formula = Formula.from_ints([[1, 2], [-1, 3], [-2, -3]])
        self.assertTrue(formula.is_satisfied_by({1: True, 2: False, 3: True}))
        self.assertFalse(formula.is_satisfied_by({1: False, 2: False}))


class TestUnitPropagation(unittest.TestCase):

    def test_drops_satisfied_and_shrinks_falsified(self):
        formula = Formula.from_ints([[1], [-1, 2, 3], [4, 5]])
        self.assertEqual(unit_propagate(formula).to_ints(), [[1], [2, 3], [4, 5]])

    def test_single_pass_keeps_new_units_for_next_call(self):
        formula = Formula.from_ints([[1], [-1, 2], [-2, 3, 4]])
        self.assertEqual(unit_propagate(formula).to_ints(), [[1], [2], [-2, 3, 4]])

    def test_fixpoint(self):
        formula = Formula.from_ints([[1], [-1, 2], [-2, 3, 4]])
        self.assertEqual(unit_propagate(formula, fixpoint=True).to_ints(),
                         [[1], [2], [3, 4]])

    def test_fixpoint_follows_chain(self):
        formula = Formula.from_ints([[1], [-1, 2], [-2, 3], [-3, 4, 5]])
        self.assertEqual(unit_propagate(formula, fixpoint=True).to_ints(),
                         [[1], [2], [3], [4, 5]])

    def test_fixpoint_drops_satisfied_clauses(self):
        formula = Formula.from_ints([[1], [-1, 2], [2, 3, 4], [-2, 5]])
        self.assertEqual(unit_propagate(formula, fixpoint=True).to_ints(),
                         [[1], [2], [5]])

    def test_conflict_produces_empty_clause(self):
        result = unit_propagate(Formula.from_ints([[1], [2], [-1, -2]]))
        self.assertEqual(result.to_ints(), [[1], [2], []])
        self.assertTrue(result.has_empty_clause())

    def test_contradictory_units_are_kept(self):
        formula = Formula.from_ints([[1], [1, 2], [-1, 2, 3], [-1]])
        self.assertEqual(unit_propagate(formula).to_ints(), [[1], [-1]])

    def test_input_not_mutated(self):
        formula = Formula.from_ints([[1], [-1, 2]])
        unit_propagate(formula)
        self.assertEqual(formula.to_ints(), [[1], [-1, 2]])


class TestPureLiteralElimination(unittest.TestCase):

    def test_pure_literals(self):
        formula = Formula.from_ints([[1, 2], [1, -2], [-2, -3]])
        self.assertEqual(pure_literals(formula), [Literal(1), Literal(3, False)])

    def test_drops_clauses_and_appends_units(self):
        formula = Formula.from_ints([[1, 2], [1, -2], [-2, 3]])
        self.assertEqual(pure_literal_eliminate(formula).to_ints(), [[1], [3]])

    def test_mixed_variables_untouched(self):
        formula = Formula.from_ints([[1, -2], [-1, 2]])
        self.assertEqual(pure_literal_eliminate(formula).to_ints(), [[1, -2], [-1, 2]])


class TestBranchSelection(unittest.TestCase):

    def test_smallest_literal_of_multi_literal_clause(self):
        formula = Formula.from_ints([[3, -2], [2, 4]])
        self.assertEqual(choose_branch_literal(formula.literals(), formula), Literal(2))

    def test_candidate_must_occur_in_original_literals(self):
        original = Formula.from_ints([[1, 2]]).literals()
        formula = Formula.from_ints([[-1, -2], [3]])
        self.assertEqual(choose_branch_literal(original, formula), Literal(1))

    def test_falls_back_to_unpinned_variable(self):
        original = Formula.from_ints([[1, 2, -3]]).literals()
        formula = Formula.from_ints([[2]])
        self.assertEqual(choose_branch_literal(original, formula), Literal(1))

    def test_no_candidate_is_a_defect(self):
        formula = Formula.from_ints([[1]])
        with self.assertRaises(InternalInvariantError):
            choose_branch_literal(formula.literals(), formula)


class TestDecisionCheck(unittest.TestCase):

    def test_states(self):
        self.assertEqual(check_decided({1, 2}, Formula.from_ints([[1], [-2]])), SATISFIED)
        self.assertEqual(check_decided({1}, Formula.from_ints([[1], [-1]])), CONFLICTED)
        self.assertEqual(check_decided({1, 2}, Formula.from_ints([[1]])), UNDECIDED)
        self.assertEqual(check_decided({1, 2}, Formula.from_ints([[1], [1, 2]])), UNDECIDED)


class TestExtraction(unittest.TestCase):

    def test_reads_units_in_id_order(self):
        formula = Formula.from_ints([[3], [-1], [2]])
        assignment = extract_assignment(formula)
        self.assertEqual(assignment, {1: False, 2: True, 3: True})
        self.assertEqual(list(assignment), [1, 2, 3])

    def test_idempotent(self):
        formula = Formula.from_ints([[2], [-5], [1]])
        self.assertEqual(extract_assignment(formula), extract_assignment(formula))

    def test_rejects_undecided_formula(self):
        with self.assertRaises(InternalInvariantError):
            extract_assignment(Formula.from_ints([[1, 2]]))
        with self.assertRaises(InternalInvariantError):
            extract_assignment(Formula.from_ints([[1], [-1]]))


class TestSATSolver(unittest.TestCase):
    """Tests for SAT solver functionality."""

    def assertSatisfies(self, clauses, result):
        self.assertIsNotNone(result)
        self.assertTrue(Formula.from_ints(clauses).is_satisfied_by(result))
        self.assertEqual(set(result), {abs(lit) for clause in clauses for lit in clause})

    def test_empty_formula(self):
        self.assertEqual(solve_sat([]), {})

    def test_empty_clause_is_unsat(self):
        self.assertIsNone(solve_sat([[1, 2], [], [3]]))

    def test_unit_clause_forcing(self):
        self.assertEqual(solve_sat([[1]]), {1: True})

    def test_contradictory_units(self):
        self.assertIsNone(solve_sat([[1], [-1]]))

    def test_all_sign_combinations_of_two_variables(self):
        self.assertIsNone(solve_sat([[1, 2], [-1, 2], [1, -2], [-1, -2]]))

    def test_implication(self):
        self.assertEqual(solve_sat([[1], [-1, 2]]), {1: True, 2: True})

    def test_unit_propagation_chain(self):
        self.assertEqual(solve_sat([[1], [-1, 2], [-2, 3]]), {1: True, 2: True, 3: True})

    def test_variable_dropped_by_simplification_is_still_assigned(self):
        self.assertEqual(solve_sat([[1, 2], [1, -2]]), {1: True, 2: True})

    def test_tautology(self):
        self.assertEqual(solve_sat([[1, -1]]), {1: True})

    def test_pure_literal(self):
        clauses = [[1, 2], [1, -2, 3], [-3, -2], [2, 3]]
        result = solve_sat(clauses)
        self.assertSatisfies(clauses, result)
        self.assertTrue(result[1])

    def test_simple_sat(self):
        clauses = [[1, 2], [-1, 3], [-2, -3]]
        self.assertSatisfies(clauses, solve_sat(clauses))

    def test_simple_unsat(self):
        self.assertIsNone(solve_sat([[1, 2], [-1], [-2]]))

    def test_larger_sat(self):
        clauses = [[1, 2, 3], [-1, -2], [-1, -3], [-2, -3]]
        self.assertSatisfies(clauses, solve_sat(clauses))

    def test_triangle_coloring(self):
        clauses = coloring_clauses(3, [(1, 2), (1, 3), (2, 3)])
        self.assertSatisfies(clauses, solve_sat(clauses))

    def test_pigeonhole_3_2(self):
        self.assertIsNone(solve_sat(pigeonhole_clauses(3, 2)))

    def test_pigeonhole_4_3(self):
        self.assertIsNone(solve_sat(pigeonhole_clauses(4, 3)))

    def test_fixpoint_mode_agrees(self):
        for clauses in ([[1], [-1, 2], [-2, 3, 4], [-4]],
                        [[1, 2], [-1, 2], [1, -2], [-1, -2]],
                        coloring_clauses(3, [(1, 2), (2, 3)])):
            plain = solve_sat(clauses)
            strong = solve_sat(clauses, fixpoint=True)
            self.assertEqual(plain is None, strong is None)
            if strong is not None:
                self.assertSatisfies(clauses, strong)

    def test_deterministic(self):
        clauses = coloring_clauses(4, [(1, 2), (2, 3), (3, 4), (4, 1)])
        self.assertEqual(solve_sat(clauses), solve_sat(clauses))


class TestSearchControl(unittest.TestCase):

    def test_stats(self):
        solver = DPLLSolver(Formula.from_ints([[1, 2], [-1, 2], [1, -2], [-1, -2]]))
        self.assertIsNone(solver.solve())
        self.assertEqual(solver.stats.decisions, 1)
        self.assertEqual(solver.stats.conflicts, 2)
        self.assertEqual(solver.stats.calls, 3)
        self.assertEqual(solver.stats.max_depth, 1)

    def test_cancellation(self):
        solver = DPLLSolver(Formula.from_ints(pigeonhole_clauses(4, 3)),
                            should_stop=lambda: True)
        with self.assertRaises(SolverTimeoutError) as ctx:
            solver.solve()
        self.assertEqual(ctx.exception.calls, 0)

    def test_cancellation_mid_search(self):
        polls = []

        def should_stop():
            polls.append(None)
            return len(polls) > 3

        solver = DPLLSolver(Formula.from_ints(pigeonhole_clauses(4, 3)),
                            should_stop=should_stop)
        with self.assertRaises(SolverTimeoutError) as ctx:
            solver.solve()
        self.assertEqual(ctx.exception.calls, 3)

    def test_deadline_expires(self):
        solver = DPLLSolver(Formula.from_ints(pigeonhole_clauses(7, 6)), timeout=1e-9)
        with self.assertRaises(SolverTimeoutError) as ctx:
            solver.solve()
        self.assertIn("time limit", str(ctx.exception))
        self.assertGreater(ctx.exception.time_spent, 0)

    def test_without_verification(self):
        clauses = coloring_clauses(3, [(1, 2), (1, 3), (2, 3)])
        solver = DPLLSolver(Formula.from_ints(clauses), verify=False)
        self.assertFalse(solver.verify)
        self.assertEqual(solver.solve(), solve_sat(clauses))

    def test_generous_timeout(self):
        solver = DPLLSolver(Formula.from_ints([[1], [-1, 2]]), timeout=60)
        self.assertEqual(solver.solve(), {1: True, 2: True})

    def test_debug_trace(self):
        with self.assertLogs('dpll_sat', level='DEBUG') as logs:
            solve_sat([[1, 2], [-1, -2]])
        self.assertTrue(any("decide x1 = True" in line for line in logs.output))


if __name__ == '__main__':
    unittest.main()
