#!/usr/bin/env python3
"""
DPLL SAT Solver

A recursive Davis-Putnam-Logemann-Loveland solver for formulas in conjunctive
normal form. Every recursive call simplifies its formula with unit propagation
and pure-literal elimination, checks for a conflict or a fully decided formula,
and otherwise splits on a variable: first trying it true, then false.

Formulas are immutable. Each pass returns a new formula, and branching extends
a formula with one unit clause in O(1) through a persistent clause list, so
sibling branches share all of their clauses.
"""

import logging
import sys
import time
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set

from sat_exceptions import InternalInvariantError, SolverTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Literal:
    """A variable occurrence with a polarity (positive = asserted true)."""

    var: int
    positive: bool = True

    def __post_init__(self):
        if self.var < 1:
            raise ValueError(f"variable ids start at 1, got {self.var}")

    @classmethod
    def from_int(cls, value: int) -> "Literal":
        """Build a literal from a sign-encoded integer (``-3`` is "not x3")."""
        return cls(abs(value), value > 0)

    def __int__(self) -> int:
        return self.var if self.positive else -self.var

    def __neg__(self) -> "Literal":
        return self.negate()

    def __str__(self):
        return str(int(self))

    def negate(self) -> "Literal":
        return Literal(self.var, not self.positive)

    def is_complement(self, other: "Literal") -> bool:
        return self.var == other.var and self.positive != other.positive

    def matches_any(self, literals: Iterable["Literal"]) -> bool:
        return any(self == lit for lit in literals)

    def complements_any(self, literals: Iterable["Literal"]) -> bool:
        return any(self.is_complement(lit) for lit in literals)

    def sort_key(self):
        # positive before negative for the same variable
        return (self.var, not self.positive)


class Clause:
    """
    A disjunction of distinct literals.

    A clause may hold both polarities of one variable; such a clause is kept
    and simplified like any other. The empty clause is always false and marks
    a conflict.
    """

    __slots__ = ("literals",)

    def __init__(self, literals: Iterable[Literal] = ()):
        self.literals: FrozenSet[Literal] = frozenset(literals)

    @classmethod
    def of(cls, *values: int) -> "Clause":
        return cls(Literal.from_int(v) for v in values)

    def __len__(self) -> int:
        return len(self.literals)

    def __iter__(self) -> Iterator[Literal]:
        return iter(sorted(self.literals, key=Literal.sort_key))

    def __contains__(self, literal: Literal) -> bool:
        return literal in self.literals

    def __eq__(self, other):
        if not isinstance(other, Clause):
            return NotImplemented
        return self.literals == other.literals

    def __hash__(self):
        return hash(self.literals)

    def __repr__(self):
        return "Clause(%s)" % " ".join(str(lit) for lit in self)

    @property
    def is_empty(self) -> bool:
        return not self.literals

    @property
    def is_unit(self) -> bool:
        return len(self.literals) == 1

    @property
    def unit_literal(self) -> Literal:
        if not self.is_unit:
            raise InternalInvariantError(f"{self!r} is not a unit clause")
        return next(iter(self.literals))

    def variables(self) -> Set[int]:
        return {lit.var for lit in self.literals}

    def is_satisfied_by(self, assignment: Dict[int, bool]) -> bool:
        return any(assignment.get(lit.var) == lit.positive for lit in self.literals)


class _ClauseNode:
    __slots__ = ("clause", "rest", "size")

    def __init__(self, clause: Clause, rest: Optional["_ClauseNode"]):
        self.clause = clause
        self.rest = rest
        self.size = 1 if rest is None else rest.size + 1


class Formula:
    """
    A conjunction of clauses.

    Clauses keep their insertion order and duplicates are never merged. The
    clauses live in a persistent singly linked list: ``conjoin`` returns a new
    formula that points at this one's list instead of copying it.
    """

    __slots__ = ("_head",)

    def __init__(self, clauses: Iterable[Clause] = ()):
        head = None
        for clause in clauses:
            head = _ClauseNode(clause, head)
        self._head: Optional[_ClauseNode] = head

    @classmethod
    def from_ints(cls, clauses: Iterable[Iterable[int]]) -> "Formula":
        """
        Build a formula from sign-encoded integer clauses.

        Args:
            clauses: Iterable of clauses, each an iterable of non-zero integers.
                    Variable n is represented by n, and its negation by -n.

        Returns:
            Formula with one clause per input clause, in input order.
        """
        return cls(Clause.of(*clause) for clause in clauses)

    @classmethod
    def _from_node(cls, head: Optional[_ClauseNode]) -> "Formula":
        formula = cls.__new__(cls)
        formula._head = head
        return formula

    def conjoin(self, clause: Clause) -> "Formula":
        """Return this formula with ``clause`` appended, sharing every other clause."""
        return Formula._from_node(_ClauseNode(clause, self._head))

    def __len__(self) -> int:
        return 0 if self._head is None else self._head.size

    def __iter__(self) -> Iterator[Clause]:
        reversed_clauses = []
        node = self._head
        while node is not None:
            reversed_clauses.append(node.clause)
            node = node.rest
        return reversed(reversed_clauses)

    def __repr__(self):
        return "Formula(%s)" % ", ".join(repr(c) for c in self)

    def to_ints(self) -> List[List[int]]:
        return [[int(lit) for lit in clause] for clause in self]

    def variables(self) -> Set[int]:
        result = set()
        for clause in self:
            result |= clause.variables()
        return result

    def literals(self) -> Set[Literal]:
        result = set()
        for clause in self:
            result |= clause.literals
        return result

    def unit_literals(self) -> Set[Literal]:
        return {clause.unit_literal for clause in self if clause.is_unit}

    def has_empty_clause(self) -> bool:
        return any(clause.is_empty for clause in self)

    def has_multi_literal_clause(self) -> bool:
        return any(len(clause) > 1 for clause in self)

    def is_satisfied_by(self, assignment: Dict[int, bool]) -> bool:
        """Check if every clause has a literal made true by ``assignment``."""
        return all(clause.is_satisfied_by(assignment) for clause in self)


# ---------------------------------------------------------------------------
# simplification


def _propagate_once(formula: Formula) -> Formula:
    units = formula.unit_literals()
    if not units:
        return formula

    falsified = {lit.negate() for lit in units}
    kept = []
    for clause in formula:
        if len(clause) <= 1:
            kept.append(clause)
            continue
        if clause.literals & units:
            # satisfied by a unit literal
            continue
        if clause.literals & falsified:
            kept.append(Clause(clause.literals - falsified))
        else:
            kept.append(clause)
    return Formula(kept)


def unit_propagate(formula: Formula, fixpoint: bool = False) -> Formula:
    """
    Perform unit propagation.

    Clauses containing a unit literal are dropped, and literals complementary
    to a unit literal are removed from the remaining multi-literal clauses.
    Unit clauses are copied through unchanged.

    Args:
        formula: Formula to simplify
        fixpoint: Repeat the pass until it no longer changes the formula.
                  A single pass leaves units it creates for the next call.

    Returns:
        A new formula; reduced clauses may be unit or empty.
    """
    result = _propagate_once(formula)
    if fixpoint:
        while True:
            previous = result
            result = _propagate_once(previous)
            # a pass only drops or shrinks clauses, so equal size means no change
            if result is previous or _size(result) == _size(previous):
                break
    return result


def _size(formula: Formula):
    return len(formula), sum(len(clause) for clause in formula)


def pure_literals(formula: Formula) -> List[Literal]:
    """Literals whose variable occurs with only one polarity, by ascending id."""
    positive: Set[int] = set()
    negative: Set[int] = set()
    for clause in formula:
        for lit in clause.literals:
            (positive if lit.positive else negative).add(lit.var)
    pure = [Literal(v, True) for v in positive - negative]
    pure += [Literal(v, False) for v in negative - positive]
    return sorted(pure, key=Literal.sort_key)


def pure_literal_eliminate(formula: Formula) -> Formula:
    """
    Eliminate pure literals.

    Every clause containing a pure literal is dropped, and one unit clause per
    pure literal is appended so the choice stays visible to the driver.
    """
    pure = pure_literals(formula)
    if not pure:
        return formula
    pure_set = set(pure)
    kept = [clause for clause in formula if not clause.literals & pure_set]
    kept.extend(Clause((lit,)) for lit in pure)
    return Formula(kept)


# ---------------------------------------------------------------------------
# branching


def choose_branch_literal(variables: Set[Literal], formula: Formula) -> Literal:
    """
    Choose the next literal to branch on.

    Args:
        variables: Literal set of the original formula
        formula: Current, simplified formula (not yet decided, no conflict)

    Returns:
        The smallest literal (by id, then positive first) that occurs in a
        multi-literal clause and in ``variables``. Failing that, the positive
        literal of the smallest original variable no unit clause mentions.

    Raises:
        InternalInvariantError: if neither rule yields a literal.
    """
    candidates = [
        lit
        for clause in formula if len(clause) > 1
        for lit in clause.literals if lit in variables
    ]
    if candidates:
        return min(candidates, key=Literal.sort_key)

    pinned = {lit.var for lit in formula.unit_literals()}
    for var in sorted({lit.var for lit in variables}):
        if var not in pinned:
            return Literal(var, True)

    raise InternalInvariantError(
        "no branch candidate for a formula that is neither decided nor conflicted")


# ---------------------------------------------------------------------------
# decision check

UNDECIDED = 0
SATISFIED = 1
CONFLICTED = 2


def check_decided(variables: Set[int], formula: Formula) -> int:
    """
    Classify a simplified, conflict-free formula.

    Returns:
        UNDECIDED while a multi-literal clause remains or some variable is not
        pinned by any unit clause, CONFLICTED if a variable is pinned with both
        polarities, SATISFIED if every variable is pinned exactly once.
    """
    if formula.has_multi_literal_clause():
        return UNDECIDED

    polarities: Dict[int, Set[bool]] = {}
    for lit in formula.unit_literals():
        polarities.setdefault(lit.var, set()).add(lit.positive)

    if any(len(signs) > 1 for signs in polarities.values()):
        return CONFLICTED
    if any(var not in polarities for var in variables):
        return UNDECIDED
    return SATISFIED


# ---------------------------------------------------------------------------
# result extraction


def extract_assignment(formula: Formula) -> Dict[int, bool]:
    """
    Read a decided formula's unit clauses into a variable assignment.

    Args:
        formula: Terminal formula made only of unit clauses

    Returns:
        Mapping from variable id to value, in ascending id order.
    """
    assignment: Dict[int, bool] = {}
    for clause in formula:
        lit = clause.unit_literal
        if assignment.get(lit.var, lit.positive) != lit.positive:
            raise InternalInvariantError(
                f"variable {lit.var} assigned both polarities")
        assignment[lit.var] = lit.positive
    return dict(sorted(assignment.items()))


# ---------------------------------------------------------------------------
# search


@dataclass
class SolverStats:
    calls: int = 0
    decisions: int = 0
    conflicts: int = 0
    max_depth: int = 0
    elapsed: float = 0.0


class DPLLSolver:
    """
    Recursive DPLL search over immutable formula snapshots.

    The solver keeps the literal set of the input formula for its termination
    checks, so variables that simplification removes from the formula still
    receive a value.
    """

    def __init__(self, formula: Formula, timeout: Optional[float] = None,
                 should_stop: Optional[Callable[[], bool]] = None,
                 fixpoint: bool = False, verify: bool = True):
        """
        Initialize the solver.

        Args:
            formula: Formula to solve
            timeout: Seconds allowed for ``solve``; None for no limit
            should_stop: Zero-argument callable polled at every recursive call;
                         returning True cancels the search
            fixpoint: Run unit propagation to a fixpoint in every call
            verify: Check the assignment against ``formula`` before returning it
        """
        self.formula = formula
        self.timeout = timeout
        self.should_stop = should_stop
        self.fixpoint = fixpoint
        self.verify = verify
        self.literals: Set[Literal] = formula.literals()
        self.variables: Set[int] = {lit.var for lit in self.literals}
        self.stats = SolverStats()
        self._started = 0.0
        self._deadline: Optional[float] = None

    def solve(self) -> Optional[Dict[int, bool]]:
        """
        Solve the SAT problem.

        Returns:
            A satisfying assignment if SAT, None if UNSAT.

        Raises:
            SolverTimeoutError: if the deadline passes or the search is cancelled.
        """
        self.stats = SolverStats()
        self._started = time.monotonic()
        self._deadline = None if self.timeout is None else self._started + self.timeout

        # one frame per decision, and each variable is decided at most once per path
        needed = len(self.variables) + 200
        old_limit = sys.getrecursionlimit()
        if needed > old_limit:
            sys.setrecursionlimit(needed)
        try:
            terminal = self._dpll(self.formula, 0)
        finally:
            sys.setrecursionlimit(old_limit)
            self.stats.elapsed = time.monotonic() - self._started

        if terminal is None:
            logger.info("UNSAT after %d calls, %d decisions, %d conflicts (%.3fs)",
                        self.stats.calls, self.stats.decisions,
                        self.stats.conflicts, self.stats.elapsed)
            return None

        assignment = extract_assignment(terminal)
        if self.verify and not self.formula.is_satisfied_by(assignment):
            raise InternalInvariantError("Invalid solution found!")
        logger.info("SAT after %d calls, %d decisions, %d conflicts (%.3fs)",
                    self.stats.calls, self.stats.decisions,
                    self.stats.conflicts, self.stats.elapsed)
        return assignment

    def _check_budget(self):
        now = time.monotonic()
        cancelled = self.should_stop is not None and self.should_stop()
        if cancelled or (self._deadline is not None and now > self._deadline):
            message = "Search cancelled" if cancelled else "Solver exceeded time limit"
            raise SolverTimeoutError(message, time_spent=now - self._started,
                                     calls=self.stats.calls)

    def _trace(self, depth: int, msg):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(" " * depth + str(msg))

    def _dpll(self, formula: Formula, depth: int) -> Optional[Formula]:
        """
        One DPLL step.

        Returns:
            The decided formula if this branch is satisfiable, None otherwise.
        """
        self._check_budget()
        self.stats.calls += 1
        self.stats.max_depth = max(self.stats.max_depth, depth)

        formula = unit_propagate(formula, fixpoint=self.fixpoint)
        formula = pure_literal_eliminate(formula)

        if formula.has_empty_clause():
            self.stats.conflicts += 1
            self._trace(depth, "conflict: empty clause")
            return None

        status = check_decided(self.variables, formula)
        if status == CONFLICTED:
            self.stats.conflicts += 1
            self._trace(depth, "conflict: contradictory unit clauses")
            return None
        if status == SATISFIED:
            self._trace(depth, "satisfied")
            return formula

        var = choose_branch_literal(self.literals, formula).var
        self.stats.decisions += 1

        self._trace(depth, f"decide x{var} = True")
        result = self._dpll(formula.conjoin(Clause((Literal(var, True),))), depth + 1)
        if result is not None:
            return result

        self._trace(depth, f"decide x{var} = False")
        return self._dpll(formula.conjoin(Clause((Literal(var, False),))), depth + 1)


def solve_formula(formula: Formula, **kwargs) -> Optional[Dict[int, bool]]:
    """Solve ``formula``; keyword arguments are passed to ``DPLLSolver``."""
    return DPLLSolver(formula, **kwargs).solve()


def solve_sat(clauses: List[List[int]], **kwargs) -> Optional[Dict[int, bool]]:
    """
    Convenience function to solve a SAT problem.

    Args:
        clauses: List of clauses in CNF format

    Returns:
        Satisfying assignment if SAT, None if UNSAT
    """
    return solve_formula(Formula.from_ints(clauses), **kwargs)
