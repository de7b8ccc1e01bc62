"""
Random k-CNF instances and an exhaustive reference checker for small ones.
"""

import itertools
from typing import Dict, List, Optional

import numpy as np


def random_kcnf(n_vars: int, n_clauses: int, k: int = 3, seed=None) -> List[List[int]]:
    """
    Generate a uniform random k-CNF formula.

    Args:
        n_vars: Number of variables (ids 1..n_vars)
        n_clauses: Number of clauses
        k: Literals per clause, each over a distinct variable
        seed: Seed or ``numpy.random.Generator``

    Returns:
        List of clauses, each a list of sign-encoded integers.
    """
    assert (k <= n_vars), f"k={k} needs at least {k} variables, got {n_vars}"
    rng = np.random.default_rng(seed)
    clauses = []
    for _ in range(n_clauses):
        variables = rng.choice(n_vars, size=k, replace=False) + 1
        signs = rng.choice([-1, 1], size=k)
        clauses.append([int(v) * int(s) for v, s in zip(variables, signs)])
    return clauses


def brute_force_sat(clauses: List[List[int]]) -> Optional[Dict[int, bool]]:
    """Try every assignment of the formula's variables; only for small formulas."""
    variables = sorted({abs(lit) for clause in clauses for lit in clause})
    for values in itertools.product([True, False], repeat=len(variables)):
        assignment = dict(zip(variables, values))
        if all(any(assignment[abs(lit)] == (lit > 0) for lit in clause) for clause in clauses):
            return assignment
    return None
