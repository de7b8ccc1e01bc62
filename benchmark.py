#!/usr/bin/env python3
"""
Benchmark the solver on random 3-CNF instances around a clause/variable ratio.
"""

import argparse
import json
import logging
from typing import Dict

import numpy as np
from tqdm import tqdm

from dpll_sat import DPLLSolver, Formula
from random_cnf import random_kcnf
from sat_exceptions import SolverTimeoutError
from solver_config import setup_logging

logger = logging.getLogger(__name__)


def run_benchmark(n_vars: int, ratio: float = 4.26, n_instances: int = 20,
                  seed: int = 0, timeout=None, k: int = 3) -> Dict[str, float]:
    """
    Solve ``n_instances`` random k-CNF formulas with ``round(ratio * n_vars)`` clauses.

    Returns:
        Summary with sat/unsat/timeout counts, solve times and mean decisions.
    """
    rng = np.random.default_rng(seed)
    n_clauses = int(round(ratio * n_vars))
    counts = {"sat": 0, "unsat": 0, "timeout": 0}
    times, decisions = [], []

    for _ in tqdm(range(n_instances), desc=f"n={n_vars} m={n_clauses}", dynamic_ncols=True):
        clauses = random_kcnf(n_vars, n_clauses, k=k, seed=rng)
        solver = DPLLSolver(Formula.from_ints(clauses), timeout=timeout)
        try:
            result = solver.solve()
        except SolverTimeoutError as e:
            logger.info("instance timed out: %s", e)
            counts["timeout"] += 1
            continue
        counts["sat" if result is not None else "unsat"] += 1
        times.append(solver.stats.elapsed)
        decisions.append(solver.stats.decisions)

    times = np.array(times) if times else np.zeros(1)
    return {
        "n_vars": n_vars,
        "n_clauses": n_clauses,
        **counts,
        "mean_seconds": float(np.mean(times)),
        "max_seconds": float(np.max(times)),
        "mean_decisions": float(np.mean(decisions)) if decisions else 0.0,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--n_vars", type=int, default=20)
    parser.add_argument("--ratio", type=float, default=4.26)
    parser.add_argument("--n_instances", type=int, default=20)
    parser.add_argument("--k", type=int, default=3)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("--log_level", type=str, default="WARNING")
    opts = parser.parse_args()

    setup_logging(opts.log_level)
    summary = run_benchmark(opts.n_vars, ratio=opts.ratio, n_instances=opts.n_instances,
                            seed=opts.seed, timeout=opts.timeout, k=opts.k)
    print(json.dumps(summary, indent=2))
