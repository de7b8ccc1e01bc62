#!/usr/bin/env python3
"""
Command-line entry point.

Reads clauses from a file or stdin, solves them and prints either the
assignment (true ids on the first line, negated false ids on the second) or
``unsat``.
"""

import argparse
import logging
import sys

from cnf_io import INPUT_FORMATS, format_result, read_formula
from dpll_sat import DPLLSolver
from sat_exceptions import ConfigurationError, CNFParseError, SolverTimeoutError
from solver_config import SolverConfig, load_config, merge_options, setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNKNOWN = 2
EXIT_SAT = 10
EXIT_UNSAT = 20


def build_parser():
    parser = argparse.ArgumentParser(description='DPLL SAT solver')
    parser.add_argument("input", nargs='?', default='-',
                        help='clause file, "-" for stdin')
    parser.add_argument("--cfg", type=str, default=None,
                        help='JSON config file; flags override its values')
    parser.add_argument("--format", dest="input_format", choices=INPUT_FORMATS, default=None)
    parser.add_argument("--timeout", type=float, default=None,
                        help='seconds before giving up')
    parser.add_argument("--fixpoint", dest="fixpoint_propagation",
                        action='store_true', default=None,
                        help='run unit propagation to a fixpoint in every call')
    parser.add_argument("--no-verify", dest="verify", action='store_false', default=None)
    parser.add_argument("--stats", action='store_true', default=False,
                        help='print search statistics to stderr')
    parser.add_argument("--log-level", dest="log_level", type=str, default=None)
    parser.add_argument("--log-file", dest="log_file", type=str, default=None)
    parser.add_argument("--solver-exit-codes", dest="solver_exit_codes",
                        action='store_true', default=None,
                        help='exit 10 on SAT and 20 on UNSAT')
    return parser


def resolve_config(opts) -> SolverConfig:
    config = load_config(opts.cfg) if opts.cfg else SolverConfig()
    overrides = {
        "timeout": opts.timeout,
        "fixpoint_propagation": opts.fixpoint_propagation,
        "verify": opts.verify,
        "input_format": opts.input_format,
        "log_level": opts.log_level,
        "log_file": opts.log_file,
        "solver_exit_codes": opts.solver_exit_codes,
    }
    return merge_options(config, overrides)


def main(argv=None) -> int:
    opts = build_parser().parse_args(argv)

    try:
        config = resolve_config(opts)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    setup_logging(config.log_level, config.log_file)

    try:
        if opts.input == '-':
            formula = read_formula(sys.stdin, config.input_format)
        else:
            with open(opts.input, 'r') as f:
                formula = read_formula(f, config.input_format)
    except (OSError, CNFParseError) as e:
        logger.error("cannot read input: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    logger.info("solving %d clauses over %d variables", len(formula), len(formula.variables()))
    solver = DPLLSolver(formula, timeout=config.timeout,
                        fixpoint=config.fixpoint_propagation, verify=config.verify)
    try:
        assignment = solver.solve()
    except SolverTimeoutError as e:
        logger.warning("%s", e)
        print("unknown")
        return EXIT_UNKNOWN
    finally:
        if opts.stats:
            s = solver.stats
            print(f"calls={s.calls} decisions={s.decisions} conflicts={s.conflicts} "
                  f"max_depth={s.max_depth} elapsed={s.elapsed:.3f}s", file=sys.stderr)

    print(format_result(assignment))
    if not config.solver_exit_codes:
        return EXIT_OK
    return EXIT_UNSAT if assignment is None else EXIT_SAT


if __name__ == "__main__":
    sys.exit(main())
