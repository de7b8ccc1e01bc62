"""
Reading clause input and printing solver results.

Two input formats are supported: the plain line format (one clause per line,
literals separated by spaces, a blank line is the empty clause) and DIMACS CNF.
"""

import logging
from typing import Dict, Iterable, List, Optional, TextIO

from dpll_sat import Clause, Formula, Literal
from sat_exceptions import CNFParseError

logger = logging.getLogger(__name__)

INPUT_FORMATS = ("lines", "dimacs")


def parse_literal(token: str, line_number: Optional[int] = None) -> Literal:
    """
    Parse one literal token: ``N`` is positive, ``-N`` negative, N >= 1.

    Raises:
        CNFParseError: on anything that is not an optionally negated id.
    """
    digits = token[1:] if token.startswith("-") else token
    if not digits.isdigit() or not digits.isascii() or int(digits) == 0:
        raise CNFParseError("Invalid literal", line_number=line_number, token=token)
    return Literal(int(digits), not token.startswith("-"))


def parse_clause_line(line: str, line_number: Optional[int] = None) -> Clause:
    """Parse one line of the line format into a clause; no tokens gives the empty clause."""
    literals = []
    for token in line.split(" "):
        token = token.strip()
        if token:
            literals.append(parse_literal(token, line_number))
    return Clause(literals)


def parse_clause_lines(lines: Iterable[str]) -> Formula:
    """
    Parse the line format.

    Args:
        lines: Input lines, with or without their line terminators

    Returns:
        Formula with one clause per line, in input order.
    """
    clauses = []
    for line_number, line in enumerate(lines, start=1):
        clauses.append(parse_clause_line(line.rstrip("\r\n"), line_number))
    logger.debug("parsed %d clauses", len(clauses))
    return Formula(clauses)


def parse_dimacs(text: str) -> Formula:
    """
    Parse a CNF formula in DIMACS format.

    Clauses end with ``0`` and may span several lines. Comment lines start with
    ``c`` and a ``%`` line ends the input.

    Args:
        text: DIMACS format text

    Returns:
        Formula object
    """
    clauses: List[Clause] = []
    current: List[Literal] = []
    declared = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()

        if not line or line.startswith("c"):
            continue
        if line.startswith("%"):
            break
        if line.startswith("p"):
            parts = line.split()
            if len(parts) != 4 or parts[1] != "cnf" or \
                    not parts[2].isdigit() or not parts[3].isdigit():
                raise CNFParseError("Invalid problem line", line_number=line_number, token=line)
            declared = (int(parts[2]), int(parts[3]))
            continue

        for token in line.split():
            if token == "0":
                clauses.append(Clause(current))
                current = []
            else:
                current.append(parse_literal(token, line_number))

    if current:
        # last clause without its terminating 0
        clauses.append(Clause(current))

    formula = Formula(clauses)
    if declared is not None:
        n_vars, n_clauses = declared
        if n_clauses != len(clauses):
            logger.warning("header declares %d clauses, found %d", n_clauses, len(clauses))
        max_var = max(formula.variables(), default=0)
        if max_var > n_vars:
            logger.warning("header declares %d variables, found id %d", n_vars, max_var)
    return formula


def read_formula(stream: TextIO, input_format: str = "lines") -> Formula:
    """Read a whole formula from ``stream`` in one of ``INPUT_FORMATS``."""
    if input_format == "lines":
        return parse_clause_lines(stream)
    if input_format == "dimacs":
        return parse_dimacs(stream.read())
    raise ValueError(f"unknown input format {input_format!r}")


def format_assignment(assignment: Dict[int, bool]) -> str:
    """
    Format an assignment as two lines: the true ids, then the false ids
    prefixed with ``-``. Both lines are in ascending id order.
    """
    true_vars = [str(var) for var, value in sorted(assignment.items()) if value]
    false_vars = ["-%d" % var for var, value in sorted(assignment.items()) if not value]
    return " ".join(true_vars) + "\n" + " ".join(false_vars)


def format_result(assignment: Optional[Dict[int, bool]]) -> str:
    if assignment is None:
        return "unsat"
    return format_assignment(assignment)
