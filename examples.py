#!/usr/bin/env python3
"""
Worked encodings solved with the DPLL solver.
"""

from itertools import combinations

from cnf_io import format_result, parse_clause_lines, parse_dimacs
from dpll_sat import DPLLSolver, solve_sat


def at_most_one(variables):
    return [[-a, -b] for a, b in combinations(variables, 2)]


def coloring_clauses(n_vertices, edges, n_colors=3):
    """
    Graph colouring: variable (v - 1) * n_colors + c means vertex v has colour c.
    """
    def var(vertex, color):
        return (vertex - 1) * n_colors + color

    clauses = []
    for v in range(1, n_vertices + 1):
        colors = [var(v, c) for c in range(1, n_colors + 1)]
        clauses.append(colors)
        clauses.extend(at_most_one(colors))
    for a, b in edges:
        for c in range(1, n_colors + 1):
            clauses.append([-var(a, c), -var(b, c)])
    return clauses


def pigeonhole_clauses(n_pigeons, n_holes):
    """Pigeon p sits in hole h: variable p * n_holes + h + 1."""
    clauses = []
    for p in range(n_pigeons):
        clauses.append([p * n_holes + h + 1 for h in range(n_holes)])
    for h in range(n_holes):
        clauses.extend(at_most_one([p * n_holes + h + 1 for p in range(n_pigeons)]))
    return clauses


def example_3_coloring():
    print("\n" + "=" * 60)
    print("Example: Graph 3-Coloring (Triangle)")
    print("=" * 60)

    result = solve_sat(coloring_clauses(3, [(1, 2), (1, 3), (2, 3)]))
    if result is None:
        print("UNSAT - No 3-coloring exists")
        return
    print("SAT - 3-coloring exists!")
    for vertex in range(1, 4):
        for color in range(1, 4):
            if result[(vertex - 1) * 3 + color]:
                print(f"  Vertex {vertex}: Color {color}")


def example_k4_two_colors():
    print("\n" + "=" * 60)
    print("Example: K4 with 2 colors")
    print("=" * 60)

    edges = list(combinations(range(1, 5), 2))
    result = solve_sat(coloring_clauses(4, edges, n_colors=2))
    print("UNSAT - K4 needs 4 colors (as expected)" if result is None else f"SAT: {result}")


def example_line_format():
    """
    The plain line format: one clause per line, a blank line is the empty clause.
    """
    print("\n" + "=" * 60)
    print("Example: Line Format")
    print("=" * 60)

    text = "1\n-1 2\n-2 3 4\n"
    print(text)
    solver = DPLLSolver(parse_clause_lines(text.splitlines()))
    print(format_result(solver.solve()))
    print(f"({solver.stats.decisions} decisions, {solver.stats.calls} calls)")


def example_dimacs_format():
    print("\n" + "=" * 60)
    print("Example: DIMACS Format")
    print("=" * 60)

    dimacs = """
    c (x1 or not x2) and (x2 or x3) and (not x1 or not x3)
    p cnf 3 3
    1 -2 0
    2 3 0
    -1 -3 0
    """
    print(format_result(DPLLSolver(parse_dimacs(dimacs)).solve()))


def example_pigeonhole():
    print("\n" + "=" * 60)
    print("Example: Pigeonhole Principle (4 pigeons, 3 holes)")
    print("=" * 60)

    clauses = pigeonhole_clauses(4, 3)
    print(f"\n{len(clauses)} clauses generated")
    solver = DPLLSolver(parse_clause_lines(" ".join(map(str, c)) for c in clauses))
    result = solver.solve()
    if result is None:
        print(f"UNSAT - Cannot fit 4 pigeons in 3 holes "
              f"({solver.stats.conflicts} conflicts)")
    else:
        print("SAT - Assignment found (unexpected!)")


if __name__ == "__main__":
    example_3_coloring()
    example_k4_two_colors()
    example_line_format()
    example_dimacs_format()
    example_pigeonhole()
