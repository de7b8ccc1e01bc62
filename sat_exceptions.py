"""
Exception classes for the DPLL solver.

An unsatisfiable formula is a normal result (the solver returns None), so it
has no exception here. Everything below aborts the current run.
"""


class SATBaseException(Exception):
    """Base exception class for all SAT solver related exceptions."""
    pass


class CNFParseError(SATBaseException):
    """
    Raised when clause input cannot be parsed.

    Attributes:
        line_number: 1-based input line of the offending token, if known
        token: The offending token, if known
    """
    def __init__(self, message="Malformed CNF input", line_number=None, token=None):
        self.line_number = line_number
        self.token = token
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        details = []
        if self.line_number is not None:
            details.append(f"line {self.line_number}")
        if self.token is not None:
            details.append(f"token {self.token!r}")

        detail_str = ", ".join(details)
        return f"{self.message} ({detail_str})" if details else self.message


class SolverTimeoutError(SATBaseException):
    """
    Raised when a search exceeds its deadline or is cancelled.

    Attributes:
        time_spent: Time spent before the search stopped, in seconds
        calls: Number of recursive DPLL calls made before stopping
    """
    def __init__(self, message="Solver exceeded time limit", time_spent=None, calls=None):
        self.time_spent = time_spent
        self.calls = calls
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        details = []
        if self.time_spent is not None:
            details.append(f"time_spent={self.time_spent:.2f}s")
        if self.calls is not None:
            details.append(f"calls={self.calls}")

        detail_str = ", ".join(details)
        return f"{self.message} ({detail_str})" if details else self.message


class InternalInvariantError(SATBaseException):
    """
    Raised when the solver reaches a state its own rules exclude, e.g. no
    branch candidate for an undecided formula or a contradictory final
    assignment. Always a defect, never a property of the input.
    """
    pass


class ConfigurationError(SATBaseException):
    """
    Raised when there's a problem with solver configuration.
    """
    pass
