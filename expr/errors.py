"""Fatal errors of the constraint compiler.

Every error here means the constraint system itself is mis-specified (a
family registered twice, a column used non-linearly, ...), never that an
input was bad. Nothing in this package catches them: setup must abort.
"""

from circuits.column import Column
from circuits.gate import CurrOrNext


class ExprError(RuntimeError):
    """Base class for compilation failures."""


class AlphasMisuseError(ExprError):
    """Exponent registry misuse (double registration, count mismatch, ...)."""


class FailedLinearizationError(ExprError):
    """A monomial multiplies two or more columns that are not evaluated."""

    def __init__(self, variables):
        self.variables = tuple(variables)
        super().__init__(
            "linearization failed: monomial has several unevaluated cells "
            f"{list(self.variables)}"
        )


class MissingEvaluationError(ExprError):
    """A column that is not evaluated is read at the next row."""

    def __init__(self, col: Column, row: CurrOrNext):
        self.col = col
        self.row = row
        super().__init__(f"missing evaluation for {col!r} at row {row.name}")
