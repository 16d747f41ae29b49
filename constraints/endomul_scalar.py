"""Decomposition of an endomorphism scalar into (a, b) coefficients.

Row layout: n0 w0, n8 w1, a0 w2, b0 w3, a8 w4, b8 w5, crumbs x0..x7 w6..w13.

Eight 2-bit crumbs advance the scalar from n0 to n8 and the coefficient
accumulators from (a0, b0) to (a8, b8). The crumb-to-coefficient maps are
the cubic interpolants (scaled by 6 to stay integral):

    6 a(x) = x (x - 1) (4x - 11)     a: 0, 1, 2, 3 -> 0, 0, -1, 1
    6 b(x) = (x - 2) (x - 3) (4x - 1)     b: 0, 1, 2, 3 -> -1, 1, 0, 0
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, crumb, sum_exprs, witness_curr

from .base import Argument

CRUMBS_PER_ROW = 8


def _c_func(x: Expr) -> Expr:
    return x * (x - 1) * (4 * x - 11)


def _d_func(x: Expr) -> Expr:
    return (x - 2) * (x - 3) * (4 * x - 1)


class EndomulScalar(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.ENDO_MUL_SCALAR)
    CONSTRAINTS = 11

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        n0, n8 = witness_curr(0), witness_curr(1)
        a0, b0 = witness_curr(2), witness_curr(3)
        a8, b8 = witness_curr(4), witness_curr(5)
        xs = [witness_curr(6 + i) for i in range(CRUMBS_PER_ROW)]

        def weighted(fn) -> Expr:
            return sum_exprs(
                2 ** (CRUMBS_PER_ROW - 1 - i) * fn(x) for i, x in enumerate(xs)
            )

        checks = [crumb(x) for x in xs]
        checks.append(
            n8 - (n0 * 4 ** CRUMBS_PER_ROW
                  + sum_exprs(4 ** (CRUMBS_PER_ROW - 1 - i) * x for i, x in enumerate(xs)))
        )
        checks.append(6 * a8 - (6 * 2 ** CRUMBS_PER_ROW * a0 + weighted(_c_func)))
        checks.append(6 * b8 - (6 * 2 ** CRUMBS_PER_ROW * b0 + weighted(_d_func)))
        return checks
