"""Variable-base scalar multiplication: five double-and-add steps per row.

Row layout:

    curr: xT w0, yT w1, x0 w2, y0 w3, n w4, n' w5, (x1, y1)..(x4, y4) w7..w14
    next: x5 w0, y5 w1, b0..b4 w2..w6, s0..s4 w7..w11

Step i consumes bit b_i and computes (x_{i+1}, y_{i+1}) = 2(x_i, y_i) +/- T,
with slope s_i of the line through (x_i, y_i) and (xT, +/-yT). The final
constraint accumulates the five bits into the running scalar:

    n' = 32 n + sum_i 2^(4-i) b_i
"""

from typing import List, Tuple

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, boolean, sum_exprs, witness_curr, witness_next

from .base import Argument

BITS_PER_ROW = 5


def _points() -> List[Tuple[Expr, Expr]]:
    pts = [(witness_curr(2), witness_curr(3))]
    pts += [(witness_curr(7 + 2 * i), witness_curr(8 + 2 * i)) for i in range(4)]
    pts.append((witness_next(0), witness_next(1)))
    return pts


def single_bit(
    b: Expr, s: Expr, xt: Expr, yt: Expr, p: Tuple[Expr, Expr], q: Tuple[Expr, Expr]
) -> List[Expr]:
    """Constraints of one double-and-add step from p to q."""
    xp, yp = p
    xq, yq = q
    xr = s * s - xp - xt
    d = xp - xr
    t = 2 * yp - s * d
    return [
        boolean(b),
        (xp - xt) * s - (yp - (2 * b - 1) * yt),
        (xq + xr + xp) * d * d - t * t,
        (yq + yp) * d - (xp - xq) * t,
    ]


class VarbaseMul(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.VAR_BASE_MUL)
    CONSTRAINTS = 21

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        xt, yt = witness_curr(0), witness_curr(1)
        n, n_next = witness_curr(4), witness_curr(5)
        bits = [witness_next(2 + i) for i in range(BITS_PER_ROW)]
        slopes = [witness_next(7 + i) for i in range(BITS_PER_ROW)]
        pts = _points()

        checks = []
        for i in range(BITS_PER_ROW):
            checks.extend(single_bit(bits[i], slopes[i], xt, yt, pts[i], pts[i + 1]))

        acc = sum_exprs(2 ** (BITS_PER_ROW - 1 - i) * bits[i] for i in range(BITS_PER_ROW))
        checks.append(n_next - (32 * n + acc))
        return checks
