"""Endomorphism-accelerated scalar multiplication (4 bits per row).

Row layout:

    curr: xT w0, yT w1, xP w4, yP w5, n w6, xR w7, yR w8, s1 w9, s3 w10,
          b1..b4 w11..w14
    next: xS w4, yS w5, n' w6

Each pair of bits (b1, b2) selects one of T, -T, endo(T), -endo(T) and
adds it to the accumulator twice over (P -> R -> S), using the curve
endomorphism (x, y) -> (endo * x, y).
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import EndoCoefficient, Expr, boolean, witness_curr, witness_next

from .base import Argument


def _step(bx: Expr, by: Expr, s: Expr, xt: Expr, yt: Expr,
          xp: Expr, yp: Expr, xr: Expr, yr: Expr) -> List[Expr]:
    xq = (1 + (EndoCoefficient() - 1) * bx) * xt
    yq = (2 * by - 1) * yt
    s_sq = s * s
    return [
        (xq - xp) * s - (yq - yp),
        (2 * xp - s_sq + xq) * ((xp - xr) * s + yr + yp) - (xp - xr) * 2 * yp,
        (yr + yp) * (yr + yp) - (xp - xr) * (xp - xr) * (s_sq - xq + xr),
    ]


class EndosclMul(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.ENDO_MUL)
    CONSTRAINTS = 11

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        xt, yt = witness_curr(0), witness_curr(1)
        xp, yp = witness_curr(4), witness_curr(5)
        n = witness_curr(6)
        xr, yr = witness_curr(7), witness_curr(8)
        s1, s3 = witness_curr(9), witness_curr(10)
        b1, b2, b3, b4 = (witness_curr(11 + i) for i in range(4))
        xs, ys, n_next = witness_next(4), witness_next(5), witness_next(6)

        checks = [boolean(b) for b in (b1, b2, b3, b4)]
        checks += _step(b1, b2, s1, xt, yt, xp, yp, xr, yr)
        checks += _step(b3, b4, s3, xt, yt, xr, yr, xs, ys)
        checks.append(n_next - (16 * n + 8 * b1 + 4 * b2 + 2 * b3 + b4))
        return checks
