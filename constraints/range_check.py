"""Range-check gadget: RangeCheck0 and RangeCheck1.

A RangeCheck0 row decomposes an 88-bit value v0 (from the least
significant bits up) into eight 2-bit crumbs and six 12-bit limbs:

    w0  v0
    w1..w6   12-bit limbs p0..p5 (bits 16..88, checked by lookup)
    w7..w14  crumbs c0..c7       (bits 0..16, checked here)

A RangeCheck1 row does the same for v2 over two rows, adding the two
12-bit limbs stored in the first columns of the next row:

    curr: v2 w0, limbs p0..p3 w1..w4, crumbs c0..c9 w5..w14
    next: limbs w0, w1 (bits 68..92)
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, crumb, sum_exprs, witness_curr, witness_next

from .base import Argument

LIMB_BITS = 12
CRUMB_BITS = 2


def _crumbs(first_col: int, count: int) -> List[Expr]:
    return [witness_curr(first_col + i) for i in range(count)]


class RangeCheck0(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.RANGE_CHECK0)
    CONSTRAINTS = 9

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        v0 = witness_curr(0)
        limbs = [witness_curr(1 + j) for j in range(6)]
        crumbs = _crumbs(7, 8)

        low = sum_exprs(4 ** i * c for i, c in enumerate(crumbs))
        high = sum_exprs(
            2 ** (CRUMB_BITS * len(crumbs) + LIMB_BITS * j) * p for j, p in enumerate(limbs)
        )
        return [crumb(c) for c in crumbs] + [v0 - (low + high)]


class RangeCheck1(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.RANGE_CHECK1)
    CONSTRAINTS = 11

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        v2 = witness_curr(0)
        limbs = [witness_curr(1 + j) for j in range(4)]
        crumbs = _crumbs(5, 10)
        next_limbs = [witness_next(0), witness_next(1)]

        low = sum_exprs(4 ** i * c for i, c in enumerate(crumbs))
        base = CRUMB_BITS * len(crumbs)
        high = sum_exprs(2 ** (base + LIMB_BITS * j) * p for j, p in enumerate(limbs))
        top = sum_exprs(
            2 ** (base + LIMB_BITS * (len(limbs) + j)) * p for j, p in enumerate(next_limbs)
        )
        return [crumb(c) for c in crumbs] + [v2 - (low + high + top)]


def combined_constraints(alphas) -> Expr:
    """Both range-check gates, sharing the gate exponent range."""
    return RangeCheck0.combined_constraints(alphas) + RangeCheck1.combined_constraints(alphas)
