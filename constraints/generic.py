"""Generic gate: two independent arithmetic constraints per row.

Each half h of the row reads three witness cells and five coefficients:

    l, r, o = w[3h], w[3h+1], w[3h+2]
    c[5h]*l + c[5h+1]*r + c[5h+2]*o + c[5h+3]*l*r + c[5h+4] = 0

which covers addition, multiplication, constants and public inputs.
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, coeff, witness_curr

from .base import Argument

GENERIC_REGISTERS = 3
GENERIC_COEFFS = 5


def _half(h: int) -> Expr:
    l, r, o = (witness_curr(GENERIC_REGISTERS * h + i) for i in range(GENERIC_REGISTERS))
    c = [coeff(GENERIC_COEFFS * h + i) for i in range(GENERIC_COEFFS)]
    return c[0] * l + c[1] * r + c[2] * o + c[3] * l * r + c[4]


class Generic(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.GENERIC)
    CONSTRAINTS = 2

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        return [_half(0), _half(1)]
