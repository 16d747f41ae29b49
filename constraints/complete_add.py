"""Complete elliptic-curve addition, including doubling and the identity.

Row layout:

    x1 w0, y1 w1, x2 w2, y2 w3, x3 w4, y3 w5,
    inf w6, same_x w7, s w8, inf_z w9, x21_inv w10

same_x flags x1 == x2; s is the slope (the tangent when same_x); inf flags
a result at infinity and inf_z witnesses y2 - y1 being non-zero otherwise.
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, witness_curr

from .base import Argument


class CompleteAdd(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.COMPLETE_ADD)
    CONSTRAINTS = 7

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        x1, y1, x2, y2, x3, y3 = (witness_curr(i) for i in range(6))
        inf, same_x, s, inf_z, x21_inv = (witness_curr(i) for i in range(6, 11))

        x21 = x2 - x1
        y21 = y2 - y1
        return [
            # same_x is 1 only when x21 is zero
            same_x * x21,
            (1 - same_x) - x21 * x21_inv,
            # Tangent slope when doubling, chord slope otherwise
            same_x * (2 * s * y1 - 3 * x1 * x1) + (1 - same_x) * (x21 * s - y21),
            x1 + x2 + x3 - s * s,
            s * (x1 - x3) - y1 - y3,
            y21 * (same_x - inf),
            y21 * inf_z - inf,
        ]
