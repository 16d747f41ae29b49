"""Foreign-field addition over three 88-bit limbs.

Computes r = a + sign * b - ov * f for a foreign modulus f given in the
coefficient columns:

    coeff: f0 c0, f1 c1, f2 c2, sign c3
    curr:  a0..a2 w0..w2, b0..b2 w3..w5, ov w6, carry w7
    next:  r0..r2 w0..w2

The low and middle limbs are checked together (the carry out of the middle
limb enters the high limb) so only one carry is needed.
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, coeff, witness_curr, witness_next

from .base import Argument

LIMB_BITS = 88
LIMBS = 3


class ForeignFieldAdd(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.FOREIGN_FIELD_ADD)
    CONSTRAINTS = 4

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        f0, f1, f2, sign = (coeff(i) for i in range(4))
        a0, a1, a2 = (witness_curr(i) for i in range(LIMBS))
        b0, b1, b2 = (witness_curr(LIMBS + i) for i in range(LIMBS))
        ov, carry = witness_curr(6), witness_curr(7)
        r0, r1, r2 = (witness_next(i) for i in range(LIMBS))

        two_to_limb = 2 ** LIMB_BITS
        two_to_2limb = 2 ** (2 * LIMB_BITS)
        low_mid = (
            (a0 + two_to_limb * a1)
            + sign * (b0 + two_to_limb * b1)
            - ov * (f0 + two_to_limb * f1)
            - two_to_2limb * carry
            - (r0 + two_to_limb * r1)
        )
        return [
            # ov is 0 or sign
            ov * (ov - sign),
            carry * (carry - 1) * (carry + 1),
            low_mid,
            a2 + sign * b2 - ov * f2 + carry - r2,
        ]
