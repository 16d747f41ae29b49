"""Foreign-field multiplication a * b = q * f + r over three 88-bit limbs.

The foreign modulus enters through f' = 2^264 - f (so every term stays
positive) and through its native reduction:

    coeff: f'0 c0, f'1 c1, f'2 c2, f mod native c3, 2^88 - f2 c4
    curr:  a0..a2 w0..w2, b0..b2 w3..w5, p10 w6, p110 w7, p111 w8,
           v0 w9, v10 w10, v11 w11, q'2 w12, r'2 w13
    next:  r0..r2 w0..w2, q0..q2 w3..w5, c_q w6, q'01 w7

with limb products

    p0 = a0 b0 + q0 f'0
    p1 = a0 b1 + a1 b0 + q0 f'1 + q1 f'0
    p2 = a0 b2 + a2 b0 + a1 b1 + q0 f'2 + q2 f'0 + q1 f'1

p1 is split as p10 + 2^88 p11 and p11 as p110 + 2^88 p111. The carries
v0 (2 bits) and v1 = v10 + 2^88 v11 tie the limbs of a*b - q*f to r.
The 88-bit limbs themselves are range-checked by the range-check gadget.
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, boolean, coeff, crumb, witness_curr, witness_next

from .base import Argument

LIMB_BITS = 88
LIMBS = 3


def _compose(limbs) -> Expr:
    two_to_limb = 2 ** LIMB_BITS
    return limbs[0] + two_to_limb * limbs[1] + two_to_limb * two_to_limb * limbs[2]


class ForeignFieldMul(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.FOREIGN_FIELD_MUL)
    CONSTRAINTS = 11

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        nf = [coeff(i) for i in range(LIMBS)]
        f_native, f2_bound = coeff(3), coeff(4)

        a = [witness_curr(i) for i in range(LIMBS)]
        b = [witness_curr(LIMBS + i) for i in range(LIMBS)]
        p10, p110, p111 = witness_curr(6), witness_curr(7), witness_curr(8)
        v0, v10, v11 = witness_curr(9), witness_curr(10), witness_curr(11)
        q2_bound, r2_bound = witness_curr(12), witness_curr(13)

        r = [witness_next(i) for i in range(LIMBS)]
        q = [witness_next(LIMBS + i) for i in range(LIMBS)]
        c_q, q01_bound = witness_next(6), witness_next(7)

        two_to_limb = 2 ** LIMB_BITS
        two_to_2limb = 2 ** (2 * LIMB_BITS)

        p0 = a[0] * b[0] + q[0] * nf[0]
        p1 = a[0] * b[1] + a[1] * b[0] + q[0] * nf[1] + q[1] * nf[0]
        p2 = a[0] * b[2] + a[2] * b[0] + a[1] * b[1] + q[0] * nf[2] + q[2] * nf[0] + q[1] * nf[1]
        p11 = p110 + two_to_limb * p111
        v1 = v10 + two_to_limb * v11

        return [
            p1 - (p10 + two_to_limb * p11),
            crumb(v0),
            # Carry out of limbs 0 and 1
            p0 + two_to_limb * p10 - r[0] - two_to_limb * r[1] - two_to_2limb * v0,
            boolean(v11),
            # Carry out of limb 2
            p2 + p11 + v0 - r[2] - two_to_limb * v1,
            # Same relation reduced modulo the native field
            _compose(a) * _compose(b) - _compose(q) * f_native - _compose(r),
            boolean(c_q),
            # Bound q < f: q + f' must not overflow 264 bits
            q01_bound - (q[0] + two_to_limb * q[1] + nf[0] + two_to_limb * nf[1]
                         - two_to_2limb * c_q),
            q2_bound - (q[2] + f2_bound + c_q),
            r2_bound - (r[2] + f2_bound),
            crumb(p111),
        ]
