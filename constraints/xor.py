"""Xor16: decomposition of the 16 low bits of two inputs and their XOR.

Row layout:

    curr: in1 w0, in2 w1, out w2,
          nybbles in1 w3..w6, in2 w7..w10, out w11..w14
    next: in1' w0, in2' w1, out' w2   (the values shifted right by 16)

The nybble-wise XOR is proven by the lookup argument; the gate proves each
value equals its four nybbles plus 2^16 times its remainder. Chaining rows
checks arbitrarily long words.
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, sum_exprs, witness_curr, witness_next

from .base import Argument

NYBBLES = 4


class Xor16(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.XOR16)
    CONSTRAINTS = 3

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        checks = []
        for v in range(3):
            first = 3 + NYBBLES * v
            nybbles = sum_exprs(16 ** i * witness_curr(first + i) for i in range(NYBBLES))
            checks.append(witness_curr(v) - (nybbles + 2 ** 16 * witness_next(v)))
        return checks
