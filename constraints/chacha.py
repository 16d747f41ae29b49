"""ChaCha quarter-round gates.

ChaCha0, ChaCha1 and ChaCha2 each compute one line of a quarter round,

    a_out = a_in + b_in  (mod 2^32)
    d_out = (d_in ^ a_out) <<< k          k = 16, 12, 8

with row layout

    curr: a_in w0, b_in w1, d_in w2, a_out w3, d_xor w4, d_out w5,
          carry w6, lo w7, hi w8
    next: nybbles of a_out w0..w7

The XOR itself is checked by the lookup argument (CHACHA_FINAL and XOR
patterns); the gate proves the addition, the nybble split and the rotation
of d_xor = hi * 2^(32-k) + lo into d_out = lo * 2^k + hi.

ChaChaFinal applies the final 7-bit rotation to four words at once:
word i sits at w(3i), its low and high parts at w(3i+1), w(3i+2), and the
rotated word at next w(i).
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, boolean, sum_exprs, witness_curr, witness_next

from .base import Argument

WORD_BITS = 32
NYBBLES_PER_WORD = 8
FINAL_ROTATION = 7
FINAL_WORDS = 4


def quarter_line(rotation: int) -> List[Expr]:
    a_in, b_in = witness_curr(0), witness_curr(1)
    a_out, d_xor, d_out = witness_curr(3), witness_curr(4), witness_curr(5)
    carry, lo, hi = witness_curr(6), witness_curr(7), witness_curr(8)
    nybbles = sum_exprs(16 ** i * witness_next(i) for i in range(NYBBLES_PER_WORD))
    return [
        boolean(carry),
        a_in + b_in - a_out - 2 ** WORD_BITS * carry,
        a_out - nybbles,
        d_xor - (hi * 2 ** (WORD_BITS - rotation) + lo),
        d_out - (lo * 2 ** rotation + hi),
    ]


class ChaCha0(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.CHACHA0)
    CONSTRAINTS = 5

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        return quarter_line(16)


class ChaCha1(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.CHACHA1)
    CONSTRAINTS = 5

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        return quarter_line(12)


class ChaCha2(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.CHACHA2)
    CONSTRAINTS = 5

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        return quarter_line(8)


class ChaChaFinal(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.CHACHA_FINAL)
    CONSTRAINTS = 8

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        checks = []
        for i in range(FINAL_WORDS):
            x, lo, hi = witness_curr(3 * i), witness_curr(3 * i + 1), witness_curr(3 * i + 2)
            out = witness_next(i)
            checks.append(x - (hi * 2 ** (WORD_BITS - FINAL_ROTATION) + lo))
            checks.append(out - (lo * 2 ** FINAL_ROTATION + hi))
        return checks
