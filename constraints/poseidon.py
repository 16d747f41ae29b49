"""Poseidon gate: five full rounds of the permutation over a width-3 state.

Row layout (round r's state occupies three consecutive witness cells):

    curr: state0 w0..w2 | state4 w3..w5 | state1 w6..w8 | state2 w9..w11 | state3 w12..w14
    next: state5 w0..w2

Round r maps state_r to state_{r+1}:

    state_{r+1}[j] = sum_k mds[j][k] * state_r[k]^7 + round_constant(r, j)

The 15 round constants sit in the coefficient columns, 3 per round.
"""

from typing import List

from circuits.argument import ArgumentType
from circuits.gate import GateType
from expr.ast import Expr, Mds, coeff, sum_exprs, witness_curr, witness_next

from .base import Argument

SPONGE_WIDTH = 3
ROUNDS_PER_ROW = 5
SBOX_ALPHA = 7

# Position of round r's state among the five blocks of the current row
STATE_ORDER = [0, 2, 3, 4, 1]


def _state(round_: int) -> List[Expr]:
    if round_ == ROUNDS_PER_ROW:
        return [witness_next(i) for i in range(SPONGE_WIDTH)]
    start = SPONGE_WIDTH * STATE_ORDER[round_]
    return [witness_curr(start + i) for i in range(SPONGE_WIDTH)]


def round_constraints(round_: int) -> List[Expr]:
    """Constraints binding state round_+1 to state round_."""
    current = [x ** SBOX_ALPHA for x in _state(round_)]
    following = _state(round_ + 1)
    out = []
    for j in range(SPONGE_WIDTH):
        mixed = sum_exprs(Mds(j, k) * current[k] for k in range(SPONGE_WIDTH))
        out.append(following[j] - (mixed + coeff(SPONGE_WIDTH * round_ + j)))
    return out


class Poseidon(Argument):
    ARGUMENT_TYPE = ArgumentType.of_gate(GateType.POSEIDON)
    CONSTRAINTS = 15

    @classmethod
    def constraint_checks(cls) -> List[Expr]:
        checks = []
        for r in range(ROUNDS_PER_ROW):
            checks.extend(round_constraints(r))
        return checks
