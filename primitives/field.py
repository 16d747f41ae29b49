"""Goldilocks field GF(p) used to evaluate constraint expressions.

Uses galois library for all field arithmetic. FF is the field type; scalars
and numpy-backed arrays of FF share the same arithmetic, so a compiled
constraint program evaluates either a single point (verifier) or a whole
domain (prover) without change.

The expression algebra itself never depends on this module: literals are
plain ints and only become field elements when evaluated.
"""

from typing import List, Union

import galois
import numpy as np

# --- Field Construction ---

GOLDILOCKS_PRIME = 0xFFFFFFFF00000001

FF = galois.GF(GOLDILOCKS_PRIME)
"""Base field GF(p) - Goldilocks prime field."""

# Multiplicative generator of FF*
GENERATOR = FF(7)

# Non-trivial cube root of unity, the endomorphism coefficient of the
# endo-scalar gates: ENDO_COEFFICIENT^3 == 1 and ENDO_COEFFICIENT != 1.
ENDO_COEFFICIENT = GENERATOR ** ((GOLDILOCKS_PRIME - 1) // 3)

# Value type produced by evaluation: a scalar or an array over a domain
FieldValue = Union[FF, np.ndarray]

# Precomputed roots of unity: W[n] is a primitive 2^n-th root of unity
W: List[int] = [
    1,
    18446744069414584320,
    281474976710656,
    16777216,
    4096,
    64,
    8,
    2198989700608,
    4404853092538523347,
    6434636298004421797,
    4255134452441852017,
    9113133275150391358,
    4355325209153869931,
    4308460244895131701,
    7126024226993609386,
    1873558160482552414,
    8167150655112846419,
    5718075921287398682,
    3411401055030829696,
    8982441859486529725,
    1971462654193939361,
    6553637399136210105,
    8124823329697072476,
    5936499541590631774,
    2709866199236980323,
    8877499657461974390,
    3757607247483852735,
    4969973714567017225,
    2147253751702802259,
    2530564950562219707,
    1905180297017055339,
    3524815499551269279,
    7277203076849721926,
]


def get_omega(n_bits: int) -> FF:
    """Return primitive 2^n_bits-th root of unity."""
    if not 0 <= n_bits < len(W):
        raise ValueError(f"no 2^{n_bits}-th root of unity in Goldilocks")
    return FF(W[n_bits])


def to_ff(value: int) -> FF:
    """Reduce an arbitrary (possibly negative) int into FF."""
    return FF(value % GOLDILOCKS_PRIME)
