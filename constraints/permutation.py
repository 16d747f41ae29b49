"""Copy-constraint (permutation) argument.

Its constraints read the permutation aggregator Z and the sigma
polynomials, which the prover and verifier assemble outside the
linearized expression. The compiler only reserves its powers of alpha,
so the exponents stay consistent with the proof protocol.
"""

from circuits.argument import PERMUTATION

# Aggregation step, first row and last row
CONSTRAINTS = 3

ARGUMENT_TYPE = PERMUTATION
