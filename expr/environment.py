"""Values of expression leaves at an evaluation point.

The same Environment serves both sides of the protocol:

- Verifier: cells are scalar evaluations at zeta (CURR) and zeta*omega
  (NEXT); zeta is a single field element.
- Prover: cells are arrays over an evaluation domain and zeta is the array
  of domain points. galois broadcasting makes every operation elementwise,
  so the same compiled program evaluates all rows at once.

Usage:
    env = Environment.from_columns(constants, columns, domain_size, zeta, flags)
    value = evaluate_polish(tokens, env)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import numpy as np

from circuits.column import Column, Variable
from circuits.feature_flags import FeatureFlag, FeatureFlags
from circuits.gate import CurrOrNext
from expr.ast import ChallengeKind
from primitives.field import ENDO_COEFFICIENT, FF, FieldValue, get_omega, to_ff


@dataclass
class Constants:
    """Challenges and fixed constants referenced by constraint expressions.

    Attributes:
        alpha: Combination challenge; constraint i of a family is weighted by
            alpha^e for the family's registered exponent e
        beta: Permutation/lookup challenge
        gamma: Permutation/lookup challenge
        joint_combiner: Challenge combining the columns of a joint lookup
        endo_coefficient: Curve endomorphism coefficient
        mds: Poseidon MDS matrix
        zk_rows: Number of rows reserved for zero-knowledge blinding
    """
    alpha: FF
    beta: FF
    gamma: FF
    joint_combiner: FF
    endo_coefficient: FF = field(default_factory=lambda: ENDO_COEFFICIENT)
    mds: List[List[int]] = field(default_factory=list)
    zk_rows: int = 3


@dataclass
class Environment:
    """Leaf values for evaluating expressions at zeta.

    Attributes:
        constants: Challenges and constants
        cells: Value of each cell, keyed by Variable (column and row)
        domain_size: Size n of the evaluation domain (a power of two)
        zeta: Evaluation point (scalar) or points (array)
        features: Runtime feature flags deciding conditional nodes
    """
    constants: Constants
    cells: Dict[Variable, FieldValue]
    domain_size: int
    zeta: FieldValue
    features: FeatureFlags = field(default_factory=FeatureFlags)

    def __post_init__(self) -> None:
        n = self.domain_size
        if n <= 0 or n & (n - 1):
            raise ValueError(f"domain size {n} is not a power of two")
        self.omega = get_omega(n.bit_length() - 1)

    @classmethod
    def from_columns(
        cls,
        constants: Constants,
        columns: Mapping[Column, FF],
        domain_size: int,
        zeta: FieldValue,
        features: Optional[FeatureFlags] = None,
    ) -> "Environment":
        """Build a prover environment from column evaluations over a domain.

        Each array holds one column over the domain; its NEXT-row view is the
        array rotated by one position (circular).
        """
        cells = {}
        for col, values in columns.items():
            cells[Variable(col, CurrOrNext.CURR)] = values
            cells[Variable(col, CurrOrNext.NEXT)] = np.roll(values, -1)
        return cls(
            constants=constants,
            cells=cells,
            domain_size=domain_size,
            zeta=zeta,
            features=features if features is not None else FeatureFlags(),
        )

    def literal(self, value: int) -> FF:
        return to_ff(value)

    def cell(self, var: Variable) -> FieldValue:
        try:
            return self.cells[var]
        except KeyError:
            raise KeyError(f"no value for cell {var!r}") from None

    def challenge(self, kind: ChallengeKind) -> FF:
        c = self.constants
        if kind is ChallengeKind.ALPHA:
            return c.alpha
        if kind is ChallengeKind.BETA:
            return c.beta
        if kind is ChallengeKind.GAMMA:
            return c.gamma
        if kind is ChallengeKind.JOINT_COMBINER:
            return c.joint_combiner
        raise ValueError(f"Unknown challenge: {kind}")

    def mds(self, row: int, col: int) -> FF:
        return to_ff(self.constants.mds[row][col])

    def is_enabled(self, flag: FeatureFlag) -> bool:
        return self.features.is_enabled(flag)

    def vanishes_on_zero_knowledge_and_previous_rows(self) -> FieldValue:
        """prod_{i=1}^{zk_rows+1} (zeta - omega^(n-i))."""
        n = self.domain_size
        result = self.literal(1)
        for i in range(1, self.constants.zk_rows + 2):
            result = result * (self.zeta - self.omega ** (n - i))
        return result

    def unnormalized_lagrange_basis(self, offset: int, zk_rows: bool = False) -> FieldValue:
        """(zeta^n - 1) / (zeta - omega^i) for row i = offset.

        Negative offsets count from the end of the domain; with zk_rows they
        count from the first zero-knowledge row (offset -1 is the last row
        constraints apply to).
        """
        n = self.domain_size
        row = offset - self.constants.zk_rows if zk_rows else offset
        root = self.omega ** (row % n)
        return (self.zeta ** n - self.literal(1)) / (self.zeta - root)
