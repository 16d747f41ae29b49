"""Lookup argument constraints.

The lookup argument proves that every value a gate looks up appears in the
lookup table. The prover sorts the concatenation of queries and table into
k+1 chunks s_0..s_k (k = max lookups per row) and accumulates the grand
product

    aggreg' * prod_{i=0..k} (gamma(1+beta) + s_i + beta s_i')
      = aggreg * (1+beta)^k * prod_j (gamma + f_j) * (gamma(1+beta) + t + beta t')

which starts and ends at 1 only if the sorted chunks are a permutation of
queries plus table. Query j of a row is

    f_j = sum_p LookupKindIndex(p) * sum_m joint_combiner^m * w[...]

over the patterns p that perform at least j+1 lookups per row.

Constraint list:
    0      aggregation recurrence (off the zero-knowledge rows)
    1      aggreg = 1 on the first row
    2      aggreg = 1 on the last row before the zero-knowledge rows
    3..    s_i and s_{i+1} agree where the snake turns (alternating last and
           first row), one per adjacent pair
    last   runtime table vanishes outside the runtime selector
           (runtime tables only)
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from circuits.column import (
    COLUMNS,
    LOOKUP_AGGREG,
    LOOKUP_RUNTIME_SELECTOR,
    LOOKUP_RUNTIME_TABLE,
    LOOKUP_TABLE,
    Column,
)
from circuits.feature_flags import FeatureFlag, LookupFeatures, LookupPattern
from circuits.gate import CurrOrNext
from expr.ast import (
    ChallengeKind,
    Expr,
    UnnormalizedLagrangeBasis,
    VanishesOnZeroKnowledgeAndPreviousRows,
    cell,
    challenge,
    enabled_if,
    one,
    sum_exprs,
    witness_curr,
    zero,
)


@dataclass(frozen=True)
class LookupInfo:
    """Shape of the lookup argument for a set of lookup features.

    Attributes:
        max_per_row: Largest number of lookups any enabled pattern performs
            on one row (k); the argument uses k+1 sorted chunks
        max_joint_size: Largest number of columns combined into one lookup
        kinds: Enabled lookup patterns, in declaration order
        features: The features the info was created from
    """
    max_per_row: int
    max_joint_size: int
    kinds: Tuple[LookupPattern, ...]
    features: LookupFeatures = field(default_factory=LookupFeatures)

    @classmethod
    def create(cls, features: LookupFeatures) -> "LookupInfo":
        kinds = tuple(features.patterns.enabled())
        max_per_row = max((p.max_lookups_per_row for p in kinds), default=0)
        max_joint_size = max((p.max_joint_size for p in kinds), default=0)
        return cls(
            max_per_row=max_per_row,
            max_joint_size=max_joint_size,
            kinds=kinds,
            features=features,
        )

    def sorted_columns(self) -> List[Column]:
        return [Column.lookup_sorted(i) for i in range(self.max_per_row + 1)]


@dataclass(frozen=True)
class LookupConfiguration:
    """Lookup info plus the derived settings the constraints read."""
    lookup_info: LookupInfo

    @property
    def uses_runtime_tables(self) -> bool:
        return self.lookup_info.features.uses_runtime_tables

    @property
    def joint_lookup_used(self) -> bool:
        return self.lookup_info.features.joint_lookup_used


def _query_cells(pattern: LookupPattern, j: int) -> List[Expr]:
    """Witness cells combined into query j of a pattern's row."""
    width = pattern.max_joint_size
    return [witness_curr((j * width + m) % COLUMNS) for m in range(width)]


def _joint(cells: List[Expr], joint_combiner: Expr) -> Expr:
    acc = zero()
    power = one()
    for c in cells:
        acc = acc + power * c
        power = power * joint_combiner
    return acc


def queries(configuration: LookupConfiguration, dynamic: bool = False) -> List[Expr]:
    """The k per-row lookup queries f_0..f_{k-1}.

    With dynamic, each pattern's term is guarded by its pattern flag.
    """
    info = configuration.lookup_info
    if configuration.joint_lookup_used:
        joint_combiner = challenge(ChallengeKind.JOINT_COMBINER)
    else:
        joint_combiner = zero()

    out = []
    for j in range(info.max_per_row):
        terms = []
        for p in info.kinds:
            if j >= p.max_lookups_per_row:
                continue
            term = cell(Column.lookup_kind_index(p)) * _joint(_query_cells(p, j), joint_combiner)
            if dynamic:
                term = enabled_if(FeatureFlag.of_pattern(p), term)
            terms.append(term)
        out.append(sum_exprs(terms))
    return out


def lookup_constraints(configuration: LookupConfiguration, dynamic: bool = False) -> List[Expr]:
    """Constraints of the lookup argument.

    With dynamic, every runtime-table term is wrapped in
    EnabledIf(RUNTIME_LOOKUP_TABLES) and every pattern's query term in its
    pattern flag, so one expression serves circuits with and without them.
    """
    info = configuration.lookup_info
    k = info.max_per_row
    beta = challenge(ChallengeKind.BETA)
    gamma = challenge(ChallengeKind.GAMMA)
    one_plus_beta = 1 + beta
    gamma_beta = gamma * one_plus_beta

    def runtime(e: Expr) -> Expr:
        return enabled_if(FeatureFlag.RUNTIME_LOOKUP_TABLES, e) if dynamic else e

    table = cell(LOOKUP_TABLE)
    table_next = cell(LOOKUP_TABLE, CurrOrNext.NEXT)
    if configuration.uses_runtime_tables:
        table = table + runtime(cell(LOOKUP_RUNTIME_TABLE))
        table_next = table_next + runtime(cell(LOOKUP_RUNTIME_TABLE, CurrOrNext.NEXT))

    sorted_cols = info.sorted_columns()
    aggreg = cell(LOOKUP_AGGREG)
    aggreg_next = cell(LOOKUP_AGGREG, CurrOrNext.NEXT)

    denominator = one()
    for col in sorted_cols:
        s, s_next = cell(col), cell(col, CurrOrNext.NEXT)
        denominator = denominator * (gamma_beta + s + beta * s_next)

    numerator = one_plus_beta ** k
    for f in queries(configuration, dynamic=dynamic):
        numerator = numerator * (gamma + f)
    numerator = numerator * (gamma_beta + table + beta * table_next)

    first_row = UnnormalizedLagrangeBasis(0)
    last_row = UnnormalizedLagrangeBasis(-1, zk_rows=True)

    checks = [
        VanishesOnZeroKnowledgeAndPreviousRows() * (aggreg_next * denominator - aggreg * numerator),
        first_row * (aggreg - 1),
        last_row * (aggreg - 1),
    ]
    for i in range(k):
        turn = last_row if i % 2 == 0 else first_row
        checks.append(turn * (cell(sorted_cols[i]) - cell(sorted_cols[i + 1])))

    if configuration.uses_runtime_tables:
        selector = cell(LOOKUP_RUNTIME_SELECTOR)
        checks.append(runtime((1 - selector) * cell(LOOKUP_RUNTIME_TABLE)))
    return checks
