"""Joint constraint of the proof system and its linearization.

constraints_expr() combines every constraint family into one expression,
giving each family its own powers of alpha:

    Gate(*)      one shared range sized by the largest gate
    Permutation  reserved only; its terms are added by the protocol
    Lookup       sized by the lookup configuration

With concrete feature flags, absent families are left out entirely. Without
flags the result is universal: optional families are wrapped in
EnabledIf(flag, ...) and switched on or off when the program runs.

expr_linearization() linearizes that expression against the columns the
protocol opens (linearization_columns()) and compiles every term to Polish
tokens.
"""

import logging
from typing import Optional, Set, Tuple

from circuits.argument import LOOKUP, PERMUTATION, ArgumentType
from circuits.column import (
    COLUMNS,
    LOOKUP_AGGREG,
    LOOKUP_RUNTIME_SELECTOR,
    LOOKUP_RUNTIME_TABLE,
    LOOKUP_TABLE,
    Z,
    Column,
)
from circuits.feature_flags import FeatureFlag, FeatureFlags, LookupFeatures
from circuits.gate import GateType
from constraints import (
    MAX_GATE_CONSTRAINTS,
    ChaCha0,
    ChaCha1,
    ChaCha2,
    ChaChaFinal,
    CompleteAdd,
    EndomulScalar,
    EndosclMul,
    ForeignFieldAdd,
    ForeignFieldMul,
    Generic,
    LookupConfiguration,
    LookupInfo,
    Poseidon,
    VarbaseMul,
    Xor16,
    lookup_constraints,
)
from constraints import permutation, range_check
from expr.ast import Expr, combine_constraints, enabled_if, zero
from expr.errors import AlphasMisuseError
from expr.linearize import Linearization, linearize
from expr.polish import PolishToken, to_polish
from protocol.alphas import Alphas

logger = logging.getLogger(__name__)

U32_MAX = 2 ** 32 - 1

# Families that every circuit may use
_MANDATORY = (Poseidon, VarbaseMul, CompleteAdd, EndosclMul, EndomulScalar)


def _chacha(alphas: Alphas) -> Expr:
    return (
        ChaCha0.combined_constraints(alphas)
        + ChaCha1.combined_constraints(alphas)
        + ChaCha2.combined_constraints(alphas)
        + ChaChaFinal.combined_constraints(alphas)
    )


# (flag, attribute of FeatureFlags, builder) in composition order
_OPTIONAL = (
    (FeatureFlag.CHACHA, "chacha", _chacha),
    (FeatureFlag.RANGE_CHECK, "range_check", range_check.combined_constraints),
    (FeatureFlag.FOREIGN_FIELD_ADD, "foreign_field_add", ForeignFieldAdd.combined_constraints),
    (FeatureFlag.FOREIGN_FIELD_MUL, "foreign_field_mul", ForeignFieldMul.combined_constraints),
    (FeatureFlag.XOR, "xor", Xor16.combined_constraints),
)


def _lookup_expr(alphas: Alphas, features: LookupFeatures, dynamic: bool) -> Expr:
    configuration = LookupConfiguration(LookupInfo.create(features))
    constraints = lookup_constraints(configuration, dynamic=dynamic)
    count = len(constraints)
    if count > U32_MAX:
        raise OverflowError(f"lookup constraint count {count} does not fit in 32 bits")
    alphas.register(LOOKUP, count)
    logger.debug("lookup argument: %d constraints, %d lookups per row",
                 count, configuration.lookup_info.max_per_row)
    return combine_constraints(alphas.get_exponents(LOOKUP, count), constraints)


def constraints_expr(
    feature_flags: Optional[FeatureFlags], generic: bool
) -> Tuple[Expr, Alphas]:
    """Build the joint constraint expression and its exponent registry.

    Args:
        feature_flags: Families present in a concrete circuit, or None for an
            expression valid for every circuit
        generic: Whether to include the generic gate

    Returns:
        (expression, alphas) with alphas holding the registration order the
        prover and verifier must reproduce

    Raises:
        OverflowError: If the lookup constraint count does not fit in 32 bits
        AlphasMisuseError: If the generic gate is not assigned alpha^0
    """
    alphas = Alphas()
    alphas.register(ArgumentType.of_gate(GateType.ZERO), MAX_GATE_CONSTRAINTS)

    expr = zero()
    for argument in _MANDATORY:
        expr = expr + argument.combined_constraints(alphas)

    for flag, attr, build in _OPTIONAL:
        if feature_flags is None:
            expr = expr + enabled_if(flag, build(alphas))
        elif getattr(feature_flags, attr):
            expr = expr + build(alphas)

    if generic:
        expr = expr + Generic.combined_constraints(alphas)

    alphas.register(permutation.ARGUMENT_TYPE, permutation.CONSTRAINTS)

    if feature_flags is None:
        lookup = _lookup_expr(alphas, LookupFeatures.all(), dynamic=True)
        expr = expr + enabled_if(FeatureFlag.LOOKUP_TABLES, lookup)
    elif not feature_flags.lookup_features.patterns.is_default():
        expr = expr + _lookup_expr(alphas, feature_flags.lookup_features, dynamic=False)

    # Public inputs are added to the generic gate with weight alpha^0
    generic_exponents = alphas.get_exponents(Generic.ARGUMENT_TYPE, 1)
    if generic_exponents.start != 0:
        raise AlphasMisuseError(
            f"generic gate must use alpha^0, got alpha^{generic_exponents.start}"
        )

    logger.info("composed constraints: %r", alphas)
    return expr, alphas


def linearization_columns(feature_flags: Optional[FeatureFlags]) -> Set[Column]:
    """Columns the protocol opens at zeta and zeta*omega.

    These are the columns the linearizer may keep inside coefficients.
    Without flags every lookup feature counts as enabled, since the
    universal expression still references them.
    """
    if feature_flags is None:
        feature_flags = FeatureFlags.all()

    columns = {Column.witness(i) for i in range(COLUMNS)}
    columns |= {Column.coefficient(i) for i in range(COLUMNS)}

    lookup_features = feature_flags.lookup_features
    if not lookup_features.patterns.is_default():
        info = LookupInfo.create(lookup_features)
        columns.update(info.sorted_columns())
        columns.add(LOOKUP_AGGREG)
        columns.add(LOOKUP_TABLE)
        columns.update(Column.lookup_kind_index(p) for p in info.kinds)
        if lookup_features.uses_runtime_tables:
            columns.add(LOOKUP_RUNTIME_TABLE)
            columns.add(LOOKUP_RUNTIME_SELECTOR)

    columns.add(Z)
    columns.add(Column.index_of(GateType.POSEIDON))
    columns.add(Column.index_of(GateType.GENERIC))
    return columns


def expr_linearization(
    feature_flags: Optional[FeatureFlags], generic: bool
) -> Tuple[Linearization[list[PolishToken]], Alphas]:
    """Linearize the joint constraint and compile every term.

    Raises:
        FailedLinearizationError: If a monomial multiplies unevaluated columns
        MissingEvaluationError: If an unevaluated column is read at the next row
    """
    evaluated = linearization_columns(feature_flags)
    expr, alphas = constraints_expr(feature_flags, generic)
    linearization = linearize(expr, evaluated).map(to_polish)
    logger.info(
        "linearization: %d constant tokens, %d index terms %s",
        len(linearization.constant_term),
        len(linearization.index_terms),
        list(linearization.columns()),
    )
    return linearization, alphas
