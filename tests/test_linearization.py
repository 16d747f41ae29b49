"""Tests for the constraint composer, column selector and linearizer entry point."""

import pytest

import protocol.linearization as linearization_module
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
from circuits.feature_flags import (
    FeatureFlag,
    FeatureFlags,
    LookupFeatures,
    LookupPattern,
    LookupPatterns,
)
from circuits.gate import GateType
from constraints import LookupConfiguration, LookupInfo, lookup_constraints
from expr.ast import columns, evaluate, feature_flags
from expr.errors import AlphasMisuseError
from expr.polish import evaluate_polish
from protocol.alphas import Alphas
from protocol.linearization import (
    constraints_expr,
    expr_linearization,
    linearization_columns,
)

GATE = ArgumentType.of_gate(GateType.ZERO)
GENERIC = ArgumentType.of_gate(GateType.GENERIC)

XOR_ONLY = FeatureFlags(
    xor=True,
    lookup_features=LookupFeatures(patterns=LookupPatterns(xor=True)),
)

BASE_COLUMNS = (
    {Column.witness(i) for i in range(COLUMNS)}
    | {Column.coefficient(i) for i in range(COLUMNS)}
    | {Z, Column.index_of(GateType.POSEIDON), Column.index_of(GateType.GENERIC)}
)


class TestLookupConfiguration:
    """Tests for the lookup argument's shape."""

    def test_info_all_features(self) -> None:
        info = LookupInfo.create(LookupFeatures.all())
        assert info.max_per_row == 4
        assert info.max_joint_size == 3
        assert info.kinds == tuple(LookupPattern)

    def test_info_no_patterns(self) -> None:
        info = LookupInfo.create(LookupFeatures())
        assert info.max_per_row == 0
        assert info.kinds == ()

    @pytest.mark.parametrize("features, count", [
        (LookupFeatures.all(), 8),
        (LookupFeatures(patterns=LookupPatterns(xor=True)), 7),
        (LookupFeatures(patterns=LookupPatterns(lookup_gate=True)), 6),
        (LookupFeatures(patterns=LookupPatterns(lookup_gate=True), uses_runtime_tables=True), 7),
    ])
    def test_constraint_count(self, features, count) -> None:
        """Boundary, recurrence, one per adjacent sorted pair, plus runtime."""
        configuration = LookupConfiguration(LookupInfo.create(features))
        assert len(lookup_constraints(configuration)) == count

    def test_dynamic_gates_runtime_terms(self) -> None:
        configuration = LookupConfiguration(LookupInfo.create(LookupFeatures.all()))
        static = lookup_constraints(configuration)
        dynamic = lookup_constraints(configuration, dynamic=True)
        assert all(FeatureFlag.RUNTIME_LOOKUP_TABLES not in feature_flags(c) for c in static)
        assert FeatureFlag.RUNTIME_LOOKUP_TABLES in feature_flags(dynamic[-1])

    def test_dynamic_gates_pattern_terms(self) -> None:
        """Each pattern's query term carries that pattern's flag."""
        configuration = LookupConfiguration(LookupInfo.create(LookupFeatures.all()))
        pattern_flags = {FeatureFlag.of_pattern(p) for p in LookupPattern}
        recurrence = lookup_constraints(configuration, dynamic=True)[0]
        assert pattern_flags <= feature_flags(recurrence)
        static = lookup_constraints(configuration)[0]
        assert not pattern_flags & feature_flags(static)


class TestConstraintsExpr:
    """Tests for constraints_expr."""

    def test_generic_uses_alpha_zero(self) -> None:
        for flags in (None, FeatureFlags(), XOR_ONLY):
            _, alphas = constraints_expr(flags, generic=True)
            assert alphas.get_exponents(GENERIC, 1) == range(0, 1)

    def test_generic_not_at_alpha_zero_fails(self, monkeypatch) -> None:
        """A registry that hands the gates a later range is rejected."""
        class LookupFirst(Alphas):
            def __init__(self):
                super().__init__()
                self.register(LOOKUP, 1)

        monkeypatch.setattr(linearization_module, "Alphas", LookupFirst)
        with pytest.raises(AlphasMisuseError, match=r"alpha\^0"):
            constraints_expr(FeatureFlags(), generic=True)

    def test_two_families_span(self, monkeypatch) -> None:
        """A 4-constraint gate family and the 3-constraint permutation span 7."""
        monkeypatch.setattr(linearization_module, "MAX_GATE_CONSTRAINTS", 4)
        monkeypatch.setattr(linearization_module, "_MANDATORY", ())
        monkeypatch.setattr(linearization_module, "_OPTIONAL", ())
        _, alphas = constraints_expr(FeatureFlags(), generic=False)
        assert alphas.next_power == 7
        assert alphas.ranges() == [(GATE, range(0, 4)), (PERMUTATION, range(4, 7))]

    def test_universal_registration_order(self) -> None:
        _, alphas = constraints_expr(None, generic=True)
        assert alphas.ranges() == [
            (GATE, range(0, 21)),
            (PERMUTATION, range(21, 24)),
            (LOOKUP, range(24, 32)),
        ]

    def test_no_lookup_registers_no_lookup(self) -> None:
        _, alphas = constraints_expr(FeatureFlags(), generic=True)
        assert alphas.ranges() == [(GATE, range(0, 21)), (PERMUTATION, range(21, 24))]

    def test_concrete_lookup_count(self) -> None:
        _, alphas = constraints_expr(XOR_ONLY, generic=True)
        assert alphas.get_exponents(LOOKUP, 7) == range(24, 31)

    def test_absent_flags_wrap_every_optional_family(self) -> None:
        expr, _ = constraints_expr(None, generic=True)
        assert feature_flags(expr) == set(FeatureFlag)

    def test_disabled_families_are_omitted(self) -> None:
        expr, _ = constraints_expr(FeatureFlags(), generic=True)
        cols = columns(expr)
        assert feature_flags(expr) == set()
        for gate in (GateType.CHACHA0, GateType.CHACHA_FINAL, GateType.RANGE_CHECK0,
                     GateType.FOREIGN_FIELD_ADD, GateType.FOREIGN_FIELD_MUL, GateType.XOR16):
            assert Column.index_of(gate) not in cols
        for gate in (GateType.POSEIDON, GateType.VAR_BASE_MUL, GateType.COMPLETE_ADD,
                     GateType.ENDO_MUL, GateType.ENDO_MUL_SCALAR, GateType.GENERIC):
            assert Column.index_of(gate) in cols

    def test_enabled_families_are_included_unwrapped(self) -> None:
        expr, _ = constraints_expr(FeatureFlags(chacha=True, range_check=True), generic=False)
        cols = columns(expr)
        assert feature_flags(expr) == set()
        assert Column.index_of(GateType.CHACHA2) in cols
        assert Column.index_of(GateType.RANGE_CHECK1) in cols
        assert Column.index_of(GateType.XOR16) not in cols
        assert Column.index_of(GateType.GENERIC) not in cols

    def test_deterministic(self) -> None:
        assert constraints_expr(None, generic=True)[0] == constraints_expr(None, generic=True)[0]

    def test_lookup_count_overflow(self, monkeypatch) -> None:
        class Huge(list):
            def __len__(self):
                return 2 ** 32

        monkeypatch.setattr(
            linearization_module, "lookup_constraints", lambda configuration, dynamic=False: Huge()
        )
        with pytest.raises(OverflowError):
            constraints_expr(None, generic=True)


class TestLinearizationColumns:
    """Tests for linearization_columns."""

    def test_universal_set(self) -> None:
        lookup = (
            {Column.lookup_sorted(i) for i in range(5)}
            | {LOOKUP_AGGREG, LOOKUP_TABLE, LOOKUP_RUNTIME_TABLE, LOOKUP_RUNTIME_SELECTOR}
            | {Column.lookup_kind_index(p) for p in LookupPattern}
        )
        assert linearization_columns(None) == BASE_COLUMNS | lookup

    def test_absent_flags_match_all_flags(self) -> None:
        assert linearization_columns(None) == linearization_columns(FeatureFlags.all())

    def test_no_lookup(self) -> None:
        assert linearization_columns(FeatureFlags()) == BASE_COLUMNS

    def test_concrete_patterns(self) -> None:
        cols = linearization_columns(XOR_ONLY)
        assert Column.lookup_sorted(4) in cols
        assert Column.lookup_sorted(5) not in cols
        assert Column.lookup_kind_index(LookupPattern.XOR) in cols
        assert Column.lookup_kind_index(LookupPattern.LOOKUP) not in cols
        assert LOOKUP_RUNTIME_TABLE not in cols


class TestExprLinearization:
    """Tests for the linearizer entry point."""

    @pytest.mark.parametrize("flags", [None, FeatureFlags(), XOR_ONLY, FeatureFlags.all()])
    def test_linearizes(self, flags) -> None:
        """Only non-opened gate selectors remain as index terms."""
        lin, _ = expr_linearization(flags, generic=True)
        for col in lin.columns():
            assert col not in linearization_columns(flags)
            assert col.kind == Column.index_of(GateType.XOR16).kind

    def test_universal_index_terms(self) -> None:
        lin, _ = expr_linearization(None, generic=True)
        expected = sorted(
            Column.index_of(g) for g in GateType
            if g not in (GateType.ZERO, GateType.GENERIC, GateType.POSEIDON, GateType.LOOKUP)
        )
        assert list(lin.columns()) == expected

    def test_deterministic(self) -> None:
        first, _ = expr_linearization(None, generic=True)
        second, _ = expr_linearization(None, generic=True)
        assert first == second

    @pytest.mark.parametrize("features", [FeatureFlags(), XOR_ONLY, FeatureFlags.all()])
    def test_identity(self, features, random_env) -> None:
        """The compiled linearization evaluates to the joint constraint."""
        expr, _ = constraints_expr(None, generic=True)
        lin, _ = expr_linearization(None, generic=True)
        env = random_env(expr, features=features)
        assert lin.evaluate(env, evaluate_polish) == evaluate(expr, env)

    def test_universal_program_matches_concrete_expression(self, random_env) -> None:
        """With every feature on, the universal program equals the concrete one."""
        universal, _ = expr_linearization(None, generic=True)
        concrete, _ = expr_linearization(FeatureFlags.all(), generic=True)
        expr, _ = constraints_expr(FeatureFlags.all(), generic=True)
        env = random_env(expr, features=FeatureFlags.all())
        assert universal.columns() == concrete.columns()
        assert (universal.evaluate(env, evaluate_polish)
                == concrete.evaluate(env, evaluate_polish))
