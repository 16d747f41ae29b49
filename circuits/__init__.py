"""Circuits - Column model, gate kinds and feature configuration."""

from circuits.argument import LOOKUP, PERMUTATION, ArgumentKind, ArgumentType
from circuits.column import (
    COLUMNS,
    LOOKUP_AGGREG,
    LOOKUP_RUNTIME_SELECTOR,
    LOOKUP_RUNTIME_TABLE,
    LOOKUP_TABLE,
    Z,
    Column,
    ColumnKind,
    Variable,
)
from circuits.feature_flags import (
    FeatureFlag,
    FeatureFlags,
    LookupFeatures,
    LookupPattern,
    LookupPatterns,
)
from circuits.gate import CurrOrNext, GateType

__all__ = [
    # Gates
    "GateType",
    "CurrOrNext",
    # Columns
    "COLUMNS",
    "Column",
    "ColumnKind",
    "Variable",
    "Z",
    "LOOKUP_AGGREG",
    "LOOKUP_TABLE",
    "LOOKUP_RUNTIME_TABLE",
    "LOOKUP_RUNTIME_SELECTOR",
    # Arguments
    "ArgumentKind",
    "ArgumentType",
    "PERMUTATION",
    "LOOKUP",
    # Features
    "FeatureFlag",
    "FeatureFlags",
    "LookupFeatures",
    "LookupPattern",
    "LookupPatterns",
]
