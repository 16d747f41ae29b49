"""Feature configuration of a circuit.

A circuit enables only some of the optional gate families and lookup
patterns. The compiler either specialises the joint constraint expression to
a concrete FeatureFlags value, or (when no value is given) keeps every
optional family behind a conditional node keyed by a FeatureFlag.

Configuration file format (camelCase JSON, missing keys default to false, values
must be JSON booleans):

    {
        "chacha": false,
        "rangeCheck": true,
        "foreignFieldAdd": false,
        "foreignFieldMul": false,
        "xor": true,
        "lookupFeatures": {
            "patterns": {"xor": true, "rangeCheckGate": true},
            "jointLookupUsed": true,
            "usesRuntimeTables": false
        }
    }
"""

import json
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Iterator, Optional

from circuits.gate import GateType


class FeatureFlag(Enum):
    """Identity of an optional family or lookup pattern, as carried by
    conditional nodes."""
    CHACHA = 0
    RANGE_CHECK = 1
    FOREIGN_FIELD_ADD = 2
    FOREIGN_FIELD_MUL = 3
    XOR = 4
    LOOKUP_TABLES = 5
    RUNTIME_LOOKUP_TABLES = 6
    LOOKUP_PATTERN_XOR = 7
    LOOKUP_PATTERN_CHACHA_FINAL = 8
    LOOKUP_PATTERN_LOOKUP = 9
    LOOKUP_PATTERN_RANGE_CHECK = 10
    LOOKUP_PATTERN_FOREIGN_FIELD_MUL = 11

    @classmethod
    def of_pattern(cls, pattern: "LookupPattern") -> "FeatureFlag":
        return _PATTERN_FLAGS[pattern]

    @property
    def pattern(self) -> Optional["LookupPattern"]:
        """The lookup pattern this flag stands for, if any."""
        return _FLAG_PATTERNS.get(self)

    def __lt__(self, other: "FeatureFlag") -> bool:
        if not isinstance(other, FeatureFlag):
            return NotImplemented
        return self.value < other.value


class LookupPattern(Enum):
    """Family of lookups a gate performs.

    Value: (max lookups per row, max joint size, gate whose selector
    activates the pattern).
    """
    XOR = (4, 3, GateType.XOR16)
    CHACHA_FINAL = (4, 3, GateType.CHACHA_FINAL)
    LOOKUP = (3, 2, GateType.LOOKUP)
    RANGE_CHECK = (4, 1, GateType.RANGE_CHECK0)
    FOREIGN_FIELD_MUL = (4, 1, GateType.FOREIGN_FIELD_MUL)

    @property
    def max_lookups_per_row(self) -> int:
        return self.value[0]

    @property
    def max_joint_size(self) -> int:
        return self.value[1]

    @property
    def gate(self) -> GateType:
        return self.value[2]

    @property
    def ordinal(self) -> int:
        """Position in declaration order, used as a column index."""
        return list(LookupPattern).index(self)


_PATTERN_FLAGS = {
    LookupPattern.XOR: FeatureFlag.LOOKUP_PATTERN_XOR,
    LookupPattern.CHACHA_FINAL: FeatureFlag.LOOKUP_PATTERN_CHACHA_FINAL,
    LookupPattern.LOOKUP: FeatureFlag.LOOKUP_PATTERN_LOOKUP,
    LookupPattern.RANGE_CHECK: FeatureFlag.LOOKUP_PATTERN_RANGE_CHECK,
    LookupPattern.FOREIGN_FIELD_MUL: FeatureFlag.LOOKUP_PATTERN_FOREIGN_FIELD_MUL,
}
_FLAG_PATTERNS = {flag: pattern for pattern, flag in _PATTERN_FLAGS.items()}


# JSON key -> dataclass attribute, in declaration order
_PATTERN_KEYS = {
    "xor": "xor",
    "chachaFinal": "chacha_final",
    "lookupGate": "lookup_gate",
    "rangeCheckGate": "range_check_gate",
    "foreignFieldMulGate": "foreign_field_mul_gate",
}

_PATTERN_ATTRS = {
    LookupPattern.XOR: "xor",
    LookupPattern.CHACHA_FINAL: "chacha_final",
    LookupPattern.LOOKUP: "lookup_gate",
    LookupPattern.RANGE_CHECK: "range_check_gate",
    LookupPattern.FOREIGN_FIELD_MUL: "foreign_field_mul_gate",
}

_FLAG_KEYS = {
    "chacha": "chacha",
    "rangeCheck": "range_check",
    "foreignFieldAdd": "foreign_field_add",
    "foreignFieldMul": "foreign_field_mul",
    "xor": "xor",
}


def _check_keys(d: Any, allowed, where: str) -> None:
    if not isinstance(d, dict):
        raise ValueError(f"{where} must be an object, got {d!r}")
    unknown = set(d) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown keys in {where}: {sorted(unknown)}")


def _get_bool(d: dict, key: str, where: str) -> bool:
    value = d.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"{where}: {key} must be true or false, got {value!r}")
    return value


@dataclass(frozen=True)
class LookupPatterns:
    """Which lookup patterns a circuit uses.

    The default value (everything disabled) means "no lookups at all".
    """
    xor: bool = False
    chacha_final: bool = False
    lookup_gate: bool = False
    range_check_gate: bool = False
    foreign_field_mul_gate: bool = False

    @classmethod
    def all(cls) -> "LookupPatterns":
        return cls(**{f.name: True for f in fields(cls)})

    def is_default(self) -> bool:
        return self == LookupPatterns()

    def __contains__(self, pattern: LookupPattern) -> bool:
        return getattr(self, _PATTERN_ATTRS[pattern])

    def enabled(self) -> Iterator[LookupPattern]:
        """Enabled patterns in declaration order."""
        return (p for p in LookupPattern if p in self)

    @classmethod
    def from_dict(cls, d: dict) -> "LookupPatterns":
        _check_keys(d, _PATTERN_KEYS, "lookup patterns")
        return cls(**{
            attr: _get_bool(d, key, "lookup patterns") for key, attr in _PATTERN_KEYS.items()
        })

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for key, attr in _PATTERN_KEYS.items()}


@dataclass(frozen=True)
class LookupFeatures:
    """Lookup configuration: patterns plus table-level switches."""
    patterns: LookupPatterns = field(default_factory=LookupPatterns)
    joint_lookup_used: bool = False
    uses_runtime_tables: bool = False

    @classmethod
    def all(cls) -> "LookupFeatures":
        return cls(
            patterns=LookupPatterns.all(),
            joint_lookup_used=True,
            uses_runtime_tables=True,
        )

    @classmethod
    def from_dict(cls, d: dict) -> "LookupFeatures":
        _check_keys(d, ("patterns", "jointLookupUsed", "usesRuntimeTables"), "lookup features")
        return cls(
            patterns=LookupPatterns.from_dict(d.get("patterns", {})),
            joint_lookup_used=_get_bool(d, "jointLookupUsed", "lookup features"),
            uses_runtime_tables=_get_bool(d, "usesRuntimeTables", "lookup features"),
        )

    def to_dict(self) -> dict:
        return {
            "patterns": self.patterns.to_dict(),
            "jointLookupUsed": self.joint_lookup_used,
            "usesRuntimeTables": self.uses_runtime_tables,
        }


@dataclass(frozen=True)
class FeatureFlags:
    """Optional families present in a concrete circuit."""
    chacha: bool = False
    range_check: bool = False
    foreign_field_add: bool = False
    foreign_field_mul: bool = False
    xor: bool = False
    lookup_features: LookupFeatures = field(default_factory=LookupFeatures)

    @classmethod
    def all(cls) -> "FeatureFlags":
        """Every optional family and every lookup feature enabled."""
        return cls(
            chacha=True,
            range_check=True,
            foreign_field_add=True,
            foreign_field_mul=True,
            xor=True,
            lookup_features=LookupFeatures.all(),
        )

    def is_enabled(self, flag: FeatureFlag) -> bool:
        """Runtime value of a conditional node's flag."""
        if flag is FeatureFlag.CHACHA:
            return self.chacha
        if flag is FeatureFlag.RANGE_CHECK:
            return self.range_check
        if flag is FeatureFlag.FOREIGN_FIELD_ADD:
            return self.foreign_field_add
        if flag is FeatureFlag.FOREIGN_FIELD_MUL:
            return self.foreign_field_mul
        if flag is FeatureFlag.XOR:
            return self.xor
        if flag is FeatureFlag.LOOKUP_TABLES:
            return not self.lookup_features.patterns.is_default()
        if flag is FeatureFlag.RUNTIME_LOOKUP_TABLES:
            return self.lookup_features.uses_runtime_tables
        if flag.pattern is not None:
            return flag.pattern in self.lookup_features.patterns
        raise ValueError(f"Unknown feature flag: {flag}")

    @classmethod
    def from_dict(cls, d: dict) -> "FeatureFlags":
        """Parse a camelCase circuit configuration."""
        _check_keys(d, (*_FLAG_KEYS, "lookupFeatures"), "feature flags")
        return cls(
            **{attr: _get_bool(d, key, "feature flags") for key, attr in _FLAG_KEYS.items()},
            lookup_features=LookupFeatures.from_dict(d.get("lookupFeatures", {})),
        )

    @classmethod
    def from_json(cls, path: str) -> "FeatureFlags":
        """Load FeatureFlags from a JSON configuration file."""
        with open(path) as f:
            j = json.load(f)
        return cls.from_dict(j)

    def to_dict(self) -> dict:
        d = {key: getattr(self, attr) for key, attr in _FLAG_KEYS.items()}
        d["lookupFeatures"] = self.lookup_features.to_dict()
        return d
