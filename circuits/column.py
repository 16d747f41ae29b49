"""Column model: every named slot a constraint expression can reference."""

from dataclasses import dataclass
from enum import IntEnum

from circuits.feature_flags import LookupPattern
from circuits.gate import CurrOrNext, GateType

# Number of witness (and coefficient) columns of a row
COLUMNS = 15


class ColumnKind(IntEnum):
    """Variant of a column; the value orders columns of different kinds."""
    WITNESS = 0
    COEFFICIENT = 1
    Z = 2
    LOOKUP_SORTED = 3
    LOOKUP_AGGREG = 4
    LOOKUP_TABLE = 5
    LOOKUP_RUNTIME_TABLE = 6
    LOOKUP_RUNTIME_SELECTOR = 7
    LOOKUP_KIND_INDEX = 8
    INDEX = 9


@dataclass(frozen=True, order=True)
class Column:
    """A column identified by (kind, index).

    index is the witness/coefficient/sorted slot, the GateType value of an
    Index selector, or the LookupPattern ordinal of a lookup kind selector;
    it is 0 for single-column kinds.
    """
    kind: ColumnKind
    index: int = 0

    @classmethod
    def witness(cls, i: int) -> "Column":
        if not 0 <= i < COLUMNS:
            raise ValueError(f"witness column {i} out of range [0, {COLUMNS})")
        return cls(ColumnKind.WITNESS, i)

    @classmethod
    def coefficient(cls, i: int) -> "Column":
        if not 0 <= i < COLUMNS:
            raise ValueError(f"coefficient column {i} out of range [0, {COLUMNS})")
        return cls(ColumnKind.COEFFICIENT, i)

    @classmethod
    def lookup_sorted(cls, i: int) -> "Column":
        if i < 0:
            raise ValueError(f"sorted lookup column {i} must be non-negative")
        return cls(ColumnKind.LOOKUP_SORTED, i)

    @classmethod
    def index_of(cls, gate: GateType) -> "Column":
        """Selector column of a gate kind."""
        return cls(ColumnKind.INDEX, int(gate))

    @classmethod
    def lookup_kind_index(cls, pattern: LookupPattern) -> "Column":
        """Selector column of a lookup pattern."""
        return cls(ColumnKind.LOOKUP_KIND_INDEX, pattern.ordinal)

    def __repr__(self) -> str:
        kind = self.kind
        if kind is ColumnKind.WITNESS:
            return f"Witness({self.index})"
        if kind is ColumnKind.COEFFICIENT:
            return f"Coefficient({self.index})"
        if kind is ColumnKind.LOOKUP_SORTED:
            return f"LookupSorted({self.index})"
        if kind is ColumnKind.INDEX:
            return f"Index({GateType(self.index).display_name})"
        if kind is ColumnKind.LOOKUP_KIND_INDEX:
            return f"LookupKindIndex({list(LookupPattern)[self.index].name})"
        return {
            ColumnKind.Z: "Z",
            ColumnKind.LOOKUP_AGGREG: "LookupAggreg",
            ColumnKind.LOOKUP_TABLE: "LookupTable",
            ColumnKind.LOOKUP_RUNTIME_TABLE: "LookupRuntimeTable",
            ColumnKind.LOOKUP_RUNTIME_SELECTOR: "LookupRuntimeSelector",
        }[kind]


# Single-column kinds
Z = Column(ColumnKind.Z)
LOOKUP_AGGREG = Column(ColumnKind.LOOKUP_AGGREG)
LOOKUP_TABLE = Column(ColumnKind.LOOKUP_TABLE)
LOOKUP_RUNTIME_TABLE = Column(ColumnKind.LOOKUP_RUNTIME_TABLE)
LOOKUP_RUNTIME_SELECTOR = Column(ColumnKind.LOOKUP_RUNTIME_SELECTOR)


@dataclass(frozen=True, order=True)
class Variable:
    """A cell: a column read at the current or the next row."""
    col: Column
    row: CurrOrNext = CurrOrNext.CURR

    def __repr__(self) -> str:
        suffix = "" if self.row is CurrOrNext.CURR else "'"
        return f"{self.col!r}{suffix}"
