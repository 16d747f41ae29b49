"""Gate kinds and row offsets."""

from enum import Enum, IntEnum


class GateType(IntEnum):
    """Kind of gate a circuit row implements.

    The integer value is the selector index; it also orders selector
    columns deterministically.
    """
    ZERO = 0
    GENERIC = 1
    POSEIDON = 2
    COMPLETE_ADD = 3
    VAR_BASE_MUL = 4
    ENDO_MUL = 5
    ENDO_MUL_SCALAR = 6
    CHACHA0 = 7
    CHACHA1 = 8
    CHACHA2 = 9
    CHACHA_FINAL = 10
    LOOKUP = 11
    RANGE_CHECK0 = 12
    RANGE_CHECK1 = 13
    FOREIGN_FIELD_ADD = 14
    FOREIGN_FIELD_MUL = 15
    XOR16 = 16

    @property
    def display_name(self) -> str:
        """CamelCase name used in column reprs, e.g. 'CompleteAdd'."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class CurrOrNext(Enum):
    """Row a cell reference reads: the current row or the next one."""
    CURR = 0
    NEXT = 1

    def shift(self) -> int:
        """Row offset relative to the current row."""
        return self.value

    def __lt__(self, other: "CurrOrNext") -> bool:
        if not isinstance(other, CurrOrNext):
            return NotImplemented
        return self.value < other.value
