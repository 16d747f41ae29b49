"""Registry keys of constraint families."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from circuits.gate import GateType


class ArgumentKind(IntEnum):
    GATE = 0
    PERMUTATION = 1
    LOOKUP = 2


@dataclass(frozen=True, order=True)
class ArgumentType:
    """A constraint family: a gate kind, the permutation or the lookup argument."""
    kind: ArgumentKind
    gate: Optional[GateType] = None

    @classmethod
    def of_gate(cls, gate: GateType) -> "ArgumentType":
        return cls(ArgumentKind.GATE, gate)

    @property
    def is_gate(self) -> bool:
        return self.kind is ArgumentKind.GATE

    def __repr__(self) -> str:
        if self.is_gate:
            return f"Gate({self.gate.display_name})"
        return self.kind.name.capitalize()


PERMUTATION = ArgumentType(ArgumentKind.PERMUTATION)
LOOKUP = ArgumentType(ArgumentKind.LOOKUP)
