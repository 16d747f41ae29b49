"""Constraint providers, one per gate family, plus the lookup argument.

Each gate family is an Argument subclass stating its constraints over the
cells of a row. GATE_ARGUMENTS maps every gate kind with constraints to its
provider; the compiler combines them with disjoint powers of alpha.

The permutation and lookup arguments are not gates: the permutation only
reserves exponents, and the lookup constraints depend on the circuit's
lookup configuration.
"""

from circuits.gate import GateType

from .base import Argument
from .chacha import ChaCha0, ChaCha1, ChaCha2, ChaChaFinal
from .complete_add import CompleteAdd
from .endomul_scalar import EndomulScalar
from .endosclmul import EndosclMul
from .foreign_field_add import ForeignFieldAdd
from .foreign_field_mul import ForeignFieldMul
from .generic import Generic
from .lookup import LookupConfiguration, LookupInfo, lookup_constraints
from .poseidon import Poseidon
from .range_check import RangeCheck0, RangeCheck1
from .varbasemul import VarbaseMul
from .xor import Xor16

# Registry mapping gate kinds to their constraint providers
GATE_ARGUMENTS: dict[GateType, type[Argument]] = {
    GateType.GENERIC: Generic,
    GateType.POSEIDON: Poseidon,
    GateType.COMPLETE_ADD: CompleteAdd,
    GateType.VAR_BASE_MUL: VarbaseMul,
    GateType.ENDO_MUL: EndosclMul,
    GateType.ENDO_MUL_SCALAR: EndomulScalar,
    GateType.CHACHA0: ChaCha0,
    GateType.CHACHA1: ChaCha1,
    GateType.CHACHA2: ChaCha2,
    GateType.CHACHA_FINAL: ChaChaFinal,
    GateType.RANGE_CHECK0: RangeCheck0,
    GateType.RANGE_CHECK1: RangeCheck1,
    GateType.FOREIGN_FIELD_ADD: ForeignFieldAdd,
    GateType.FOREIGN_FIELD_MUL: ForeignFieldMul,
    GateType.XOR16: Xor16,
}

# Size of the exponent range shared by all gates
MAX_GATE_CONSTRAINTS = max(arg.CONSTRAINTS for arg in GATE_ARGUMENTS.values())


def get_argument(gate_type: GateType) -> type[Argument]:
    """Get the constraint provider of a gate kind.

    Raises:
        KeyError: If the gate kind has no constraints (Zero, Lookup)
    """
    if gate_type not in GATE_ARGUMENTS:
        raise KeyError(f"No constraint provider for gate: {gate_type.display_name}")
    return GATE_ARGUMENTS[gate_type]


__all__ = [
    "Argument",
    "GATE_ARGUMENTS",
    "MAX_GATE_CONSTRAINTS",
    "get_argument",
    "ChaCha0",
    "ChaCha1",
    "ChaCha2",
    "ChaChaFinal",
    "CompleteAdd",
    "EndomulScalar",
    "EndosclMul",
    "ForeignFieldAdd",
    "ForeignFieldMul",
    "Generic",
    "Poseidon",
    "RangeCheck0",
    "RangeCheck1",
    "VarbaseMul",
    "Xor16",
    "LookupConfiguration",
    "LookupInfo",
    "lookup_constraints",
]
