"""Allocation of powers of alpha to constraint families.

The joint constraint is sum_i alpha^e_i * C_i. If two families shared an
exponent, a violation of one could be cancelled by the other, so every
family gets its own contiguous range of exponents, allocated in
registration order:

    alphas = Alphas()
    alphas.register(ArgumentType.of_gate(GateType.ZERO), 21)   # [0, 21)
    alphas.register(PERMUTATION, 3)                            # [21, 24)
    alphas.get_exponents(PERMUTATION, 3)                       # range(21, 24)

All gate types share one range: a row activates a single gate selector, so
constraints of different gates never overlap on a row. The first gate
registration sizes that range for every gate.

The registration order must be identical for prover and verifier. Misuse
raises AlphasMisuseError and is never recovered from.
"""

import logging
from typing import Dict, List, Optional, Tuple

from circuits.argument import ArgumentKind, ArgumentType
from circuits.gate import GateType
from expr.errors import AlphasMisuseError
from primitives.field import FF

logger = logging.getLogger(__name__)

# Key shared by every gate type
_GATE_KEY = ArgumentType.of_gate(GateType.ZERO)


def _key(ty: ArgumentType) -> ArgumentType:
    return _GATE_KEY if ty.kind is ArgumentKind.GATE else ty


class Alphas:
    """Registry of exponent ranges, keyed by argument type."""

    def __init__(self):
        self.next_power = 0
        # key -> (start, count), insertion order is registration order
        self._mapping: Dict[ArgumentType, Tuple[int, int]] = {}
        self._powers: Optional[List[FF]] = None

    def register(self, ty: ArgumentType, count: int) -> None:
        """Allocate the next `count` exponents to `ty`.

        Raises:
            AlphasMisuseError: If ty (or any gate, for a gate type) is
                already registered, or the registry was instantiated
        """
        if self._powers is not None:
            raise AlphasMisuseError("cannot register constraints after instantiating alphas")
        if count < 0:
            raise AlphasMisuseError(f"negative constraint count {count} for {ty!r}")
        key = _key(ty)
        if key in self._mapping:
            raise AlphasMisuseError(f"{key!r} was already registered")
        self._mapping[key] = (self.next_power, count)
        logger.debug("registered %r -> [%d, %d)", key, self.next_power, self.next_power + count)
        self.next_power += count

    def get_exponents(self, ty: ArgumentType, count: int) -> range:
        """First `count` exponents registered for `ty`.

        A family may ask for fewer exponents than registered (gates share
        the range sized by the largest gate), never for more.

        Raises:
            AlphasMisuseError: If ty was never registered or count exceeds
                the registered count
        """
        key = _key(ty)
        if key not in self._mapping:
            raise AlphasMisuseError(f"constraint {key!r} was not registered")
        start, registered = self._mapping[key]
        if count > registered:
            raise AlphasMisuseError(
                f"asked for {count} exponents, but only {registered} were registered for {key!r}"
            )
        return range(start, start + count)

    def instantiate(self, alpha: FF) -> None:
        """Compute alpha^0 .. alpha^(next_power - 1)."""
        powers = []
        acc = FF(1)
        for _ in range(self.next_power):
            powers.append(acc)
            acc = acc * alpha
        self._powers = powers

    def get_alphas(self, ty: ArgumentType, count: int) -> List[FF]:
        """Powers of alpha for the first `count` exponents of `ty`.

        Raises:
            AlphasMisuseError: If the registry was not instantiated
        """
        if self._powers is None:
            raise AlphasMisuseError("alphas were not instantiated")
        return [self._powers[e] for e in self.get_exponents(ty, count)]

    def ranges(self) -> List[Tuple[ArgumentType, range]]:
        """Registered ranges in registration order."""
        return [(key, range(start, start + n)) for key, (start, n) in self._mapping.items()]

    def __repr__(self) -> str:
        parts = ", ".join(f"{key!r}: [{r.start}, {r.stop})" for key, r in self.ranges())
        return f"Alphas({parts})"
