"""Base class for constraint families.

Every gate family states its constraints once, as symbolic expressions over
the cells of a row (and the next row). The compiler weights them with the
family's powers of alpha and guards the sum with the gate's selector:

    combined = Index(gate) * sum_i alpha^e_i * C_i

Example:
    class Xor16(Argument):
        ARGUMENT_TYPE = ArgumentType.of_gate(GateType.XOR16)
        CONSTRAINTS = 3

        @classmethod
        def constraint_checks(cls):
            return [...]

    expr = Xor16.combined_constraints(alphas)
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

from circuits.argument import ArgumentType
from expr.ast import Expr, combine_constraints, index

if TYPE_CHECKING:
    from protocol.alphas import Alphas


class Argument(ABC):
    """A constraint family with a statically known number of constraints."""

    ARGUMENT_TYPE: ArgumentType
    CONSTRAINTS: int

    @classmethod
    @abstractmethod
    def constraint_checks(cls) -> List[Expr]:
        """The family's constraints, each of which must vanish on active rows."""

    @classmethod
    def constraint_count(cls) -> int:
        """Number of constraints, known before any alpha is allocated."""
        return cls.CONSTRAINTS

    @classmethod
    def combined_constraints(cls, alphas: "Alphas") -> Expr:
        """Selector times the alpha-weighted sum of the constraints.

        Raises:
            ValueError: If constraint_checks() disagrees with CONSTRAINTS
        """
        checks = cls.constraint_checks()
        if len(checks) != cls.CONSTRAINTS:
            raise ValueError(
                f"{cls.__name__} declares {cls.CONSTRAINTS} constraints "
                f"but defines {len(checks)}"
            )
        exponents = alphas.get_exponents(cls.ARGUMENT_TYPE, cls.CONSTRAINTS)
        return index(cls.ARGUMENT_TYPE.gate) * combine_constraints(exponents, checks)
