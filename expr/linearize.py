"""Linearization of a constraint expression against a set of evaluated columns.

The proof protocol opens a fixed set of columns at zeta (and zeta*omega):
their values are known to the verifier. Every other column appears in the
linearization polynomial through its commitment, which is only possible if
the joint constraint is *linear* in the unevaluated columns:

    C = constant + sum_c coeff_c * c

where `constant` and every `coeff_c` only read evaluated columns, challenges
and constants. linearize() computes that decomposition:

1. Expand C into monomials over the *unevaluated* cells. Evaluated cells,
   challenges and constants stay inside the coefficients, so the expansion
   only multiplies out the few selector factors, not the whole polynomial.
2. Monomial with no unevaluated cell     -> constant term
   Monomial with one cell at CURR        -> index term of that column
   Monomial with one cell at NEXT        -> MissingEvaluationError
   Monomial with two or more cells       -> FailedLinearizationError
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterable, Tuple, TypeVar

from circuits.column import Column, Variable
from circuits.gate import CurrOrNext
from expr.ast import (
    Add,
    Cell,
    EnabledIf,
    Expr,
    IfFeature,
    Mul,
    Pow,
    Sub,
    enabled_if,
    one,
    zero,
)
from expr.environment import Environment
from expr.errors import FailedLinearizationError, MissingEvaluationError
from primitives.field import FieldValue

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

# Sorted tuple of unevaluated cells -> coefficient
Monomials = Dict[Tuple[Variable, ...], Expr]


@dataclass(frozen=True)
class Linearization(Generic[T]):
    """constant_term + sum(coeff * column) for every (column, coeff) in index_terms.

    index_terms is ordered by column so equal inputs give equal results.
    """
    constant_term: T
    index_terms: Tuple[Tuple[Column, T], ...]

    def map(self, fn: Callable[[T], U]) -> "Linearization[U]":
        """Apply fn to the constant term and every coefficient."""
        return Linearization(
            constant_term=fn(self.constant_term),
            index_terms=tuple((col, fn(term)) for col, term in self.index_terms),
        )

    def columns(self) -> Tuple[Column, ...]:
        return tuple(col for col, _ in self.index_terms)

    def evaluate(self, env: Environment,
                 evaluate_term: Callable[[T, Environment], FieldValue]) -> FieldValue:
        """Value of the linearized polynomial, reading unevaluated columns from env."""
        acc = evaluate_term(self.constant_term, env)
        for col, term in self.index_terms:
            acc = acc + evaluate_term(term, env) * env.cell(Variable(col, CurrOrNext.CURR))
        return acc


def _merge(dst: Monomials, src: Monomials, sign: int = 1) -> None:
    for key, c in src.items():
        if sign < 0:
            dst[key] = dst.get(key, zero()) - c
        else:
            dst[key] = dst.get(key, zero()) + c


def _product(a: Monomials, b: Monomials) -> Monomials:
    res: Monomials = {}
    for ka, ca in a.items():
        for kb, cb in b.items():
            key = tuple(sorted(ka + kb))
            res[key] = res.get(key, zero()) + ca * cb
    return res


def monomials(e: Expr, evaluated: Iterable[Column]) -> Monomials:
    """Expand e into monomials over the cells whose column is not evaluated."""
    evaluated = frozenset(evaluated)
    return _monomials(e, evaluated)


def _monomials(e: Expr, evaluated: frozenset) -> Monomials:
    if isinstance(e, Cell):
        if e.var.col in evaluated:
            return {(): e}
        return {(e.var,): one()}
    if isinstance(e, Add):
        res = dict(_monomials(e.left, evaluated))
        _merge(res, _monomials(e.right, evaluated))
        return res
    if isinstance(e, Sub):
        res = dict(_monomials(e.left, evaluated))
        _merge(res, _monomials(e.right, evaluated), sign=-1)
        return res
    if isinstance(e, Mul):
        return _product(_monomials(e.left, evaluated), _monomials(e.right, evaluated))
    if isinstance(e, Pow):
        base = _monomials(e.base, evaluated)
        if set(base) == {()}:
            return {(): base[()] ** e.exponent}
        res: Monomials = {(): one()}
        for _ in range(e.exponent):
            res = _product(res, base)
        return res
    if isinstance(e, EnabledIf):
        inner = _monomials(e.expr, evaluated)
        return {key: enabled_if(e.flag, c) for key, c in inner.items()}
    if isinstance(e, IfFeature):
        if_true = _monomials(e.if_true, evaluated)
        if_false = _monomials(e.if_false, evaluated)
        keys = list(if_true) + [k for k in if_false if k not in if_true]
        return {
            key: IfFeature(e.flag, if_true.get(key, zero()), if_false.get(key, zero()))
            for key in keys
        }
    # Every other node is a leaf that does not read a column
    return {(): e}


def linearize(e: Expr, evaluated: Iterable[Column]) -> Linearization[Expr]:
    """Split e into a constant term and one coefficient per unevaluated column.

    Args:
        e: Joint constraint expression
        evaluated: Columns whose evaluations the verifier receives

    Returns:
        Linearization with Expr terms

    Raises:
        MissingEvaluationError: If an unevaluated column is read at the next row
        FailedLinearizationError: If a monomial multiplies unevaluated columns
    """
    constant_term = zero()
    index_terms: Dict[Column, Expr] = {}
    for key, c in monomials(e, evaluated).items():
        if len(key) == 0:
            constant_term = constant_term + c
        elif len(key) == 1:
            var = key[0]
            if var.row is not CurrOrNext.CURR:
                raise MissingEvaluationError(var.col, var.row)
            index_terms[var.col] = index_terms.get(var.col, zero()) + c
        else:
            raise FailedLinearizationError(key)

    logger.debug("linearized into constant term and %d index terms", len(index_terms))
    return Linearization(
        constant_term=constant_term,
        index_terms=tuple(sorted(index_terms.items(), key=lambda item: item[0])),
    )
