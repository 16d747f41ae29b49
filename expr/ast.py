"""Symbolic expression tree for constraint polynomials.

A constraint is a polynomial over cells (a column read at the current or the
next row), challenges and constants. The joint constraint of a circuit is
one such tree; conditional nodes keep optional families switchable at
proving time.

The tree has two kinds of nodes:

  LEAVES
    Literal          an integer constant, reduced into the field only when
                     the expression is evaluated
    Cell             a column at CURR or NEXT row
    Challenge        alpha, beta, gamma or the joint combiner
    EndoCoefficient  the curve endomorphism coefficient
    Mds              an entry of the Poseidon MDS matrix
    VanishesOnZeroKnowledgeAndPreviousRows
                     polynomial that is zero on the zero-knowledge rows and
                     the row before them
    UnnormalizedLagrangeBasis
                     (x^n - 1) / (x - w^i), non-zero only at row i; with
                     zk_rows the offset counts from the first
                     zero-knowledge row instead of from row 0

  INTERNAL NODES
    Add, Sub, Mul, Pow
    EnabledIf(flag, e)          e when flag is enabled, zero otherwise
    IfFeature(flag, a, b)       a when flag is enabled, b otherwise

Each node owns its children; the tree is acyclic and immutable. Python
operators build nodes and fold literal identities, so

    witness_curr(0) * witness_curr(1) - witness_curr(2) + 0

builds Sub(Mul(w0, w1), w2).

Challenge powers are ordinary nodes: alpha_pow(k) is Pow(Challenge(ALPHA), k).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Sequence, Union

from circuits.column import Column, Variable
from circuits.feature_flags import FeatureFlag
from circuits.gate import CurrOrNext, GateType

if TYPE_CHECKING:
    from expr.environment import Environment
    from primitives.field import FieldValue


class ChallengeKind(Enum):
    ALPHA = 0
    BETA = 1
    GAMMA = 2
    JOINT_COMBINER = 3


class Expr:
    """Base class of every tree node; provides the arithmetic operators."""

    __slots__ = ()

    def __add__(self, other) -> Expr:
        return add(self, as_expr(other))

    def __radd__(self, other) -> Expr:
        return add(as_expr(other), self)

    def __sub__(self, other) -> Expr:
        return sub(self, as_expr(other))

    def __rsub__(self, other) -> Expr:
        return sub(as_expr(other), self)

    def __mul__(self, other) -> Expr:
        return mul(self, as_expr(other))

    def __rmul__(self, other) -> Expr:
        return mul(as_expr(other), self)

    def __neg__(self) -> Expr:
        return mul(Literal(-1), self)

    def __pow__(self, exponent: int) -> Expr:
        return pow_(self, exponent)

    def __str__(self) -> str:
        return format_expr(self)


# --- Leaves ---

@dataclass(frozen=True)
class Literal(Expr):
    value: int


@dataclass(frozen=True)
class Cell(Expr):
    var: Variable


@dataclass(frozen=True)
class Challenge(Expr):
    kind: ChallengeKind


@dataclass(frozen=True)
class EndoCoefficient(Expr):
    pass


@dataclass(frozen=True)
class Mds(Expr):
    row: int
    col: int


@dataclass(frozen=True)
class VanishesOnZeroKnowledgeAndPreviousRows(Expr):
    pass


@dataclass(frozen=True)
class UnnormalizedLagrangeBasis(Expr):
    offset: int
    zk_rows: bool = False


# --- Internal nodes ---

@dataclass(frozen=True)
class Add(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Sub(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Mul(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Pow(Expr):
    base: Expr
    exponent: int


@dataclass(frozen=True)
class EnabledIf(Expr):
    flag: FeatureFlag
    expr: Expr


@dataclass(frozen=True)
class IfFeature(Expr):
    flag: FeatureFlag
    if_true: Expr
    if_false: Expr


# --- Smart constructors ---

ExprLike = Union[Expr, int]


def as_expr(value: ExprLike) -> Expr:
    if isinstance(value, Expr):
        return value
    if isinstance(value, int):
        return Literal(value)
    raise TypeError(f"cannot use {type(value).__name__} in a constraint expression")


def _literal_value(e: Expr):
    return e.value if isinstance(e, Literal) else None


def add(a: Expr, b: Expr) -> Expr:
    va, vb = _literal_value(a), _literal_value(b)
    if va == 0:
        return b
    if vb == 0:
        return a
    if va is not None and vb is not None:
        return Literal(va + vb)
    return Add(a, b)


def sub(a: Expr, b: Expr) -> Expr:
    va, vb = _literal_value(a), _literal_value(b)
    if vb == 0:
        return a
    if va is not None and vb is not None:
        return Literal(va - vb)
    return Sub(a, b)


def mul(a: Expr, b: Expr) -> Expr:
    va, vb = _literal_value(a), _literal_value(b)
    if va == 0 or vb == 0:
        return Literal(0)
    if va == 1:
        return b
    if vb == 1:
        return a
    if va is not None and vb is not None:
        return Literal(va * vb)
    return Mul(a, b)


def pow_(base: Expr, exponent: int) -> Expr:
    if exponent < 0:
        raise ValueError(f"negative exponent {exponent}")
    if exponent == 0:
        return Literal(1)
    if exponent == 1:
        return base
    vb = _literal_value(base)
    if vb is not None:
        return Literal(vb ** exponent)
    return Pow(base, exponent)


def enabled_if(flag: FeatureFlag, e: Expr) -> Expr:
    if _literal_value(e) == 0:
        return e
    return EnabledIf(flag, e)


# --- Helpers used by constraint authors ---

def zero() -> Expr:
    return Literal(0)


def one() -> Expr:
    return Literal(1)


def literal(value: int) -> Expr:
    return Literal(value)


def cell(col: Column, row: CurrOrNext = CurrOrNext.CURR) -> Expr:
    return Cell(Variable(col, row))


def witness_curr(i: int) -> Expr:
    return cell(Column.witness(i), CurrOrNext.CURR)


def witness_next(i: int) -> Expr:
    return cell(Column.witness(i), CurrOrNext.NEXT)


def coeff(i: int) -> Expr:
    return cell(Column.coefficient(i), CurrOrNext.CURR)


def index(gate: GateType) -> Expr:
    """Selector of a gate at the current row."""
    return cell(Column.index_of(gate), CurrOrNext.CURR)


def challenge(kind: ChallengeKind) -> Expr:
    return Challenge(kind)


def alpha_pow(k: int) -> Expr:
    """Reference to the k-th power of the combination challenge."""
    return pow_(Challenge(ChallengeKind.ALPHA), k)


def boolean(x: Expr) -> Expr:
    """Zero iff x is 0 or 1."""
    return x * x - x


def crumb(x: Expr) -> Expr:
    """Zero iff x is in [0, 4)."""
    return x * (x - 1) * (x - 2) * (x - 3)


def sum_exprs(exprs: Iterable[Expr]) -> Expr:
    acc = zero()
    for e in exprs:
        acc = acc + e
    return acc


def combine_constraints(exponents: Iterable[int], constraints: Sequence[Expr]) -> Expr:
    """Weight constraint i with alpha^exponents[i] and sum.

    Raises:
        ValueError: If there are more constraints than exponents
    """
    exponents = list(exponents)
    if len(constraints) > len(exponents):
        raise ValueError(
            f"{len(constraints)} constraints but only {len(exponents)} powers of alpha"
        )
    return sum_exprs(alpha_pow(e) * c for e, c in zip(exponents, constraints))


# --- Inspection ---

def children(e: Expr) -> tuple[Expr, ...]:
    if isinstance(e, (Add, Sub, Mul)):
        return (e.left, e.right)
    if isinstance(e, Pow):
        return (e.base,)
    if isinstance(e, EnabledIf):
        return (e.expr,)
    if isinstance(e, IfFeature):
        return (e.if_true, e.if_false)
    return ()


def walk(e: Expr):
    """Yield every node of the tree, parents before children."""
    stack = [e]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def feature_flags(e: Expr) -> set[FeatureFlag]:
    """Flags of every conditional node in the tree."""
    return {n.flag for n in walk(e) if isinstance(n, (EnabledIf, IfFeature))}


def columns(e: Expr) -> set[Column]:
    """Columns referenced by any cell of the tree."""
    return {n.var.col for n in walk(e) if isinstance(n, Cell)}


def variables(e: Expr) -> set[Variable]:
    return {n.var for n in walk(e) if isinstance(n, Cell)}


def evaluate(e: Expr, env: Environment) -> FieldValue:
    """Evaluate the tree directly (reference semantics of compiled programs)."""
    if isinstance(e, Literal):
        return env.literal(e.value)
    if isinstance(e, Cell):
        return env.cell(e.var)
    if isinstance(e, Challenge):
        return env.challenge(e.kind)
    if isinstance(e, EndoCoefficient):
        return env.constants.endo_coefficient
    if isinstance(e, Mds):
        return env.mds(e.row, e.col)
    if isinstance(e, VanishesOnZeroKnowledgeAndPreviousRows):
        return env.vanishes_on_zero_knowledge_and_previous_rows()
    if isinstance(e, UnnormalizedLagrangeBasis):
        return env.unnormalized_lagrange_basis(e.offset, e.zk_rows)
    if isinstance(e, Add):
        return evaluate(e.left, env) + evaluate(e.right, env)
    if isinstance(e, Sub):
        return evaluate(e.left, env) - evaluate(e.right, env)
    if isinstance(e, Mul):
        return evaluate(e.left, env) * evaluate(e.right, env)
    if isinstance(e, Pow):
        return evaluate(e.base, env) ** e.exponent
    if isinstance(e, EnabledIf):
        if env.is_enabled(e.flag):
            return evaluate(e.expr, env)
        return env.literal(0)
    if isinstance(e, IfFeature):
        if env.is_enabled(e.flag):
            return evaluate(e.if_true, env)
        return evaluate(e.if_false, env)
    raise TypeError(f"unknown expression node {type(e).__name__}")


def format_expr(e: Expr) -> str:
    """Infix rendering, fully parenthesised for internal nodes."""
    if isinstance(e, Literal):
        return str(e.value)
    if isinstance(e, Cell):
        return repr(e.var)
    if isinstance(e, Challenge):
        return e.kind.name.lower()
    if isinstance(e, EndoCoefficient):
        return "endo_coefficient"
    if isinstance(e, Mds):
        return f"mds[{e.row}][{e.col}]"
    if isinstance(e, VanishesOnZeroKnowledgeAndPreviousRows):
        return "vanishes_on_zk_and_previous_rows"
    if isinstance(e, UnnormalizedLagrangeBasis):
        suffix = " - zk_rows" if e.zk_rows else ""
        return f"lagrange({e.offset}{suffix})"
    if isinstance(e, Add):
        return f"({format_expr(e.left)} + {format_expr(e.right)})"
    if isinstance(e, Sub):
        return f"({format_expr(e.left)} - {format_expr(e.right)})"
    if isinstance(e, Mul):
        return f"({format_expr(e.left)} * {format_expr(e.right)})"
    if isinstance(e, Pow):
        return f"{format_expr(e.base)}^{e.exponent}"
    if isinstance(e, EnabledIf):
        return f"if({e.flag.name}, {format_expr(e.expr)})"
    if isinstance(e, IfFeature):
        return (
            f"if({e.flag.name}, {format_expr(e.if_true)}, "
            f"{format_expr(e.if_false)})"
        )
    raise TypeError(f"unknown expression node {type(e).__name__}")
