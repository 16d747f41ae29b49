"""Compile expression trees to flat postfix programs ("Polish tokens").

A program is a list of PolishToken evaluated left to right with an explicit
value stack:

    leaf tokens     push a value (ALPHA, LITERAL, CELL, MDS, ...)
    POW(n)          replace the top with top^n
    ADD, SUB, MUL   pop b, pop a, push a op b
    SKIP_IF_NOT(f, k, push_zero)
                    when f is disabled, skip the next k tokens (pushing zero
                    first if push_zero)
    SKIP_IF(f, k)   when f is enabled, skip the next k tokens

Conditional nodes compile to:

    EnabledIf(f, e)       SKIP_IF_NOT(f, len(e), True)  e
    IfFeature(f, a, b)    SKIP_IF_NOT(f, len(a) + 1, False)  a  SKIP_IF(f, len(b))  b

Either way exactly one value is left on the stack.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from expr.ast import (
    Add,
    Cell,
    Challenge,
    ChallengeKind,
    EnabledIf,
    EndoCoefficient,
    Expr,
    IfFeature,
    Literal,
    Mds,
    Mul,
    Pow,
    Sub,
    UnnormalizedLagrangeBasis,
    VanishesOnZeroKnowledgeAndPreviousRows,
)
from expr.environment import Environment
from primitives.field import FieldValue


class Op(Enum):
    ALPHA = 0
    BETA = 1
    GAMMA = 2
    JOINT_COMBINER = 3
    ENDO_COEFFICIENT = 4
    MDS = 5
    LITERAL = 6
    CELL = 7
    POW = 8
    ADD = 9
    MUL = 10
    SUB = 11
    VANISHES_ON_ZERO_KNOWLEDGE_AND_PREVIOUS_ROWS = 12
    UNNORMALIZED_LAGRANGE_BASIS = 13
    SKIP_IF = 14
    SKIP_IF_NOT = 15


_CHALLENGE_OPS = {
    ChallengeKind.ALPHA: Op.ALPHA,
    ChallengeKind.BETA: Op.BETA,
    ChallengeKind.GAMMA: Op.GAMMA,
    ChallengeKind.JOINT_COMBINER: Op.JOINT_COMBINER,
}

_OP_CHALLENGES = {op: kind for kind, op in _CHALLENGE_OPS.items()}


@dataclass(frozen=True)
class PolishToken:
    """One instruction.

    arg depends on op: the literal value, the cell Variable, the (row, col)
    of an MDS entry, the POW exponent, the Lagrange offset, or
    (flag, count, push_zero) for skips.
    """
    op: Op
    arg: Any = None

    def __repr__(self) -> str:
        if self.arg is None:
            return self.op.name
        return f"{self.op.name}({self.arg!r})"


def to_polish(e: Expr) -> List[PolishToken]:
    """Compile an expression tree to a postfix program."""
    tokens: List[PolishToken] = []
    _compile(e, tokens)
    return tokens


def _compile(e: Expr, out: List[PolishToken]) -> None:
    if isinstance(e, Literal):
        out.append(PolishToken(Op.LITERAL, e.value))
    elif isinstance(e, Cell):
        out.append(PolishToken(Op.CELL, e.var))
    elif isinstance(e, Challenge):
        out.append(PolishToken(_CHALLENGE_OPS[e.kind]))
    elif isinstance(e, EndoCoefficient):
        out.append(PolishToken(Op.ENDO_COEFFICIENT))
    elif isinstance(e, Mds):
        out.append(PolishToken(Op.MDS, (e.row, e.col)))
    elif isinstance(e, VanishesOnZeroKnowledgeAndPreviousRows):
        out.append(PolishToken(Op.VANISHES_ON_ZERO_KNOWLEDGE_AND_PREVIOUS_ROWS))
    elif isinstance(e, UnnormalizedLagrangeBasis):
        out.append(PolishToken(Op.UNNORMALIZED_LAGRANGE_BASIS, (e.offset, e.zk_rows)))
    elif isinstance(e, Pow):
        _compile(e.base, out)
        out.append(PolishToken(Op.POW, e.exponent))
    elif isinstance(e, (Add, Sub, Mul)):
        _compile(e.left, out)
        _compile(e.right, out)
        op = Op.ADD if isinstance(e, Add) else Op.SUB if isinstance(e, Sub) else Op.MUL
        out.append(PolishToken(op))
    elif isinstance(e, EnabledIf):
        body = to_polish(e.expr)
        out.append(PolishToken(Op.SKIP_IF_NOT, (e.flag, len(body), True)))
        out.extend(body)
    elif isinstance(e, IfFeature):
        if_true = to_polish(e.if_true)
        if_false = to_polish(e.if_false)
        # Disabled: jump over if_true and the SKIP_IF, then run if_false
        out.append(PolishToken(Op.SKIP_IF_NOT, (e.flag, len(if_true) + 1, False)))
        out.extend(if_true)
        out.append(PolishToken(Op.SKIP_IF, (e.flag, len(if_false))))
        out.extend(if_false)
    else:
        raise TypeError(f"unknown expression node {type(e).__name__}")


def evaluate_polish(tokens: List[PolishToken], env: Environment) -> FieldValue:
    """Evaluate a compiled program in a single pass.

    Raises:
        ValueError: If the program underflows the stack, skips past its end,
            or does not leave exactly one value
    """
    stack: List[FieldValue] = []
    skip = 0
    for pos, token in enumerate(tokens):
        if skip > 0:
            skip -= 1
            continue
        op = token.op
        if op in _OP_CHALLENGES:
            stack.append(env.challenge(_OP_CHALLENGES[op]))
        elif op is Op.LITERAL:
            stack.append(env.literal(token.arg))
        elif op is Op.CELL:
            stack.append(env.cell(token.arg))
        elif op is Op.ENDO_COEFFICIENT:
            stack.append(env.constants.endo_coefficient)
        elif op is Op.MDS:
            stack.append(env.mds(*token.arg))
        elif op is Op.VANISHES_ON_ZERO_KNOWLEDGE_AND_PREVIOUS_ROWS:
            stack.append(env.vanishes_on_zero_knowledge_and_previous_rows())
        elif op is Op.UNNORMALIZED_LAGRANGE_BASIS:
            stack.append(env.unnormalized_lagrange_basis(*token.arg))
        elif op is Op.POW:
            _require(stack, 1, pos)
            stack.append(stack.pop() ** token.arg)
        elif op in (Op.ADD, Op.SUB, Op.MUL):
            _require(stack, 2, pos)
            b = stack.pop()
            a = stack.pop()
            if op is Op.ADD:
                stack.append(a + b)
            elif op is Op.SUB:
                stack.append(a - b)
            else:
                stack.append(a * b)
        elif op is Op.SKIP_IF_NOT:
            flag, count, push_zero = token.arg
            if not env.is_enabled(flag):
                if push_zero:
                    stack.append(env.literal(0))
                skip = count
        elif op is Op.SKIP_IF:
            flag, count = token.arg
            if env.is_enabled(flag):
                skip = count
        else:
            raise ValueError(f"unknown token {token!r} at position {pos}")
    if skip > 0:
        raise ValueError(f"program skips {skip} tokens past its end")
    if len(stack) != 1:
        raise ValueError(f"program left {len(stack)} values on the stack, expected 1")
    return stack[0]


def _require(stack: list, n: int, pos: int) -> None:
    if len(stack) < n:
        raise ValueError(f"stack underflow at token {pos}")
