"""Expr - Symbolic constraint expressions, linearization and compilation.

The pipeline for one circuit configuration:

    expr = <joint constraint built from Expr nodes>
    lin = linearize(expr, evaluated_columns)     # Linearization[Expr]
    compiled = lin.map(to_polish)                # Linearization[list[PolishToken]]
    value = compiled.evaluate(env, evaluate_polish)
"""

from expr.ast import (
    ChallengeKind,
    Expr,
    alpha_pow,
    combine_constraints,
    evaluate,
    feature_flags,
)
from expr.environment import Constants, Environment
from expr.errors import (
    AlphasMisuseError,
    ExprError,
    FailedLinearizationError,
    MissingEvaluationError,
)
from expr.linearize import Linearization, linearize, monomials
from expr.polish import Op, PolishToken, evaluate_polish, to_polish

__all__ = [
    # Expressions
    "Expr",
    "ChallengeKind",
    "alpha_pow",
    "combine_constraints",
    "evaluate",
    "feature_flags",
    # Evaluation
    "Constants",
    "Environment",
    # Linearization
    "Linearization",
    "linearize",
    "monomials",
    # Compilation
    "Op",
    "PolishToken",
    "to_polish",
    "evaluate_polish",
    # Errors
    "ExprError",
    "AlphasMisuseError",
    "FailedLinearizationError",
    "MissingEvaluationError",
]
