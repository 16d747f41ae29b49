"""Protocol - Alpha allocation and the linearized joint constraint."""

from protocol.alphas import Alphas
from protocol.linearization import (
    constraints_expr,
    expr_linearization,
    linearization_columns,
)

__all__ = [
    "Alphas",
    "constraints_expr",
    "expr_linearization",
    "linearization_columns",
]
