"""Primitives - Field arithmetic used to evaluate compiled constraints."""

from primitives.field import (
    ENDO_COEFFICIENT,
    FF,
    GENERATOR,
    GOLDILOCKS_PRIME,
    W,
    FieldValue,
    get_omega,
    to_ff,
)

__all__ = [
    "FF",
    "FieldValue",
    "GOLDILOCKS_PRIME",
    "GENERATOR",
    "ENDO_COEFFICIENT",
    "W",
    "get_omega",
    "to_ff",
]
