"""
Binary operators available to the solver.

Enumeration order matters: when two candidates reach the same value with the
same parentheses depth, the one built by the operator listed first is kept.
"""

import math
from enum import Enum


def _add(left: float, right: float) -> float:
    return left + right


def _subtract(left: float, right: float) -> float:
    return left - right


def _multiply(left: float, right: float) -> float:
    return left * right


def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0:
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _power(left: float, right: float) -> float:
    try:
        return math.pow(left, right)
    except OverflowError:
        return math.inf
    except ValueError:
        # negative base with fractional exponent, or 0 to a negative power
        return math.nan


class BinaryOperator(Enum):
    """(precedence rank, infix symbol, numeric function)."""

    ADDITION = (1, "+", _add)
    SUBTRACTION = (1, "-", _subtract)
    MULTIPLICATION = (3, "*", _multiply)
    DIVISION = (2, "/", _divide)  # division is 2 and multiplication is 3 on purpose
    POWER = (4, "^", _power)

    def __init__(self, rank: int, infix: str, function):
        self.rank = rank
        self.infix = infix
        self.function = function

    def apply(self, left: float, right: float) -> float:
        """Apply the operator. Never raises; failures come back non-finite."""
        try:
            return self.function(left, right)
        except OverflowError:
            return math.inf
