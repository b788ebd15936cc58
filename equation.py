"""
Equations and their textual presentation.

An Equation is the best known rendering of one value within one sub-range.
The presenter decides when a sub-equation must be wrapped in parentheses as
it is combined with a sibling.

RULES (first match wins):
  atomic sub (literal, "(-5)")           -> never wrapped
  outer ^                                -> always wrapped, both sides
  outer /, right sub of rank *           -> wrapped      6/(2*3)
  outer -, right sub of rank +           -> wrapped      9-(2+3), 9-(2-3)
  sub binds tighter than outer           -> bare         2*3+4, 2^3*4
  outer / (anything else)                -> wrapped      (8/2)/2, (1+2)/3
  same rank                              -> bare         1+2-3, 2*3*4
  otherwise                              -> wrapped      (1+2)*3

Division ranks BELOW multiplication so that 2*3/4 stays bare while a
division on the left of a multiplication, (1/2)*3, gets wrapped.
"""

from dataclasses import dataclass

from operators import BinaryOperator

ATOMIC_RANK = 0  # plain literal or already parenthesized, never wrapped


@dataclass(frozen=True)
class Equation:
    """Rendered expression with its outermost operator rank."""
    text: str
    rank: int = ATOMIC_RANK
    paren_depth: int = 0  # nesting depth of parenthesized groups in text

    @property
    def is_atomic(self) -> bool:
        return self.rank == ATOMIC_RANK


def literal(digits: str) -> Equation:
    """A sub-range read as one number."""
    return Equation(digits)


def negated_literal(digits: str) -> Equation:
    """A sub-range read as its negation, always parenthesized."""
    return Equation(f"(-{digits})", ATOMIC_RANK, 1)


def needs_parentheses(sub: Equation, operator: BinaryOperator, is_right_side: bool) -> bool:
    """First matching rule wins."""
    if sub.is_atomic:
        return False
    if operator is BinaryOperator.POWER:
        return True
    if (operator is BinaryOperator.DIVISION
            and sub.rank == BinaryOperator.MULTIPLICATION.rank and is_right_side):
        return True
    if (operator is BinaryOperator.SUBTRACTION
            and sub.rank == BinaryOperator.ADDITION.rank and is_right_side):
        return True
    if sub.rank > operator.rank:
        return False
    if operator is BinaryOperator.DIVISION:
        return True
    if sub.rank == operator.rank:
        return False
    return True


def present(sub: Equation, operator: BinaryOperator, is_right_side: bool):
    """Return (text, paren_depth) of sub as it appears next to operator."""
    if needs_parentheses(sub, operator, is_right_side):
        return f"({sub.text})", sub.paren_depth + 1
    return sub.text, sub.paren_depth


def combine(left: Equation, operator: BinaryOperator, right: Equation) -> Equation:
    """Stitch two sub-equations together around operator."""
    left_text, left_depth = present(left, operator, False)
    right_text, right_depth = present(right, operator, True)
    return Equation(
        f"{left_text}{operator.infix}{right_text}",
        operator.rank,
        max(left_depth, right_depth),
    )
