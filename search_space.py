"""
Search-space size of a digit string.

The enumerator has no timeout, so a caller wanting responsiveness must bound
the digit-string length up front. This module gives an UPPER BOUND on the
number of distinct expressions the search may build: deduplication by value
and weirdness pruning only ever shrink it.

COUNT for a run of n digits, with K operators:
    E(n) = L(n) + sum_{k=1}^{n-1} K * E(k) * E(n-k)
where L(n) is the number of ways to read the whole run as one literal:
1 for a single digit (2 with negatives), 0 for longer runs unless
concatenation is allowed. Without concatenation and negatives this is
K^(n-1) times the Catalan number C(n-1).
"""

import math
from dataclasses import dataclass
from functools import lru_cache

from config import SolverConfig
from operators import BinaryOperator

# Expressions a solve can afford to build before it stops feeling interactive.
DEFAULT_EXPRESSION_BUDGET = 10 ** 8


@dataclass
class SearchSpaceEstimate:
    """Size estimate for one digit-string length under one config."""
    length: int
    n_sub_ranges: int         # distinct contiguous sub-ranges (cache entries, at most)
    n_cut_points: int
    n_parenthesizations: int  # tree shapes over single digits
    n_expressions: int        # upper bound on expressions built
    log10_expressions: float
    is_feasible: bool


def count_binary_trees(n_leaves: int) -> int:
    """Catalan number C(n-1): ways to fully parenthesize n leaves."""
    if n_leaves < 1:
        return 0
    n = n_leaves - 1
    return math.comb(2 * n, n) // (n + 1)


@lru_cache(maxsize=None)
def count_expressions(
    length: int,
    n_operators: int = len(BinaryOperator),
    allow_digit_concatenation: bool = False,
    allow_negative: bool = False,
) -> int:
    """Upper bound on expressions over a run of `length` digits."""
    if length < 1:
        return 0
    literals = 0
    if length == 1 or allow_digit_concatenation:
        literals = 2 if allow_negative else 1
    total = literals
    for cut in range(1, length):
        total += (
            n_operators
            * count_expressions(cut, n_operators, allow_digit_concatenation, allow_negative)
            * count_expressions(length - cut, n_operators, allow_digit_concatenation, allow_negative)
        )
    return total


def estimate_search_space(
    length: int,
    config: SolverConfig,
    budget: int = DEFAULT_EXPRESSION_BUDGET,
) -> SearchSpaceEstimate:
    """Estimate the work for solving a digit string of the given length."""
    n_expressions = count_expressions(
        length, len(BinaryOperator),
        config.allow_digit_concatenation, config.allow_negative,
    )
    return SearchSpaceEstimate(
        length=length,
        n_sub_ranges=length * (length + 1) // 2,
        n_cut_points=max(0, length - 1),
        n_parenthesizations=count_binary_trees(length),
        n_expressions=n_expressions,
        log10_expressions=math.log10(n_expressions) if n_expressions else 0.0,
        is_feasible=n_expressions <= budget,
    )


def find_max_feasible_length(
    config: SolverConfig,
    budget: int = DEFAULT_EXPRESSION_BUDGET,
) -> int:
    """
    Longest digit string whose search space fits the budget.
    Uses binary search on the length.
    """
    lo, hi = 1, 64
    best = 0
    while lo <= hi:
        mid = (lo + hi) // 2
        if estimate_search_space(mid, config, budget).is_feasible:
            best = mid
            lo = mid + 1
        else:
            hi = mid - 1
    return best


def format_search_space(length: int, config: SolverConfig) -> str:
    """Format the size of the space in a readable way."""
    estimate = estimate_search_space(length, config)
    return (
        f"{length} digits: {estimate.n_sub_ranges} sub-ranges, "
        f"≤ 10^{estimate.log10_expressions:.1f} expressions"
    )
