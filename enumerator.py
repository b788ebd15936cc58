"""
Equation enumerator: finds an expression over a digit string that hits a target.

ALGORITHM FOR A SUB-RANGE s (e.g. "1234"):
1. If s was resolved before, return the cached value map.
2. Leaf: if s is one digit (or concatenation is allowed), read it as one
   number in the configured radix; with negatives allowed also add "(-s)".
3. Split: for every cut s = left|right, resolve both sides one level deeper,
   then for every operator and every (left value, right value) pair:
   a. apply the operator
   b. drop non-finite results
   c. drop "weird" results (magnitude window, target proximity by depth)
   d. keep one equation per value, preferring fewer nested parentheses
4. Cache the map under s.

The top-level call looks up the target value in the map of the full string.

DEPTH HEURISTIC:
Depth 0 is the full string, depth 1 its two direct halves. With weirdness
checks enabled, depth 0 only keeps the target itself and depth 1 only keeps
values within one radix step of the target, assuming the outermost operator
is multiplicative. This can miss solutions whose outermost operator is
additive or a power. Cached maps are reused at any depth.
"""

import logging
import math
from dataclasses import dataclass, fields
from typing import Dict, Optional

from config import SolverConfig
from equation import Equation, combine, literal, negated_literal
from errors import ConfigDriftError, InvalidDigitStringError
from operators import BinaryOperator

logger = logging.getLogger(__name__)

ValueMap = Dict[float, Equation]

DIGIT_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class SolverStats:
    """Outcome counters for every combination attempt (diagnostic only)."""
    considered: int = 0
    rejected_non_finite: int = 0
    rejected_by_depth: int = 0
    rejected_by_magnitude: int = 0
    rejected_duplicate: int = 0
    accepted: int = 0
    cache_hits: int = 0
    cache_misses: int = 0

    def reset(self):
        for f in fields(self):
            setattr(self, f.name, 0)

    def summary(self) -> str:
        lookups = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / lookups if lookups else 0.0
        lines = [f"Cache hits: {self.cache_hits}/{lookups} = {hit_rate:.3f}"]
        total = self.considered
        for label, count in (
            ("non-finite", self.rejected_non_finite),
            ("depth heuristic", self.rejected_by_depth),
            ("magnitude", self.rejected_by_magnitude),
            ("duplicate (not better)", self.rejected_duplicate),
            ("accepted", self.accepted),
        ):
            fraction = count / total if total else 0.0
            lines.append(f"  {label:<24} {count:>10}  ({fraction:.1%})")
        return f"Combinations considered: {total}\n" + "\n".join(lines)


def validate_digit_string(digit_string: str, radix_base: int) -> str:
    """Return the digit string lower-cased, or raise InvalidDigitStringError."""
    if not isinstance(digit_string, str) or not digit_string:
        raise InvalidDigitStringError(digit_string, radix_base, "empty digit string")
    allowed = set(DIGIT_ALPHABET[:radix_base])
    normalized = []
    # lower-case one character at a time: str.lower() may change the length
    for position, char in enumerate(digit_string):
        lowered = char.lower()
        if lowered not in allowed:
            raise InvalidDigitStringError(
                digit_string, radix_base,
                f"character {char!r} at position {position} is not a digit",
            )
        normalized.append(lowered)
    return "".join(normalized)


def _parse_literal(digits: str, radix_base: int) -> float:
    try:
        return float(int(digits, radix_base))
    except OverflowError:
        return math.inf


class Enumerator:
    """Memoized enumeration of every value reachable from a digit string.

    Owns its configuration and cache, so enumerators with different
    settings can coexist. Not thread-safe: share an instance across threads
    only behind a lock.
    """

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config if config is not None else SolverConfig()
        self.stats = SolverStats()
        self._cache: Dict[str, ValueMap] = {}
        self._cache_fingerprint = self.config.fingerprint()

    # === CONFIGURATION ===

    def configure(self, **changes) -> SolverConfig:
        """Apply config changes, invalidating the cache when they matter."""
        new_config = self.config.with_changes(**changes)
        drifted = new_config.fingerprint() != self.config.fingerprint()
        self.config = new_config
        if drifted:
            self.invalidate_cache()
        return self.config

    def invalidate_cache(self):
        logger.info("Invalidating cache (%d sub-ranges)", len(self._cache))
        self._cache.clear()
        self.stats.reset()
        self._cache_fingerprint = self.config.fingerprint()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def has_config_drift(self) -> bool:
        """True if the cache holds results computed under another config."""
        return bool(self._cache) and self._cache_fingerprint != self.config.fingerprint()

    def _claim_empty_cache(self):
        if not self._cache:
            self._cache_fingerprint = self.config.fingerprint()

    # === SEARCH ===

    def solve(self, digit_string: str) -> Optional[str]:
        """Return an expression equal to the target, or None if there is none."""
        digits = validate_digit_string(digit_string, self.config.radix_base)
        if self.has_config_drift():
            logger.warning("Configuration changed since the cache was filled; invalidating")
            self.invalidate_cache()
        self.stats.reset()
        self._claim_empty_cache()

        possibilities = self._resolve(digits, 0)
        logger.debug(
            "DONE. Possibility space size is %d, with final cache size %d. %s",
            len(possibilities), len(self._cache), self.stats.summary(),
        )
        equation = possibilities.get(self.config.target_number)
        if equation is None:
            return None
        return equation.text

    def resolve(self, sub_range: str, depth: int = 0) -> ValueMap:
        """Every value reachable from sub_range, with its best equation.

        Raises ConfigDriftError if the config changed since the cache was
        filled without a call to invalidate_cache().
        """
        if self.has_config_drift():
            raise ConfigDriftError(self._cache_fingerprint, self.config.fingerprint())
        self._claim_empty_cache()
        digits = validate_digit_string(sub_range, self.config.radix_base)
        return self._resolve(digits, depth)

    def _resolve(self, sub_range: str, depth: int) -> ValueMap:
        cached = self._cache.get(sub_range)
        if cached is not None:
            self.stats.cache_hits += 1
            return cached
        self.stats.cache_misses += 1
        logger.debug("> %s", sub_range)

        config = self.config
        possibilities: ValueMap = {}
        if len(sub_range) == 1 or config.allow_digit_concatenation:
            value = _parse_literal(sub_range, config.radix_base)
            if math.isfinite(value):
                possibilities[value] = literal(sub_range)
                if config.allow_negative:
                    # -0.0 == 0.0, so "(-0)" never displaces "0"
                    possibilities.setdefault(-value, negated_literal(sub_range))

        for index in range(1, len(sub_range)):
            left = self._resolve(sub_range[:index], depth + 1)
            right = self._resolve(sub_range[index:], depth + 1)
            for operator in BinaryOperator:
                for left_value, left_equation in left.items():
                    for right_value, right_equation in right.items():
                        self._combine(
                            possibilities, depth, operator,
                            left_value, left_equation, right_value, right_equation,
                        )

        logger.debug("< %s    (%d results)", sub_range, len(possibilities))
        self._cache[sub_range] = possibilities
        return possibilities

    def _combine(
        self,
        possibilities: ValueMap,
        depth: int,
        operator: BinaryOperator,
        left_value: float,
        left_equation: Equation,
        right_value: float,
        right_equation: Equation,
    ):
        stats = self.stats
        stats.considered += 1
        result = operator.apply(left_value, right_value)
        if not math.isfinite(result):
            stats.rejected_non_finite += 1
            return
        if self.config.do_not_check_weird_solutions:
            if self._is_weird_magnitude(result):
                stats.rejected_by_magnitude += 1
                return
            if not self._is_promising_at_depth(result, depth):
                stats.rejected_by_depth += 1
                return

        candidate = combine(left_equation, operator, right_equation)
        existing = possibilities.get(result)
        if existing is not None and candidate.paren_depth >= existing.paren_depth:
            stats.rejected_duplicate += 1
            return
        possibilities[result] = candidate
        stats.accepted += 1

    # === PRUNING ===

    def _is_weird_magnitude(self, result: float) -> bool:
        magnitude = abs(result)
        if magnitude > self.config.max_magnitude:
            return True
        return 0 < magnitude < self.config.min_magnitude

    def _is_promising_at_depth(self, result: float, depth: int) -> bool:
        """Approximate filter: assumes the outermost operator is multiplicative."""
        target = self.config.target_number
        if depth == 0:
            return result == target
        if depth == 1:
            radix = self.config.radix_base
            magnitude = abs(target)
            return magnitude / radix <= abs(result) <= magnitude * radix
        return True


def solve(digit_string: str, target_number: float = 100, **options) -> Optional[str]:
    """One-shot solve with a fresh enumerator."""
    enumerator = Enumerator(SolverConfig(target_number=target_number, **options))
    return enumerator.solve(digit_string)
