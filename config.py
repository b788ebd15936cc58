"""
Digit solver configuration.
All search parameters are centralized here.
"""

from dataclasses import dataclass, fields, replace
from typing import Tuple


# Fields that change how a digit string is interpreted or pruned.
# A cache populated under one value of these is invalid under another.
INTERPRETATION_FIELDS = (
    "radix_base",
    "allow_digit_concatenation",
    "allow_negative",
    "do_not_check_weird_solutions",
    "target_number",
    "max_magnitude",
    "min_magnitude",
)

MIN_RADIX = 2
MAX_RADIX = 36  # int(text, base) accepts bases up to 36


@dataclass
class SolverConfig:
    """Digit-string search parameters."""

    # === INTERPRETATION ===
    # Radix in which every digit (and every concatenated run) is read.
    radix_base: int = 10

    # Allow "1 2 3" -> "1+23": any sub-range may be read as one number,
    # not only single digits.
    allow_digit_concatenation: bool = False

    # Allow "2 1" -> "2^(-1)": every literal may also be read negated.
    allow_negative: bool = False

    # === PRUNING ===
    # Stop exploring paths whose values are too large or too small, and
    # apply the target-proximity heuristic near the top of the recursion.
    # Trades completeness for speed.
    do_not_check_weird_solutions: bool = True

    # Magnitude window used when the check above is enabled.
    # Exact zero is never treated as "too small".
    max_magnitude: float = 1_000_000
    min_magnitude: float = 0.000001

    # === TARGET ===
    target_number: float = 100

    def __post_init__(self):
        if not MIN_RADIX <= self.radix_base <= MAX_RADIX:
            raise ValueError(
                f"radix_base must be in [{MIN_RADIX}, {MAX_RADIX}], got {self.radix_base}"
            )
        if self.max_magnitude <= 0 or self.min_magnitude < 0:
            raise ValueError("magnitude bounds must be positive")
        if self.min_magnitude >= self.max_magnitude:
            raise ValueError(
                f"min_magnitude ({self.min_magnitude}) must be below "
                f"max_magnitude ({self.max_magnitude})"
            )
        self.target_number = float(self.target_number)

    def fingerprint(self) -> Tuple:
        """Snapshot of every field a cached result depends on."""
        return tuple(getattr(self, name) for name in INTERPRETATION_FIELDS)

    def with_changes(self, **changes) -> "SolverConfig":
        """Return a validated copy with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown config field(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)
