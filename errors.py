"""
Exceptions raised by the digit solver.

A search that completes without reaching the target is NOT an error:
it returns None. Non-finite intermediate values are discarded silently.
"""


class SolverError(Exception):
    """Base class for solver errors."""


class InvalidDigitStringError(SolverError, ValueError):
    """The digit string is empty or holds a character invalid in the radix."""

    def __init__(self, digit_string: str, radix_base: int, reason: str):
        self.digit_string = digit_string
        self.radix_base = radix_base
        self.reason = reason
        super().__init__(f"Invalid digit string {digit_string!r} (radix {radix_base}): {reason}")


class ConfigDriftError(SolverError):
    """The cache was populated under a different configuration."""

    def __init__(self, cached_fingerprint, current_fingerprint):
        self.cached_fingerprint = cached_fingerprint
        self.current_fingerprint = current_fingerprint
        super().__init__(
            "Cache was populated under a different configuration; "
            "call invalidate_cache() before resolving"
        )
