"""
INDEPENDENT validation of solver results.

PRINCIPLE: validation must follow a computation path completely different
from the search. The search works on doubles and builds text as it goes;
here the rendered text is parsed back and evaluated from scratch.

Validation strategies:
1. Exact evaluation of the rendered text with sympy (rational arithmetic,
   exact roots), honouring the rendered parentheses and precedence
2. Exact comparison with the double the search stored for that text
3. High-precision residual with mpmath, to tell float rounding apart
   from a wrong rendering
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import mpmath
import sympy
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from config import SolverConfig
from enumerator import Enumerator
from equation import Equation

_TRANSFORMATIONS = standard_transformations + (convert_xor,)
_LITERAL_RE = re.compile(r"[0-9a-z]+")

# A double carries 53 bits; anything closer than this is rounding, not a bug.
FLOAT_RELATIVE_TOLERANCE = mpmath.mpf(2) ** -50


@dataclass
class ValidationResult:
    """Outcome of validating one rendered equation."""
    text: str
    stored_value: float
    is_valid: bool
    is_exact: bool           # exact value equals the stored double bit-for-bit
    exact_value: Optional[str]
    residual: Optional[float]
    notes: str


def to_sympy(text: str, radix_base: int = 10) -> sympy.Expr:
    """Parse rendered equation text into an exact sympy expression.

    Literals are re-read in radix_base first so that "a" in radix 16 is 10,
    not a symbol.
    """
    decimal_text = _LITERAL_RE.sub(lambda m: str(int(m.group(0), radix_base)), text.lower())
    return parse_expr(decimal_text, transformations=_TRANSFORMATIONS, evaluate=True)


class ResultValidator:
    """Independent validator of solver output."""

    def __init__(self, precision: int = 60):
        self.precision = precision

    def validate(self, text: str, stored_value: float, radix_base: int = 10) -> ValidationResult:
        """Full validation of one equation against the value it was stored under."""
        notes = []

        # === LEVEL 1: exact evaluation with sympy ===
        try:
            expr = to_sympy(text, radix_base)
        except (sympy.SympifyError, SyntaxError, TypeError) as exc:
            return ValidationResult(text, stored_value, False, False, None, None,
                                    f"Parse failure: {exc}")
        if expr.free_symbols or not expr.is_real:
            return ValidationResult(text, stored_value, False, False, str(expr), None,
                                    "Expression is not a real number")
        notes.append(f"Exact value: {expr}")

        # === LEVEL 2: exact comparison with the stored double ===
        difference = sympy.simplify(expr - sympy.Rational(stored_value))
        is_exact = difference == 0
        if is_exact:
            notes.append("Matches stored value exactly")

        # === LEVEL 3: high-precision residual ===
        with mpmath.workdps(self.precision):
            approx = mpmath.mpf(str(sympy.N(expr, self.precision)))
            residual = abs(approx - mpmath.mpf(stored_value))
            scale = max(mpmath.mpf(1), abs(approx))
            within_rounding = residual / scale <= FLOAT_RELATIVE_TOLERANCE
            notes.append(f"Residual mpmath@{self.precision}: {mpmath.nstr(residual, 5)}")

        if not is_exact and within_rounding:
            notes.append("Differs from stored value only by float rounding")

        return ValidationResult(
            text=text,
            stored_value=stored_value,
            is_valid=is_exact or bool(within_rounding),
            is_exact=is_exact,
            exact_value=str(expr),
            residual=float(residual),
            notes="\n".join(notes),
        )

    def validate_value_map(
        self,
        value_map: Dict[float, Equation],
        radix_base: int = 10,
    ) -> List[ValidationResult]:
        """Validate every entry; returns only the failures."""
        failures = []
        for value, equation in value_map.items():
            result = self.validate(equation.text, value, radix_base)
            if not result.is_valid:
                failures.append(result)
        return failures


# (digits, config overrides, expected text or None)
KNOWN_SOLUTIONS: List[Tuple[str, dict, Optional[str]]] = [
    ("12", {"target_number": 3}, "1+2"),
    ("12", {"target_number": 12, "allow_digit_concatenation": True}, "12"),
    ("24", {"target_number": 8}, "2*4"),
    ("00", {"target_number": 0}, "0+0"),
    ("19", {"target_number": 100, "do_not_check_weird_solutions": False}, None),
    ("5", {"target_number": -5, "allow_negative": True}, "(-5)"),
]


def verify_known_solutions(verbose: bool = True) -> bool:
    """
    CRITICAL SELF-TEST: solve puzzles with known answers.

    If even one of these fails, the enumerator is broken and no
    result it produces can be trusted.
    """
    if verbose:
        print("=== VERIFICATION OF KNOWN SOLUTIONS ===")
    validator = ResultValidator()
    tests_passed = True
    for digits, overrides, expected in KNOWN_SOLUTIONS:
        config = SolverConfig(**overrides)
        found = Enumerator(config).solve(digits)
        ok = found == expected
        if ok and found is not None:
            ok = validator.validate(found, config.target_number, config.radix_base).is_exact
        if verbose:
            target = mpmath.nstr(config.target_number, 10)
            print(f"  {digits} -> {target}: {found}  {'✓' if ok else '✗ ERROR!'}")
        tests_passed &= ok

    if verbose:
        print(f"\n  {'ALL TESTS PASSED ✓' if tests_passed else 'ERRORS DETECTED ✗, ABORT!'}")
    return tests_passed
