#!/usr/bin/env python3
"""
DIGIT SOLVER: make a target number from the digits of a string

Finds an expression over the digits (order fixed, operators + - * / ^)
whose value is the target.

Usage:
    python3 run_solver.py 1234                       # target 100
    python3 run_solver.py 1234 5678 --target 24      # several strings
    python3 run_solver.py 123 --concat --negative    # allow 12, (-3), ...
    python3 run_solver.py 1234 --validate --stats    # check answers, show counters
    python3 run_solver.py --estimate                 # feasible lengths only
    python3 run_solver.py --benchmark                # time solves by length
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from config import SolverConfig
from enumerator import Enumerator
from errors import InvalidDigitStringError
from search_space import (
    DEFAULT_EXPRESSION_BUDGET,
    estimate_search_space,
    find_max_feasible_length,
    format_search_space,
)
from validator import ResultValidator, verify_known_solutions

NO_SOLUTION = "no solution found"

EXIT_OK = 0
EXIT_NO_SOLUTION = 1
EXIT_INVALID_INPUT = 2


class ConsoleLog:
    """Log to console and, optionally, a file."""

    def __init__(self, log_file: Optional[Path] = None):
        self.log_file = log_file
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, msg: str):
        timestamp = time.strftime("%H:%M:%S")
        line = f"[{timestamp}] {msg}"
        print(line, flush=True)
        if self.log_file is not None:
            with open(self.log_file, "a") as f:
                f.write(line + "\n")


def run_benchmark(config: SolverConfig, max_length: int = 8):
    """Time one solve per length on strings of increasing length."""
    print("\n=== BENCHMARK ===\n")
    print(f"{'Digits':>8} {'String':>10} {'Cache':>8} {'Time':>12} {'Result':>20}")
    print("-" * 62)

    for length in range(1, max_length + 1):
        digits = "".join(str((i % 9) + 1) for i in range(length))
        enumerator = Enumerator(config)

        t0 = time.time()
        found = enumerator.solve(digits)
        elapsed = time.time() - t0

        result_str = NO_SOLUTION if found is None else found[:20]
        time_str = f"{elapsed:.3f}s" if elapsed < 60 else f"{elapsed/60:.1f}min"
        print(f"{length:>8} {digits:>10} {enumerator.cache_size:>8} {time_str:>12} {result_str:>20}")


def estimate_only(config: SolverConfig):
    """Print the search-space size by length and the longest feasible string."""
    print("\n=== FEASIBLE LENGTHS ===\n")
    print(f"{'Budget':>14} {'plain':>8} {'concat':>8} {'negative':>10} {'both':>8}")
    print("-" * 54)
    for budget in (10 ** 4, 10 ** 6, DEFAULT_EXPRESSION_BUDGET, 10 ** 10):
        row = []
        for concat, negative in ((False, False), (True, False), (False, True), (True, True)):
            variant = config.with_changes(allow_digit_concatenation=concat, allow_negative=negative)
            row.append(find_max_feasible_length(variant, budget))
        print(f"{budget:>14.0e} {row[0]:>8} {row[1]:>8} {row[2]:>10} {row[3]:>8}")

    print("\n=== DETAIL FOR CURRENT SETTINGS ===\n")
    print(f"{'Digits':>8} {'Sub-ranges':>12} {'Trees':>10} {'log10(expr)':>12}")
    print("-" * 48)
    for length in range(1, 13):
        estimate = estimate_search_space(length, config)
        feas = "✓" if estimate.is_feasible else "✗"
        print(f"{length:>8} {estimate.n_sub_ranges:>12} {estimate.n_parenthesizations:>10} {estimate.log10_expressions:>12.1f}  {feas}")


def solve_all(
    enumerator: Enumerator,
    digit_strings: List[str],
    log: ConsoleLog,
    validate: bool = False,
    show_stats: bool = False,
) -> int:
    """Solve every string; return the process exit status."""
    validator = ResultValidator() if validate else None
    status = EXIT_OK
    for digits in digit_strings:
        estimate = estimate_search_space(len(digits), enumerator.config)
        if not estimate.is_feasible:
            log(f"  ⚠ {digits}: {format_search_space(len(digits), enumerator.config)}, this may take long")

        if enumerator.config.do_not_check_weird_solutions:
            # depth-pruned maps of one string are not valid sub-results of another
            enumerator.invalidate_cache()

        t0 = time.time()
        try:
            found = enumerator.solve(digits)
        except InvalidDigitStringError as exc:
            log(f"  ✗ {exc}")
            status = max(status, EXIT_INVALID_INPUT)
            continue
        elapsed = time.time() - t0

        if found is None:
            log(f"  {digits} → {NO_SOLUTION} ({elapsed:.3f}s)")
            status = max(status, EXIT_NO_SOLUTION)
        else:
            target = enumerator.config.target_number
            log(f"  {digits} → {found} = {target:g} ({elapsed:.3f}s)")
            if validator is not None:
                result = validator.validate(found, target, enumerator.config.radix_base)
                mark = "✓" if result.is_valid else "✗ INVALID"
                log(f"    validation: {mark} (exact value {result.exact_value})")
                if not result.is_valid:
                    status = max(status, EXIT_NO_SOLUTION)

        if validator is not None:
            value_map = enumerator.resolve(digits)
            failures = validator.validate_value_map(value_map, enumerator.config.radix_base)
            log(f"    map check: {len(value_map) - len(failures)}/{len(value_map)} equations match their values")
            for failure in failures:
                log(f"    ✗ {failure.text} stored as {failure.stored_value!r}, exact {failure.exact_value}")
            if failures:
                status = max(status, EXIT_NO_SOLUTION)

        if show_stats:
            for line in enumerator.stats.summary().splitlines():
                log(f"    {line}")
    return status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Digit solver: make a target number from a string of digits"
    )
    parser.add_argument(
        "digits", nargs="*",
        help="Digit strings to solve (digits of the radix only, no signs or spaces)"
    )
    parser.add_argument(
        "--target", type=float, default=100,
        help="Number to reach (default: 100)"
    )
    parser.add_argument(
        "--radix", type=int, default=10,
        help="Radix the digits are read in (default: 10)"
    )
    parser.add_argument(
        "--concat", action="store_true",
        help="Allow runs of digits to be read as one number (1 2 3 -> 1+23)"
    )
    parser.add_argument(
        "--negative", action="store_true",
        help="Allow literals to be read negated (2 1 -> 2^(-1))"
    )
    parser.add_argument(
        "--check-weird", dest="check_weird", action=argparse.BooleanOptionalAction, default=True,
        help="Prune values too large/small or far from the target (default: on)"
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Re-evaluate every answer exactly with sympy"
    )
    parser.add_argument(
        "--stats", action="store_true",
        help="Print search counters after each solve"
    )
    parser.add_argument(
        "--estimate", action="store_true",
        help="Print only the search-space estimates, do not solve"
    )
    parser.add_argument(
        "--benchmark", action="store_true",
        help="Time solves on strings of increasing length"
    )
    parser.add_argument(
        "--self-test", action="store_true",
        help="Verify known solutions before solving"
    )
    parser.add_argument(
        "--log-file", type=Path, default=None,
        help="Also append the log to this file"
    )
    parser.add_argument(
        "--verbose", "-v", action="count", default=0,
        help="Show solver logging (-v info, -vv debug)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    try:
        config = SolverConfig(
            radix_base=args.radix,
            allow_digit_concatenation=args.concat,
            allow_negative=args.negative,
            do_not_check_weird_solutions=args.check_weird,
            target_number=args.target,
        )
    except ValueError as exc:
        parser.error(str(exc))

    if args.self_test and not verify_known_solutions():
        print("\n ⚠ CRITICAL ERROR: self-tests failed. ABORTING.")
        return EXIT_NO_SOLUTION

    if args.benchmark:
        run_benchmark(config)
        return EXIT_OK

    if args.estimate:
        estimate_only(config)
        return EXIT_OK

    if not args.digits:
        parser.error("at least one digit string is required")

    log = ConsoleLog(args.log_file)
    log(f"Target {config.target_number:g}, radix {config.radix_base}, "
        f"concat={'on' if config.allow_digit_concatenation else 'off'}, "
        f"negative={'on' if config.allow_negative else 'off'}, "
        f"weird checks={'on' if config.do_not_check_weird_solutions else 'off'}")

    enumerator = Enumerator(config)
    return solve_all(enumerator, args.digits, log, validate=args.validate, show_stats=args.stats)


if __name__ == "__main__":
    sys.exit(main())
