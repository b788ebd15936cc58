"""
Tests for the memoized equation enumerator
Covers the reference puzzles, pruning, tie-breaking, cache and config drift
"""

import math
import unittest
from unittest import mock

from config import SolverConfig
from enumerator import Enumerator, SolverStats, _parse_literal, solve, validate_digit_string
from equation import Equation
from errors import ConfigDriftError, InvalidDigitStringError


def enumerator_for(**overrides):
    return Enumerator(SolverConfig(**overrides))


class TestReferencePuzzles(unittest.TestCase):
    """Small puzzles with known answers"""

    def test_sum_of_two_digits(self):
        self.assertEqual(enumerator_for(target_number=3).solve("12"), "1+2")

    def test_product_of_two_digits(self):
        self.assertEqual(enumerator_for(target_number=2).solve("12"), "1*2")
        self.assertEqual(enumerator_for(target_number=8).solve("24"), "2*4")

    def test_concatenated_literal(self):
        enumerator = enumerator_for(target_number=12, allow_digit_concatenation=True)
        self.assertEqual(enumerator.solve("12"), "12")

    def test_no_concatenation_without_flag(self):
        self.assertIsNone(enumerator_for(target_number=12).solve("12"))

    def test_zeros(self):
        enumerator = enumerator_for(target_number=0)
        self.assertEqual(enumerator.solve("00"), "0+0")
        # 0/0 was tried and thrown away
        self.assertEqual(enumerator.stats.rejected_non_finite, 1)

    def test_unreachable_target(self):
        enumerator = enumerator_for(target_number=100, do_not_check_weird_solutions=False)
        self.assertIsNone(enumerator.solve("19"))

    def test_negative_literal(self):
        enumerator = enumerator_for(target_number=-5, allow_negative=True)
        self.assertEqual(enumerator.solve("5"), "(-5)")

    def test_earlier_operator_wins_ties(self):
        # 2+2, 2*2 and 2^2 are all 4 with no parentheses
        self.assertEqual(enumerator_for(target_number=4).solve("22"), "2+2")

    def test_other_radix(self):
        enumerator = enumerator_for(target_number=255, radix_base=16, allow_digit_concatenation=True)
        self.assertEqual(enumerator.solve("ff"), "ff")
        self.assertEqual(enumerator.solve("FF"), "ff")
        self.assertEqual(enumerator_for(target_number=2, radix_base=2).solve("11"), "1+1")

    def test_one_shot_solve(self):
        self.assertEqual(solve("24", 8), "2*4")
        self.assertEqual(solve("5", -5, allow_negative=True), "(-5)")


class TestInputValidation(unittest.TestCase):

    def test_empty(self):
        with self.assertRaises(InvalidDigitStringError):
            Enumerator().solve("")

    def test_bad_characters(self):
        for bad in ("12a", "1 2", "-1", "1.5", "١٢"):
            with self.assertRaises(InvalidDigitStringError):
                Enumerator().solve(bad)

    def test_is_value_error(self):
        with self.assertRaises(ValueError):
            validate_digit_string("9", 8)

    def test_radix_alphabet(self):
        self.assertEqual(validate_digit_string("1F", 16), "1f")
        self.assertEqual(validate_digit_string("101", 2), "101")

    def test_lowercase_changes_length(self):
        # "İ".lower() is two code points long
        with self.assertRaises(InvalidDigitStringError):
            validate_digit_string("İ", 36)
        with self.assertRaises(InvalidDigitStringError):
            Enumerator(SolverConfig(radix_base=20)).solve("1İ")

    def test_huge_literal_parses_to_inf(self):
        self.assertEqual(_parse_literal("9" * 400, 10), math.inf)
        self.assertEqual(_parse_literal("ff", 16), 255.0)


class TestPruning(unittest.TestCase):
    """Weirdness checks: magnitude window and depth heuristic"""

    def test_magnitude_and_depth_counters(self):
        enumerator = enumerator_for(target_number=81)
        self.assertEqual(enumerator.solve("99"), "9*9")
        stats = enumerator.stats
        self.assertEqual(stats.considered, 5)
        self.assertEqual(stats.accepted, 1)
        self.assertEqual(stats.rejected_by_magnitude, 1)   # 9^9
        self.assertEqual(stats.rejected_by_depth, 3)       # 18, 0, 1

    def test_magnitude_window(self):
        enumerator = Enumerator()
        self.assertTrue(enumerator._is_weird_magnitude(1e7))
        self.assertTrue(enumerator._is_weird_magnitude(-1e7))
        self.assertTrue(enumerator._is_weird_magnitude(1e-7))
        self.assertFalse(enumerator._is_weird_magnitude(0.0))
        self.assertFalse(enumerator._is_weird_magnitude(5.0))

    def test_depth_heuristic(self):
        enumerator = enumerator_for(target_number=100)
        self.assertTrue(enumerator._is_promising_at_depth(100.0, 0))
        self.assertFalse(enumerator._is_promising_at_depth(99.0, 0))
        self.assertTrue(enumerator._is_promising_at_depth(10.0, 1))
        self.assertTrue(enumerator._is_promising_at_depth(-1000.0, 1))
        self.assertFalse(enumerator._is_promising_at_depth(9.99, 1))
        self.assertFalse(enumerator._is_promising_at_depth(1001.0, 1))
        self.assertTrue(enumerator._is_promising_at_depth(1e5, 2))

    def test_heuristic_misses_additive_solutions(self):
        # 2*3-6: the half 2*3 is far from 0, so the heuristic drops it
        self.assertIsNone(enumerator_for(target_number=0).solve("236"))
        unpruned = enumerator_for(target_number=0, do_not_check_weird_solutions=False)
        self.assertEqual(unpruned.solve("236"), "2*3-6")

    def test_longer_string_still_solved(self):
        enumerator = enumerator_for(target_number=24)
        self.assertIsNotNone(enumerator.solve("1234"))

    def test_overflowing_literal_and_its_negation_skipped(self):
        enumerator = enumerator_for(
            allow_digit_concatenation=True, allow_negative=True,
            do_not_check_weird_solutions=False,
        )
        with mock.patch("enumerator._parse_literal", return_value=math.inf):
            self.assertEqual(enumerator.resolve("7"), {})

        # an overflowing whole run still leaves its splits
        enumerator = enumerator_for(
            allow_digit_concatenation=True, allow_negative=True,
            do_not_check_weird_solutions=False,
        )
        real_parse = _parse_literal
        with mock.patch(
            "enumerator._parse_literal",
            side_effect=lambda digits, radix: math.inf if len(digits) > 1 else real_parse(digits, radix),
        ):
            value_map = enumerator.resolve("12")
        self.assertNotIn(12.0, value_map)
        self.assertNotIn(-12.0, value_map)
        self.assertEqual(value_map[3.0].text, "1+2")


class TestDeduplication(unittest.TestCase):

    def test_single_equation_per_value(self):
        enumerator = enumerator_for(do_not_check_weird_solutions=False)
        value_map = enumerator.resolve("1234")
        for value, equation in value_map.items():
            self.assertTrue(math.isfinite(value))
            self.assertIsInstance(equation, Equation)
        # every key at this level came from an accepted combination
        self.assertLessEqual(len(value_map), enumerator.stats.accepted)

    def test_same_text_under_rounding_adjacent_values(self):
        # (1+2/3)+4 and 1+(2/3+4) round differently and render alike
        enumerator = enumerator_for(do_not_check_weird_solutions=False)
        value_map = enumerator.resolve("1234")
        keys = sorted(v for v, eq in value_map.items() if eq.text == "1+2/3+4")
        self.assertEqual(len(keys), 2)
        self.assertNotEqual(keys[0], keys[1])
        self.assertEqual(keys[1], 17 / 3)
        self.assertTrue(math.isclose(keys[0], keys[1], rel_tol=1e-15))

    def test_shallower_parentheses_replace(self):
        # 1-(2+3) is found first, 1-2-3 replaces it
        enumerator = enumerator_for(do_not_check_weird_solutions=False)
        value_map = enumerator.resolve("123")
        self.assertEqual(value_map[-4.0].text, "1-2-3")
        self.assertEqual(value_map[-4.0].paren_depth, 0)
        self.assertGreater(enumerator.stats.rejected_duplicate, 0)

    def test_equal_depth_keeps_first(self):
        enumerator = enumerator_for(do_not_check_weird_solutions=False)
        value_map = enumerator.resolve("123")
        self.assertEqual(value_map[0.0].text, "1+2-3")

    def test_negation_of_zero_keeps_plain_zero(self):
        enumerator = enumerator_for(allow_negative=True, do_not_check_weird_solutions=False)
        self.assertEqual(enumerator.resolve("0")[0.0].text, "0")


class TestCache(unittest.TestCase):

    def test_repeated_solves_are_identical(self):
        enumerator = enumerator_for(target_number=24)
        first = enumerator.solve("1234")
        second = enumerator.solve("1234")
        self.assertEqual(first, second)
        self.assertEqual(enumerator.stats.cache_hits, 1)
        self.assertEqual(enumerator.stats.cache_misses, 0)

    def test_independent_enumerators_agree(self):
        self.assertEqual(
            enumerator_for(target_number=10).solve("1234"),
            enumerator_for(target_number=10).solve("1234"),
        )

    def test_cache_hit_returns_same_map(self):
        enumerator = enumerator_for(do_not_check_weird_solutions=False)
        self.assertIs(enumerator.resolve("123"), enumerator.resolve("123"))

    def test_invalidation_rebuilds_identical_map(self):
        enumerator = enumerator_for(do_not_check_weird_solutions=False)
        before = dict(enumerator.resolve("1234"))
        enumerator.invalidate_cache()
        self.assertEqual(enumerator.cache_size, 0)
        after = enumerator.resolve("1234")
        self.assertEqual(list(before.items()), list(after.items()))

    def test_cache_holds_every_sub_range(self):
        enumerator = enumerator_for(target_number=6)
        enumerator.solve("123")
        # 123, 1, 23, 2, 3, 12
        self.assertEqual(enumerator.cache_size, 6)

    def test_configure_invalidates(self):
        enumerator = enumerator_for(target_number=3)
        enumerator.solve("12")
        enumerator.configure(target_number=3)
        self.assertEqual(enumerator.cache_size, 3)
        enumerator.configure(allow_digit_concatenation=True, target_number=12)
        self.assertEqual(enumerator.cache_size, 0)
        self.assertEqual(enumerator.solve("12"), "12")


class TestConfigDrift(unittest.TestCase):

    def test_resolve_detects_drift(self):
        enumerator = enumerator_for(do_not_check_weird_solutions=False)
        enumerator.resolve("12")
        enumerator.config.allow_negative = True
        with self.assertRaises(ConfigDriftError):
            enumerator.resolve("12")

    def test_solve_recovers_from_drift(self):
        enumerator = enumerator_for(target_number=12)
        self.assertIsNone(enumerator.solve("12"))
        enumerator.config.allow_digit_concatenation = True
        with self.assertLogs("enumerator", level="WARNING"):
            self.assertEqual(enumerator.solve("12"), "12")
        self.assertFalse(enumerator.has_config_drift())


class TestStats(unittest.TestCase):

    def test_reset_at_each_solve(self):
        enumerator = enumerator_for(target_number=3)
        enumerator.solve("12")
        self.assertEqual(enumerator.stats.considered, 5)
        enumerator.invalidate_cache()
        self.assertEqual(enumerator.stats.considered, 0)

    def test_summary(self):
        stats = SolverStats(considered=4, accepted=1, rejected_by_depth=3,
                            cache_hits=1, cache_misses=3)
        summary = stats.summary()
        self.assertIn("Combinations considered: 4", summary)
        self.assertIn("Cache hits: 1/4", summary)
        self.assertIn("25.0%", summary)

    def test_empty_summary(self):
        self.assertIn("Cache hits: 0/0", SolverStats().summary())


if __name__ == '__main__':
    unittest.main()
