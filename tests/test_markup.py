import math
import unittest

from config import Config
from markup_dashboard.services.markup import calc_markup, safe_multiplier, suggest_price


class TestCalcMarkup(unittest.TestCase):

    def test_total_percent_and_multiplier(self):
        res = calc_markup(0.1, 0.2, 0.05, 0.05, 0.0, 0.1)
        self.assertAlmostEqual(res.total_percent, 0.5, places=6)
        self.assertAlmostEqual(res.multiplier, 2.0, places=6)
        self.assertEqual(res.effective_multiplier, res.multiplier)

    def test_multiplier_matches_formula(self):
        for parts in [(0.01, 0.02, 0.03, 0.04, 0.05, 0.06), (0.3, 0, 0, 0, 0, 0.25), (0, 0, 0, 0, 0.9, 0)]:
            p = sum(parts)
            self.assertAlmostEqual(calc_markup(*parts).multiplier, 1 / (1 - p), places=6)

    def test_zero_percentages(self):
        self.assertEqual(calc_markup(0, 0, 0, 0, 0, 0).multiplier, 1)

    def test_fixed_value_spread_over_average_ticket(self):
        res = calc_markup(0, 0, 0, 0, 0, 0, fixed_value=100, average_ticket=200)
        self.assertAlmostEqual(res.effective_multiplier, 1.5, places=6)

    def test_fixed_value_ignored_without_ticket(self):
        res = calc_markup(0.1, 0, 0, 0, 0, 0, fixed_value=100, average_ticket=0)
        self.assertEqual(res.effective_multiplier, res.multiplier)

    def test_pathological_totals_do_not_raise(self):
        self.assertTrue(math.isinf(calc_markup(0.5, 0.5, 0, 0, 0, 0).multiplier))
        self.assertLess(calc_markup(0.5, 0.5, 0.2, 0, 0, 0).multiplier, 0)

    def test_pure(self):
        args = (0.1, 0.08, 0.02, 0, 0, 0.1)
        self.assertEqual(calc_markup(*args), calc_markup(*args))


class TestSafeMultiplier(unittest.TestCase):

    def test_keeps_usable_value(self):
        self.assertEqual(safe_multiplier(1.4), 1.4)

    def test_falls_back(self):
        for bad in (math.inf, -5.0, 1.0, 0.5, math.nan):
            self.assertEqual(safe_multiplier(bad, 1.25), 1.25)

    def test_default_fallback_from_config(self):
        self.assertEqual(safe_multiplier(math.inf), Config.MARKUP_FALLBACK_MULTIPLIER)


class TestSuggestPrice(unittest.TestCase):

    def test_price(self):
        self.assertEqual(suggest_price(10.0, 1.5), 15.0)
        self.assertEqual(suggest_price(3.33, 1 / 0.7), 4.76)

    def test_negative_cost(self):
        with self.assertRaises(ValueError):
            suggest_price(-1, 2)
        with self.assertRaises(ValueError):
            suggest_price(float("nan"), 2)
        with self.assertRaises(ValueError):
            suggest_price(math.inf, 2)
