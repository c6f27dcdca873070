import unittest
from datetime import date

from markup_dashboard.services.revenue import RevenueRecord, average_revenue, window_start

TODAY = date(2026, 6, 15)


def rec(month, amount):
    return RevenueRecord(month=month, amount=amount)


class TestAverageRevenue(unittest.TestCase):

    def test_empty(self):
        for period in ("all", "todos", "12", 3):
            self.assertEqual(average_revenue([], period, TODAY), 0)

    def test_all_time(self):
        records = [rec(date(2020, 1, 1), 100), rec(date(2024, 1, 1), 200), rec(date(2026, 5, 1), 300)]
        self.assertEqual(average_revenue(records, "all", TODAY), 200)

    def test_trailing_window(self):
        records = [rec(date(2025, 1, 1), 1000), rec(date(2026, 4, 1), 100), rec(date(2026, 5, 1), 300)]
        self.assertEqual(average_revenue(records, "3", TODAY), 200)
        self.assertEqual(average_revenue(records, 24, TODAY), 1400 / 3)

    def test_window_boundary_is_inclusive(self):
        limit = window_start(3, TODAY)
        self.assertEqual(limit, date(2026, 3, 15))
        records = [rec(limit, 90), rec(date(2026, 3, 14), 10)]
        self.assertEqual(average_revenue(records, 3, TODAY), 90)

    def test_empty_window(self):
        records = [rec(date(2020, 1, 1), 500)]
        self.assertEqual(average_revenue(records, "6", TODAY), 0)

    def test_duplicate_months_are_separate_samples(self):
        records = [rec(date(2026, 5, 1), 100), rec(date(2026, 5, 1), 300)]
        self.assertEqual(average_revenue(records, "all", TODAY), 200)
