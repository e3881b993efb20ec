"""
Tests for derived usage metrics and variance classification.
"""
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from usage.metrics import VarianceLevel, classify_variance, cs_per_1k, volume_multiplier, week_spread


class DerivedMetricsTests(SimpleTestCase):
    def test_cs_per_1k_and_volume(self):
        self.assertEqual(cs_per_1k(Decimal("19.5"), Decimal("40")), Decimal("0.4875"))
        self.assertEqual(volume_multiplier(Decimal("19.5"), Decimal("40"), 12), Decimal("5.85"))

    def test_missing_or_zero_conversion_gives_none(self):
        self.assertIsNone(cs_per_1k(Decimal("19.5"), None))
        self.assertIsNone(cs_per_1k(Decimal("19.5"), Decimal("0")))
        self.assertIsNone(volume_multiplier(Decimal("19.5"), None, 12))
        self.assertIsNone(volume_multiplier(Decimal("19.5"), Decimal("0.00"), 12))

    def test_missing_average_gives_none(self):
        self.assertIsNone(cs_per_1k(None, Decimal("40")))

    def test_zero_average_is_zero(self):
        self.assertEqual(cs_per_1k(Decimal("0"), Decimal("40")), Decimal("0"))

    def test_no_multiplier_gives_none(self):
        self.assertIsNone(volume_multiplier(Decimal("19.5"), Decimal("40"), None))


class VarianceTests(SimpleTestCase):
    def test_spread_ignores_nulls(self):
        self.assertEqual(week_spread([Decimal("10"), None, Decimal("12.5"), None]), Decimal("2.5"))
        self.assertEqual(week_spread([None, None, None, None]), Decimal("0"))

    def test_boundaries_are_exclusive(self):
        cases = [
            (["10", "13"], VarianceLevel.MODERATE),
            (["10", "13.01"], VarianceLevel.HIGH),
            (["10", "11"], VarianceLevel.NORMAL),
            (["10", "11.01"], VarianceLevel.MODERATE),
            (["10", "11", "12", "13"], VarianceLevel.MODERATE),
        ]
        for weeks, expected in cases:
            with self.subTest(weeks=weeks):
                self.assertEqual(classify_variance([Decimal(w) for w in weeks]), expected)

    def test_all_null_weeks_are_normal(self):
        self.assertEqual(classify_variance([None] * 4), VarianceLevel.NORMAL)

    @override_settings(USAGE_REPORT={"high_variance_spread": 10, "moderate_variance_spread": 5})
    def test_thresholds_come_from_settings(self):
        self.assertEqual(classify_variance([Decimal("10"), Decimal("16")]), VarianceLevel.MODERATE)
