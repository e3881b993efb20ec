"""
Tests for the usage management commands.
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from stores.models import Store
from usage.conversions import ConversionTable
from usage.models import UsageProduct
from usage.services import replace_store_usage


def _row(number, name, average="19.5"):
    return {
        "product_number": number,
        "product_name": name,
        "unit": "LB",
        "weeks": {"w1": "19", "w2": "20", "w3": "19", "w4": "20"},
        "average": average,
    }


class UsageCommandTests(TestCase):
    def setUp(self):
        self.store = Store.objects.create(number="1020")
        self.other = Store.objects.create(number="2040")
        # Stored with a blank table so every product starts at the default
        self.entry = replace_store_usage(
            self.store,
            [
                {"name": "Meat", "products": [
                    _row("P10002", "Chicken, Orange Dark Battered"),
                    _row("P10028", "Chicken, Teriyaki Thigh Marinated"),
                    _row("P10019", "Chicken, Dark Diced Marinated"),
                    _row("P10027", "Chicken, Breast Strip Battered"),
                ]},
                {"name": "Seafood", "products": [_row("P00001", "Mystery Item")]},
            ],
            conversions=ConversionTable({}),
        )

    def _call(self, *args, **kwargs):
        out = StringIO()
        call_command(*args, stdout=out, **kwargs)
        return out.getvalue()

    def test_update_product_conversions(self):
        output = self._call("update_product_conversions", verbose=True)

        self.assertIn("Updated 4 products, skipped 1", output)
        self.assertIn("P00001", output)
        product = UsageProduct.objects.get(category__entry=self.entry, product_number="P10002")
        self.assertEqual(product.conversion, Decimal("40.00"))

    def test_update_product_conversions_for_one_store(self):
        output = self._call("update_product_conversions", store="2040")
        self.assertIn("Updated 0 products, skipped 0", output)

    def test_update_product_conversions_unknown_store(self):
        with self.assertRaises(CommandError):
            self._call("update_product_conversions", store="9999")

    def test_check_store_data_limits_products(self):
        output = self._call("check_store_data", "1020")

        self.assertIn("Store 1020", output)
        self.assertIn("Meat: 4 products", output)
        self.assertIn("P10019", output)
        self.assertNotIn("P10027", output)
        self.assertIn("Seafood: 1 products", output)

    def test_check_store_data_without_upload(self):
        output = self._call("check_store_data", "2040")
        self.assertIn("No usage data uploaded", output)

    def test_check_store_data_unknown_store(self):
        with self.assertRaises(CommandError):
            self._call("check_store_data", "9999")

    def test_check_product(self):
        self._call("update_product_conversions")
        output = self._call("check_product", "1020", "p10002", multiplier="12")

        self.assertIn("[Meat] P10002 Chicken, Orange Dark Battered (LB)", output)
        self.assertIn("cs_per_1k: 0.4875", output)
        self.assertIn("volume_multiplier: 5.85", output)
        self.assertIn("group: WIC", output)

    def test_check_product_rejects_unknown_multiplier(self):
        with self.assertRaises(CommandError):
            self._call("check_product", "1020", "P10002", multiplier="7")

    def test_check_product_not_found(self):
        with self.assertRaises(CommandError):
            self._call("check_product", "1020", "P12345")
