"""
Tests for the usage reconciler: decimal parsing, full replace, week edits.
"""
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase

from stores.models import Store
from usage import services
from usage.conversions import ConversionTable
from usage.exceptions import TransactionError
from usage.models import UsageCategory, UsageEntry, UsageProduct
from usage.services import (
    build_usage_table,
    fits_column,
    get_latest_entry,
    is_blank_cell,
    parse_decimal,
    reapply_conversions,
    recompute_average,
    replace_store_usage,
    update_product_week,
)


def _product(number, name="Item", unit="LB", weeks=("1.00", "1.00", "1.00", "1.00"), average="1.00"):
    return {
        "product_number": number,
        "product_name": name,
        "unit": unit,
        "weeks": dict(zip(("w1", "w2", "w3", "w4"), weeks)),
        "average": average,
    }


class ParseDecimalTests(SimpleTestCase):
    def test_placeholders_are_null(self):
        for raw in (None, "", " ", "-", "—", "â€”", "  -  "):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_decimal(raw))

    def test_thousands_separator(self):
        self.assertEqual(parse_decimal("1,234.5"), Decimal("1234.5"))

    def test_parentheses_are_not_negative(self):
        self.assertEqual(parse_decimal("(2.5)"), Decimal("2.50"))

    def test_garbage_is_null(self):
        for raw in ("abc", "NaN", "Infinity", "1.2.3", "1e400", True):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_decimal(raw))

    def test_numbers_and_rounding(self):
        self.assertEqual(parse_decimal(12), Decimal("12.00"))
        self.assertEqual(parse_decimal(Decimal("3.14159")), Decimal("3.14"))
        self.assertEqual(parse_decimal("19.255"), Decimal("19.26"))

    def test_column_range(self):
        self.assertTrue(fits_column(Decimal("99999999.99")))
        self.assertTrue(fits_column(Decimal("0.00")))
        self.assertFalse(fits_column(Decimal("100000000.00")))
        self.assertFalse(fits_column(parse_decimal("1e9")))

    def test_blank_cells(self):
        for raw in (None, "", "  ", "-", "—", "â€”"):
            with self.subTest(raw=raw):
                self.assertTrue(is_blank_cell(raw))
        self.assertFalse(is_blank_cell("abc"))
        self.assertFalse(is_blank_cell("0"))

    def test_recompute_average(self):
        self.assertEqual(recompute_average([Decimal("10"), Decimal("20"), None, Decimal("30")]), Decimal("20.00"))
        self.assertIsNone(recompute_average([None, None, None, None]))


class ReconcilerTestBase(TestCase):
    def setUp(self):
        self.store = Store.objects.create(number="1020")
        self.other_store = Store.objects.create(number="2040")
        self.user = get_user_model().objects.create_user(username="manager", password="pass")
        self.categories = [
            {
                "name": "Meat",
                "products": [
                    _product("P10002", "Chicken, Orange Dark Battered",
                             weeks=("19.26", "20.97", "19.09", "20.17"), average="19.90"),
                    _product("P10028", "Chicken, Teriyaki Thigh Marinated"),
                ],
            },
            {
                "name": "Seafood",
                "products": [_product("P16032", "Shrimp, Battered Tempura")],
            },
        ]


class FullReplaceTests(ReconcilerTestBase):
    def test_creates_entry_tree_in_order(self):
        entry = replace_store_usage(self.store, self.categories, user=self.user)

        self.assertEqual(entry.uploaded_by, self.user)
        categories = list(entry.categories.order_by("position"))
        self.assertEqual([c.name for c in categories], ["Meat", "Seafood"])
        products = list(categories[0].products.order_by("position"))
        self.assertEqual([p.product_number for p in products], ["P10002", "P10028"])
        self.assertEqual(products[0].w1, Decimal("19.26"))
        self.assertEqual(products[0].average, Decimal("19.90"))

    def test_second_submit_replaces_first(self):
        first = replace_store_usage(self.store, self.categories)
        old_product_ids = list(UsageProduct.objects.filter(category__entry=first).values_list("id", flat=True))

        second = replace_store_usage(self.store, [{"name": "Produce", "products": [_product("P19013")]}])

        self.assertEqual(UsageEntry.objects.filter(store=self.store).count(), 1)
        self.assertFalse(UsageEntry.objects.filter(pk=first.pk).exists())
        self.assertFalse(UsageProduct.objects.filter(id__in=old_product_ids).exists())
        self.assertEqual(list(second.categories.values_list("name", flat=True)), ["Produce"])

    def test_other_stores_are_untouched(self):
        other = replace_store_usage(self.other_store, self.categories)
        replace_store_usage(self.store, self.categories)
        replace_store_usage(self.store, self.categories)
        self.assertTrue(UsageEntry.objects.filter(pk=other.pk).exists())

    def test_failure_mid_insert_keeps_previous_entry(self):
        previous = replace_store_usage(self.store, self.categories)
        previous_products = UsageProduct.objects.filter(category__entry=previous).count()

        real_insert = services._insert_category
        calls = []

        def flaky_insert(*args, **kwargs):
            calls.append(1)
            if len(calls) == 2:
                raise IntegrityError("simulated failure on second category")
            return real_insert(*args, **kwargs)

        with mock.patch("usage.services._insert_category", side_effect=flaky_insert):
            with self.assertRaises(TransactionError):
                replace_store_usage(self.store, self.categories)

        entries = list(UsageEntry.objects.filter(store=self.store))
        self.assertEqual(entries, [previous])
        self.assertEqual(UsageProduct.objects.filter(category__entry=previous).count(), previous_products)

    def test_conversion_comes_from_table(self):
        payload = [{"name": "Meat", "products": [_product("P10002"), _product("P00001")]}]
        entry = replace_store_usage(self.store, payload)
        conversions = {
            p.product_number: p.conversion
            for p in UsageProduct.objects.filter(category__entry=entry)
        }
        self.assertEqual(conversions["P10002"], Decimal("40.00"))
        self.assertEqual(conversions["P00001"], Decimal("1.00"))

    def test_injected_conversion_table(self):
        table = ConversionTable({"P10002": "2.5"})
        entry = replace_store_usage(self.store, [{"name": "Meat", "products": [_product("P10002")]}], conversions=table)
        product = UsageProduct.objects.get(category__entry=entry)
        self.assertEqual(product.conversion, Decimal("2.50"))

    def test_printed_average_is_stored_as_is(self):
        payload = [{"name": "Meat", "products": [
            _product("P10002", weeks=("10", "20", "", "30"), average="99"),
        ]}]
        entry = replace_store_usage(self.store, payload)
        product = UsageProduct.objects.get(category__entry=entry)
        self.assertIsNone(product.w3)
        self.assertEqual(product.average, Decimal("99.00"))

    def test_blank_cells_are_null(self):
        payload = [{"name": "Meat", "products": [
            _product("P10002", weeks=("-", "—", "â€”", " "), average=""),
        ]}]
        entry = replace_store_usage(self.store, payload)
        product = UsageProduct.objects.get(category__entry=entry)
        self.assertEqual(product.weeks, [None, None, None, None])
        self.assertIsNone(product.average)

    def test_value_too_large_for_column_keeps_previous_entry(self):
        previous = replace_store_usage(self.store, self.categories)
        payload = [{"name": "Meat", "products": [
            _product("P10002", weeks=("12,345,678,901", "1", "1", "1")),
        ]}]

        with self.assertRaises(TransactionError):
            replace_store_usage(self.store, payload)

        self.assertEqual(list(UsageEntry.objects.filter(store=self.store)), [previous])


class WeekEditTests(ReconcilerTestBase):
    def setUp(self):
        super().setUp()
        payload = [{"name": "Meat", "products": [
            _product("P10002", weeks=("10", "20", None, "30"), average="20"),
            _product("P10028", weeks=("5", "5", "5", "5"), average="5"),
        ]}]
        self.entry = replace_store_usage(self.store, payload)
        self.product = UsageProduct.objects.get(category__entry=self.entry, product_number="P10002")
        self.sibling = UsageProduct.objects.get(category__entry=self.entry, product_number="P10028")

    def test_average_recomputed_after_each_edit(self):
        product = update_product_week(self.store, self.product.id, "w3", "40")
        self.assertEqual(product.w3, Decimal("40.00"))
        self.assertEqual(product.average, Decimal("25.00"))

        product = update_product_week(self.store, self.product.id, "w1", None)
        product.refresh_from_db()
        self.assertIsNone(product.w1)
        self.assertEqual(product.w2, Decimal("20.00"))
        self.assertEqual(product.average, Decimal("30.00"))

    def test_clearing_every_week_clears_average(self):
        for week in ("w1", "w2", "w4"):
            update_product_week(self.store, self.product.id, week, "")
        self.product.refresh_from_db()
        self.assertIsNone(self.product.average)

    def test_siblings_untouched(self):
        update_product_week(self.store, self.product.id, "w2", "100")
        self.sibling.refresh_from_db()
        self.assertEqual(self.sibling.weeks, [Decimal("5.00")] * 4)
        self.assertEqual(self.sibling.average, Decimal("5.00"))

    def test_unknown_week_rejected(self):
        with self.assertRaises(ValueError):
            update_product_week(self.store, self.product.id, "w5", "1")

    def test_product_of_other_store_not_found(self):
        with self.assertRaises(UsageProduct.DoesNotExist):
            update_product_week(self.other_store, self.product.id, "w1", "1")

    def test_non_numeric_value_rejected_without_write(self):
        for raw in ("abc", "1e9", "123456789"):
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    update_product_week(self.store, self.product.id, "w1", raw)
        self.product.refresh_from_db()
        self.assertEqual(self.product.w1, Decimal("10.00"))
        self.assertEqual(self.product.average, Decimal("20.00"))

    def test_dash_clears_week(self):
        product = update_product_week(self.store, self.product.id, "w1", "-")
        self.assertIsNone(product.w1)
        self.assertEqual(product.average, Decimal("25.00"))


class ConversionRefreshTests(ReconcilerTestBase):
    def test_reapply_updates_known_and_skips_unknown(self):
        entry = replace_store_usage(
            self.store,
            [{"name": "Meat", "products": [_product("P10002"), _product("P00001")]}],
            conversions=ConversionTable({}),
        )
        updated, skipped, unknown = reapply_conversions()

        self.assertEqual((updated, skipped), (1, 1))
        self.assertEqual(unknown, ["P00001"])
        product = UsageProduct.objects.get(category__entry=entry, product_number="P10002")
        self.assertEqual(product.conversion, Decimal("40.00"))


class ReadModelTests(ReconcilerTestBase):
    def test_no_entry(self):
        self.assertIsNone(get_latest_entry(self.store))
        self.assertIsNone(build_usage_table(None))

    def test_table_with_metrics(self):
        replace_store_usage(self.store, [{"name": "Meat", "products": [
            _product("P10002", weeks=("19", "20", "19", "20"), average="19.5"),
        ]}])
        table = build_usage_table(get_latest_entry(self.store), Decimal("12"))

        row = table["categories"][0]["products"][0]
        self.assertEqual(row["cs_per_1k"], Decimal("0.4875"))
        self.assertEqual(row["volume_multiplier"], Decimal("5.85"))
        self.assertEqual(row["variance"], "normal")
        self.assertEqual(row["product_group"], "WIC")

    def test_categories_in_stored_order(self):
        replace_store_usage(self.store, self.categories)
        table = build_usage_table(get_latest_entry(self.store))
        self.assertEqual([c["name"] for c in table["categories"]], ["Meat", "Seafood"])
        self.assertIsNone(table["categories"][0]["products"][0]["volume_multiplier"])

    def test_categories_queryset_untouched(self):
        replace_store_usage(self.store, self.categories)
        self.assertEqual(UsageCategory.objects.filter(entry__store=self.store).count(), 2)
