"""
Tests for the weekly usage report parser.
"""
from django.test import SimpleTestCase

from usage.parser import (
    CATEGORY_LABELS,
    assign_categories,
    extract_store_number,
    locate_category_headers,
    parse_usage_report,
    parse_usage_report_with_diagnostics,
    recover_product_records,
)
from usage.services import parse_decimal


MEAT_LINE_1 = "P10002 Chicken, Orange Dark Battered K- LB 19.26 20.97 19.09 20.17 19.90"
MEAT_LINE_2 = "P10028 Chicken, Teriyaki Thigh Marinated K- LB 12.10 11.85 13.02 12.40 12.34"
MEAT_HEADER = "Store 1020 Meat Inventory Usage per $1000"

SAMPLE_REPORT = "\n".join([
    "Weekly Inventory Usage Store 1020 Period 10",
    MEAT_LINE_1,
    MEAT_LINE_2,
    MEAT_HEADER,
    "P16032 Shrimp, Battered Tempura 29/33 LB 4.10 3.95 4.40 4.05 4.13",
    "Store 1020 Seafood Inventory Usage per $1000",
])


class EndToEndParseTests(SimpleTestCase):
    def test_store_1020_meat_sample(self):
        report = parse_usage_report("\n".join(["Store 1020", MEAT_LINE_1, MEAT_LINE_2, MEAT_HEADER]))

        self.assertEqual(report.store_number, "1020")
        meat = [c for c in report.categories if c.name == "Meat"]
        self.assertEqual(len(meat), 1)
        products = meat[0].products
        self.assertEqual([p.product_number for p in products], ["P10002", "P10028"])
        first = products[0]
        self.assertEqual(first.product_name, "Chicken, Orange Dark Battered")
        self.assertEqual(first.unit, "LB")
        self.assertEqual(first.weeks["w1"], "19.26")
        self.assertEqual(first.weeks["w4"], "20.17")
        self.assertEqual(first.average, "19.90")

    def test_every_label_yields_a_category(self):
        report = parse_usage_report(SAMPLE_REPORT)
        self.assertEqual(sorted(c.name for c in report.categories), sorted(CATEGORY_LABELS))
        self.assertEqual(report.product_count, 3)

    def test_products_follow_their_header(self):
        report = parse_usage_report(SAMPLE_REPORT)
        by_name = {c.name: c for c in report.categories}
        self.assertEqual([p.product_number for p in by_name["Meat"].products], ["P10002", "P10028"])
        self.assertEqual([p.product_number for p in by_name["Seafood"].products], ["P16032"])
        self.assertEqual(by_name["Produce"].products, [])

    def test_parse_is_idempotent(self):
        self.assertEqual(parse_usage_report(SAMPLE_REPORT), parse_usage_report(SAMPLE_REPORT))

    def test_to_dict_shape(self):
        data = parse_usage_report(SAMPLE_REPORT).to_dict()
        self.assertEqual(data["store_number"], "1020")
        product = data["categories"][0]["products"][0]
        self.assertEqual(
            set(product.keys()),
            {"product_number", "product_name", "unit", "weeks", "average"},
        )
        self.assertEqual(set(product["weeks"].keys()), {"w1", "w2", "w3", "w4"})


class StoreNumberTests(SimpleTestCase):
    def test_first_match_wins(self):
        self.assertEqual(extract_store_number("store 77 ... Store 1020"), "77")

    def test_missing_store_number_is_empty(self):
        self.assertEqual(extract_store_number("no header here"), "")
        self.assertEqual(parse_usage_report("").store_number, "")


class CategoryHeaderTests(SimpleTestCase):
    def test_headers_sorted_by_document_position(self):
        text = (
            "Store 1 Seafood Inventory Usage per $1000 ... "
            "Store 1 Meat Inventory Usage per $1000"
        )
        headers = locate_category_headers(text)
        self.assertEqual([h.name for h in headers], ["Seafood", "Meat"])
        self.assertLess(headers[0].offset, headers[1].offset)

    def test_header_match_is_case_insensitive(self):
        headers = locate_category_headers("STORE 1020 OTHER   COGS INVENTORY USAGE PER $1000")
        self.assertEqual([h.name for h in headers], ["Other Cogs"])

    def test_missing_headers_come_last_in_declaration_order(self):
        text = "\n".join([
            MEAT_LINE_1,
            "Store 1020 Paper Inventory Usage per $1000",
            MEAT_LINE_2,
            MEAT_HEADER,
        ])
        names = [c.name for c in parse_usage_report(text).categories]
        self.assertEqual(names, ["Paper", "Meat", "Seafood", "Produce", "Grocery", "Condiments", "Other Cogs"])

    def test_products_after_last_header_are_not_assigned(self):
        text = "\n".join([MEAT_LINE_1, MEAT_HEADER, MEAT_LINE_2])
        report = parse_usage_report(text)
        self.assertEqual(report.product_count, 1)
        self.assertEqual(report.categories[0].products[0].product_number, "P10002")

    def test_no_headers_means_no_products(self):
        report = parse_usage_report(MEAT_LINE_1)
        self.assertEqual(report.product_count, 0)
        self.assertEqual([c.name for c in report.categories], CATEGORY_LABELS)


class RecordRecoveryTests(SimpleTestCase):
    def test_parentheses_are_stripped(self):
        recovery = recover_product_records("P1116 Sauce, Cooking Basic GAL (1.50) 2.00 (3,100.25) 3.00 2.17")
        product = recovery.records[0].product
        self.assertEqual(product.weeks["w1"], "1.50")
        self.assertEqual(product.weeks["w3"], "3,100.25")

    def test_parenthesized_average_is_stripped(self):
        recovery = recover_product_records("P1116 Sauce, Cooking Basic GAL 1.50 2.00 3.00 3.00 (2.38)")
        product = recovery.records[0].product
        self.assertEqual(product.average, "2.38")
        self.assertEqual(parse_decimal(product.average), parse_decimal("(2.38)"))

    def test_dash_placeholders_are_kept_as_text(self):
        recovery = recover_product_records("P19045 Mushroom, Fresh LB - — 2.00 1.00 1.50")
        product = recovery.records[0].product
        self.assertEqual(product.weeks["w1"], "-")
        self.assertEqual(product.weeks["w2"], "—")

    def test_name_with_capital_p_is_kept_whole(self):
        recovery = recover_product_records("P1580 Sauce, Stir Fry Black Pepper CT 1.00 2.00 3.00 4.00 2.50")
        self.assertEqual(recovery.records[0].product.product_name, "Sauce, Stir Fry Black Pepper")

    def test_offsets_are_recorded(self):
        text = MEAT_LINE_1 + "\n" + MEAT_LINE_2
        recovery = recover_product_records(text)
        self.assertEqual([r.offset for r in recovery.records], [0, len(MEAT_LINE_1) + 1])

    def test_unmatched_product_numbers_are_reported(self):
        text = "\n".join([MEAT_LINE_1, "P99999 Broken Line XX 1.00 2.00", MEAT_LINE_2])
        recovery = recover_product_records(text)
        self.assertEqual(len(recovery.records), 2)
        self.assertEqual([u.product_number for u in recovery.unmatched], ["P99999"])
        self.assertTrue(recovery.unmatched[0].snippet.startswith("P99999 Broken Line"))

    def test_diagnostics_returned_with_report(self):
        text = "\n".join([MEAT_LINE_1, "P42 nothing useful", MEAT_HEADER])
        report, recovery = parse_usage_report_with_diagnostics(text)
        self.assertEqual(report.product_count, 1)
        self.assertEqual([u.product_number for u in recovery.unmatched], ["P42"])


class AssignCategoriesTests(SimpleTestCase):
    def test_every_record_lands_in_at_most_one_category(self):
        report, recovery = parse_usage_report_with_diagnostics(SAMPLE_REPORT)
        assigned = [p for c in report.categories for p in c.products]
        self.assertEqual(len(assigned), len(recovery.records))

    def test_first_category_takes_records_from_start(self):
        recovery = recover_product_records(SAMPLE_REPORT)
        headers = locate_category_headers(SAMPLE_REPORT)
        categories = assign_categories(headers, recovery.records)
        self.assertEqual(categories[0].name, "Meat")
        self.assertEqual(len(categories[0].products), 2)
