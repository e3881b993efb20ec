"""
API tests for the store usage endpoints.
"""
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework.test import APIRequestFactory, force_authenticate

from common.roles import UserStatus
from stores.models import Store
from usage.api import UsageParseView, UsageProductWeekView, UsageView
from usage.exceptions import ExtractionError, TransactionError
from usage.models import UsageEntry, UsageProduct
from usage.services import replace_store_usage


REPORT_TEXT = "\n".join([
    "Store 1020",
    "P10002 Chicken, Orange Dark Battered K- LB 19.26 20.97 19.09 20.17 19.90",
    "P10028 Chicken, Teriyaki Thigh Marinated K- LB 12.10 11.85 13.02 12.40 12.34",
    "Store 1020 Meat Inventory Usage per $1000",
    "P99999 Unreadable line",
    "P16032 Shrimp, Battered Tempura 29/33 LB 4.10 3.95 4.40 4.05 4.13",
    "Store 1020 Seafood Inventory Usage per $1000",
])


class UsageApiTestBase(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        User = get_user_model()
        self.store = Store.objects.create(number="1020")
        self.other_store = Store.objects.create(number="2040")

        self.admin = User.objects.create_superuser(username="admin", email="admin@example.com", password="pass")
        self.manager = User.objects.create_user(username="manager", password="pass")
        self.manager.profile.stores.add(self.store)
        self.outsider = User.objects.create_user(username="outsider", password="pass")
        self.outsider.profile.stores.add(self.other_store)

    def _pdf(self, name="usage.pdf", content=b"%PDF-1.4 usage report"):
        return SimpleUploadedFile(name, content, content_type="application/pdf")

    def _parse(self, user, store_id, data):
        request = self.factory.post(f"/api/v1/stores/{store_id}/usage/parse", data, format="multipart")
        force_authenticate(request, user=user)
        return UsageParseView.as_view()(request, store_id=store_id)

    def _submit(self, user, store_id, payload):
        request = self.factory.post(f"/api/v1/stores/{store_id}/usage/", payload, format="json")
        force_authenticate(request, user=user)
        return UsageView.as_view()(request, store_id=store_id)

    def _get(self, user, store_id, query=None):
        request = self.factory.get(f"/api/v1/stores/{store_id}/usage/", query or {})
        force_authenticate(request, user=user)
        return UsageView.as_view()(request, store_id=store_id)

    def _patch(self, user, store_id, product_id, payload):
        request = self.factory.patch(
            f"/api/v1/stores/{store_id}/usage/products/{product_id}", payload, format="json"
        )
        force_authenticate(request, user=user)
        return UsageProductWeekView.as_view()(request, store_id=store_id, product_id=product_id)


class UsageParseApiTests(UsageApiTestBase):
    def test_parse_preview_returns_report_and_diagnostics(self):
        with mock.patch("usage.api.extract_text", return_value=REPORT_TEXT):
            response = self._parse(self.manager, self.store.id, {"file": self._pdf()})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["store_number"], "1020")
        self.assertEqual(response.data["product_count"], 3)
        self.assertFalse(response.data["store_mismatch"])
        meat = response.data["categories"][0]
        self.assertEqual(meat["name"], "Meat")
        self.assertEqual(meat["products"][0]["product_name"], "Chicken, Orange Dark Battered")
        unmatched = response.data["metadata"]["unmatched"]
        self.assertEqual([u["product_number"] for u in unmatched], ["P99999"])
        self.assertEqual(UsageEntry.objects.count(), 0)

    def test_store_mismatch_is_flagged(self):
        with mock.patch("usage.api.extract_text", return_value=REPORT_TEXT):
            response = self._parse(self.admin, self.other_store.id, {"file": self._pdf()})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["store_mismatch"])

    def test_unassigned_user_rejected_before_parsing(self):
        with mock.patch("usage.api.extract_text") as extract:
            response = self._parse(self.outsider, self.store.id, {"file": self._pdf()})
        self.assertEqual(response.status_code, 403)
        extract.assert_not_called()

    def test_inactive_user_rejected(self):
        self.manager.profile.status = UserStatus.INACTIVE
        self.manager.profile.save(update_fields=["status"])
        with mock.patch("usage.api.extract_text", return_value=REPORT_TEXT):
            response = self._parse(self.manager, self.store.id, {"file": self._pdf()})
        self.assertEqual(response.status_code, 403)

    def test_unreadable_file(self):
        with mock.patch("usage.api.extract_text", side_effect=ExtractionError("broken xref")):
            response = self._parse(self.manager, self.store.id, {"file": self._pdf()})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "Could not read file")

    def test_missing_file(self):
        response = self._parse(self.manager, self.store.id, {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "No file provided")

    def test_non_pdf_rejected(self):
        response = self._parse(self.manager, self.store.id, {"file": self._pdf(name="usage.txt")})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "File must be a PDF")

    @override_settings(USAGE_REPORT={"max_upload_bytes": 8})
    def test_oversized_file_rejected(self):
        response = self._parse(self.manager, self.store.id, {"file": self._pdf(content=b"x" * 64)})
        self.assertEqual(response.status_code, 400)

    def test_unknown_store(self):
        response = self._parse(self.admin, 999999, {"file": self._pdf()})
        self.assertEqual(response.status_code, 404)


class UsageSubmitApiTests(UsageApiTestBase):
    def _payload(self, store_number="1020"):
        return {
            "store_number": store_number,
            "categories": [
                {
                    "name": "Meat",
                    "products": [
                        {
                            "product_number": "P10002",
                            "product_name": "Chicken, Orange Dark Battered",
                            "unit": "LB",
                            "weeks": {"w1": "19.26", "w2": "20.97", "w3": "-", "w4": "20.17"},
                            "average": "19.90",
                        },
                    ],
                },
                {"name": "Seafood", "products": []},
            ],
        }

    def test_submit_replaces_store_report(self):
        replace_store_usage(self.store, [{"name": "Old", "products": []}])

        response = self._submit(self.manager, self.store.id, self._payload())

        self.assertEqual(response.status_code, 201)
        self.assertEqual(UsageEntry.objects.filter(store=self.store).count(), 1)
        entry = response.data["entry"]
        self.assertEqual([c["name"] for c in entry["categories"]], ["Meat", "Seafood"])
        row = entry["categories"][0]["products"][0]
        self.assertEqual(row["w1"], "19.26")
        self.assertIsNone(row["w3"])
        self.assertEqual(row["average"], "19.90")
        self.assertEqual(row["conversion"], "40.00")
        self.assertEqual(UsageEntry.objects.get(store=self.store).uploaded_by, self.manager)

    def test_other_store_number_rejected(self):
        response = self._submit(self.manager, self.store.id, self._payload(store_number="2040"))
        self.assertEqual(response.status_code, 400)
        self.assertIn("store_number", response.data)

    def test_invalid_payload(self):
        response = self._submit(self.manager, self.store.id, {"categories": [{"products": []}]})
        self.assertEqual(response.status_code, 400)

    def test_unassigned_user_cannot_submit(self):
        response = self._submit(self.outsider, self.store.id, self._payload())
        self.assertEqual(response.status_code, 403)
        self.assertFalse(UsageEntry.objects.filter(store=self.store).exists())

    def test_value_too_large_for_column_rejected(self):
        previous = replace_store_usage(self.store, [{"name": "Old", "products": []}])
        for raw in ("12,345,678,901", "1e9"):
            with self.subTest(raw=raw):
                payload = self._payload()
                payload["categories"][0]["products"][0]["weeks"]["w1"] = raw
                response = self._submit(self.manager, self.store.id, payload)
                self.assertEqual(response.status_code, 400)
                self.assertIn("categories", response.data)
        self.assertEqual(list(UsageEntry.objects.filter(store=self.store)), [previous])

    def test_average_too_large_for_column_rejected(self):
        payload = self._payload()
        payload["categories"][0]["products"][0]["average"] = "100000000"
        response = self._submit(self.manager, self.store.id, payload)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(UsageEntry.objects.filter(store=self.store).exists())

    def test_persistence_failure(self):
        with mock.patch("usage.api.replace_store_usage", side_effect=TransactionError("db down")):
            response = self._submit(self.manager, self.store.id, self._payload())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["error"], "Failed to save usage data")


class UsageReadApiTests(UsageApiTestBase):
    def setUp(self):
        super().setUp()
        replace_store_usage(self.store, [{"name": "Meat", "products": [{
            "product_number": "P10002",
            "product_name": "Chicken, Orange Dark Battered",
            "unit": "LB",
            "weeks": {"w1": "19", "w2": "20", "w3": "19", "w4": "20"},
            "average": "19.5",
        }]}])

    def test_get_with_multiplier(self):
        response = self._get(self.manager, self.store.id, {"multiplier": "12"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["store"]["number"], "1020")
        row = response.data["entry"]["categories"][0]["products"][0]
        self.assertEqual(row["cs_per_1k"], "0.4875")
        self.assertEqual(row["volume_multiplier"], "5.85")
        self.assertEqual(row["variance"], "normal")
        self.assertEqual(row["product_group"], "WIC")

    def test_get_without_multiplier(self):
        response = self._get(self.manager, self.store.id)
        row = response.data["entry"]["categories"][0]["products"][0]
        self.assertIsNone(row["volume_multiplier"])
        self.assertIsNone(response.data["multiplier"])

    def test_unknown_multiplier_rejected(self):
        response = self._get(self.manager, self.store.id, {"multiplier": "7"})
        self.assertEqual(response.status_code, 400)

    def test_store_without_report(self):
        response = self._get(self.admin, self.other_store.id)
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.data["entry"])

    def test_admin_reads_any_store(self):
        response = self._get(self.admin, self.store.id)
        self.assertEqual(response.status_code, 200)

    def test_outsider_forbidden(self):
        response = self._get(self.outsider, self.store.id)
        self.assertEqual(response.status_code, 403)


class UsageWeekEditApiTests(UsageApiTestBase):
    def setUp(self):
        super().setUp()
        entry = replace_store_usage(self.store, [{"name": "Meat", "products": [{
            "product_number": "P10002",
            "product_name": "Chicken, Orange Dark Battered",
            "unit": "LB",
            "weeks": {"w1": "10", "w2": "20", "w3": None, "w4": "30"},
            "average": "20",
        }]}])
        self.product = UsageProduct.objects.get(category__entry=entry)

    def test_edit_week_recomputes_average(self):
        response = self._patch(self.manager, self.store.id, self.product.id, {"week": "w3", "value": "40"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["w3"], "40.00")
        self.assertEqual(response.data["average"], "25.00")
        self.product.refresh_from_db()
        self.assertEqual(self.product.average, Decimal("25.00"))

    def test_clear_week(self):
        response = self._patch(self.manager, self.store.id, self.product.id, {"week": "w1", "value": None})
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.data["w1"])
        self.assertEqual(response.data["average"], "25.00")

    def test_invalid_week(self):
        response = self._patch(self.manager, self.store.id, self.product.id, {"week": "w9", "value": "1"})
        self.assertEqual(response.status_code, 400)

    def test_non_numeric_value_leaves_row_unchanged(self):
        response = self._patch(self.manager, self.store.id, self.product.id, {"week": "w1", "value": "abc"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("value", response.data)
        self.product.refresh_from_db()
        self.assertEqual(self.product.w1, Decimal("10.00"))
        self.assertEqual(self.product.average, Decimal("20.00"))

    def test_value_too_large_for_column(self):
        for raw in ("1e9", "123456789"):
            with self.subTest(raw=raw):
                response = self._patch(self.manager, self.store.id, self.product.id, {"week": "w1", "value": raw})
                self.assertEqual(response.status_code, 400)
        self.product.refresh_from_db()
        self.assertEqual(self.product.w1, Decimal("10.00"))

    def test_dash_clears_week(self):
        response = self._patch(self.manager, self.store.id, self.product.id, {"week": "w1", "value": "-"})
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.data["w1"])
        self.assertEqual(response.data["average"], "25.00")

    def test_product_of_other_store(self):
        response = self._patch(self.admin, self.other_store.id, self.product.id, {"week": "w1", "value": "1"})
        self.assertEqual(response.status_code, 404)

    def test_outsider_forbidden(self):
        response = self._patch(self.outsider, self.store.id, self.product.id, {"week": "w1", "value": "1"})
        self.assertEqual(response.status_code, 403)
        self.product.refresh_from_db()
        self.assertEqual(self.product.w1, Decimal("10.00"))
