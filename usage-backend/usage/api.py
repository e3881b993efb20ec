# usage/api.py
"""
API endpoints for weekly store usage reports.
"""

import logging

from django.http import Http404
from django.shortcuts import get_object_or_404
from rest_framework import parsers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import HasStoreAccess
from stores.models import Store
from stores.serializers import StoreMiniSerializer
from usage.conf import get_usage_config, multiplier_presets
from usage.exceptions import ExtractionError, TransactionError
from usage.extractor import extract_text
from usage.models import UsageProduct
from usage.parser import PARSER_VERSION, parse_usage_report_with_diagnostics
from usage.serializers import (
    MultiplierQuerySerializer,
    UsageEntryViewSerializer,
    UsageProductRowSerializer,
    UsageSubmissionSerializer,
    WeekEditSerializer,
)
from usage.services import (
    build_usage_table,
    get_latest_entry,
    product_row,
    replace_store_usage,
    update_product_week,
)

logger = logging.getLogger(__name__)


class StoreScopedView(APIView):
    """
    Base for views under /stores/{store_id}/usage/.
    The store is resolved and checked before anything else runs.
    """
    permission_classes = [IsAuthenticated, HasStoreAccess]

    def get_store(self, request, store_id) -> Store:
        store = get_object_or_404(Store, pk=store_id)
        self.check_object_permissions(request, store)
        return store


class UsageParseView(StoreScopedView):
    """
    POST /api/v1/stores/{store_id}/usage/parse

    Extract and parse a usage report PDF and return the result for review.
    Nothing is saved.
    """
    parser_classes = [parsers.MultiPartParser, parsers.FormParser]

    def post(self, request, store_id):
        store = self.get_store(request, store_id)

        # Validate file
        if "file" not in request.FILES:
            return Response({"error": "No file provided"}, status=status.HTTP_400_BAD_REQUEST)

        pdf_file = request.FILES["file"]
        if not pdf_file.name.lower().endswith(".pdf"):
            return Response({"error": "File must be a PDF"}, status=status.HTTP_400_BAD_REQUEST)

        max_size = get_usage_config()["max_upload_bytes"]
        if pdf_file.size > max_size:
            return Response(
                {"error": f"File size exceeds {max_size // (1024 * 1024)}MB limit"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            text = extract_text(pdf_file.read())
        except ExtractionError as e:
            logger.warning(f"Store {store.number}: could not read '{pdf_file.name}': {e}")
            return Response(
                {"error": "Could not read file", "detail": str(e)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        report, recovery = parse_usage_report_with_diagnostics(text)
        logger.info(
            f"Store {store.number}: parsed '{pdf_file.name}' "
            f"(report store={report.store_number or '?'}, products={report.product_count}, "
            f"unmatched={len(recovery.unmatched)})"
        )

        payload = report.to_dict()
        payload["product_count"] = report.product_count
        payload["store_mismatch"] = bool(report.store_number) and report.store_number != store.number
        payload["metadata"] = {
            "parser_version": PARSER_VERSION,
            "file_name": pdf_file.name,
            "unmatched": [span.to_dict() for span in recovery.unmatched],
        }
        return Response(payload, status=status.HTTP_200_OK)


class UsageView(StoreScopedView):
    """
    GET  /api/v1/stores/{store_id}/usage/?multiplier=12  current report with metrics
    POST /api/v1/stores/{store_id}/usage/                replace the current report
    """

    def _render(self, store, multiplier=None):
        table = build_usage_table(get_latest_entry(store), multiplier)
        return {
            "store": StoreMiniSerializer(store).data,
            "multiplier": multiplier,
            "multiplier_presets": multiplier_presets(),
            "entry": UsageEntryViewSerializer(table).data if table else None,
        }

    def get(self, request, store_id):
        store = self.get_store(request, store_id)
        query = MultiplierQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(self._render(store, query.validated_data.get("multiplier")))

    def post(self, request, store_id):
        store = self.get_store(request, store_id)
        serializer = UsageSubmissionSerializer(data=request.data, context={"store": store})
        serializer.is_valid(raise_exception=True)

        try:
            replace_store_usage(store, serializer.validated_data["categories"], user=request.user)
        except TransactionError as e:
            logger.error(f"Store {store.number}: usage submit failed: {e}", exc_info=True)
            return Response(
                {"error": "Failed to save usage data"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(self._render(store), status=status.HTTP_201_CREATED)


class UsageProductWeekView(StoreScopedView):
    """
    PATCH /api/v1/stores/{store_id}/usage/products/{product_id}

    Body: {"week": "w3", "value": "40"}. Updates one week and recomputes the
    product's average.
    """

    def patch(self, request, store_id, product_id):
        store = self.get_store(request, store_id)
        serializer = WeekEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            product = update_product_week(
                store,
                product_id,
                serializer.validated_data["week"],
                serializer.validated_data["value"],
            )
        except UsageProduct.DoesNotExist:
            raise Http404("Product not found in this store's usage report")
        except ValueError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(UsageProductRowSerializer(product_row(product)).data)
