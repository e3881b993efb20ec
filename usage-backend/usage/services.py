# usage/services.py
"""
Reconciliation services for store usage reports.

Includes:
- Null-safe decimal parsing of report cells
- Full replace of a store's usage report (delete + insert, one transaction)
- Single week edits with average recompute
- Conversion re-application for stored products
- The read model used by the usage page
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.db import DatabaseError, transaction
from django.db.models import Prefetch
from django.utils import timezone

from stores.models import Store
from usage.conversions import DEFAULT_CONVERSIONS, ConversionTable, group_for_product
from usage.exceptions import TransactionError
from usage.metrics import classify_variance, cs_per_1k, volume_multiplier
from usage.models import WEEK_FIELDS, UsageCategory, UsageEntry, UsageProduct

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# decimal(10, 2) columns hold at most 8 digits before the point
MAX_WHOLE_DIGITS = 8

# Cells that mean "no data for that week"
EMPTY_MARKERS = {"", "-", "—", "â€”"}


def is_blank_cell(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() in EMPTY_MARKERS)


def fits_column(number: Decimal) -> bool:
    return number.is_zero() or number.adjusted() < MAX_WHOLE_DIGITS


def parse_decimal(value) -> Optional[Decimal]:
    """
    Parse a report cell into a 2-place Decimal.

    Blank, dash placeholders, and anything that is not a finite number give
    None, never zero and never an exception. Thousands separators and
    parentheses are dropped.

    Examples:
        "1,234.5" -> Decimal("1234.50")
        " "       -> None
        "-"       -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    elif isinstance(value, str):
        text = value
    else:
        return None

    text = text.strip()
    if text in EMPTY_MARKERS:
        return None

    cleaned = text.replace(",", "").replace("(", "").replace(")", "")
    try:
        number = Decimal(cleaned)
        if not number.is_finite():
            return None
        return number.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def recompute_average(weeks: Iterable) -> Optional[Decimal]:
    """Mean of the non-null week values, None when every week is empty"""
    values = [Decimal(w) for w in weeks if w is not None]
    if not values:
        return None
    return (sum(values) / len(values)).quantize(CENTS, rounding=ROUND_HALF_UP)


# Full replace

def _product_from_payload(category: UsageCategory, position: int, data: Dict[str, Any], conversions: ConversionTable) -> UsageProduct:
    weeks = data.get("weeks") or {}
    product_number = (data.get("product_number") or "").strip()
    return UsageProduct(
        category=category,
        position=position,
        product_number=product_number,
        product_name=(data.get("product_name") or "").strip(),
        unit=(data.get("unit") or "").strip(),
        w1=parse_decimal(weeks.get("w1")),
        w2=parse_decimal(weeks.get("w2")),
        w3=parse_decimal(weeks.get("w3")),
        w4=parse_decimal(weeks.get("w4")),
        # Trust the printed average on upload; edits recompute it
        average=parse_decimal(data.get("average")),
        conversion=conversions.get(product_number),
    )


def _insert_category(entry: UsageEntry, position: int, data: Dict[str, Any], conversions: ConversionTable) -> UsageCategory:
    category = UsageCategory.objects.create(
        entry=entry,
        name=(data.get("name") or "").strip(),
        position=position,
    )
    products = [
        _product_from_payload(category, index, product_data, conversions)
        for index, product_data in enumerate(data.get("products") or [])
    ]
    UsageProduct.objects.bulk_create(products)
    logger.debug(f"Category '{category.name}' saved with {len(products)} products")
    return category


def replace_store_usage(
    store: Store,
    categories: List[Dict[str, Any]],
    conversions: ConversionTable = DEFAULT_CONVERSIONS,
    user=None,
) -> UsageEntry:
    """
    Replace a store's usage report with a new one.

    The store row is locked for the duration so concurrent uploads for the
    same store run one after the other (last write wins). Existing entries
    are deleted (cascading to categories/products) and the new tree is
    inserted; any failure rolls everything back, leaving the previous report
    in place.

    Args:
        store: Store the report belongs to
        categories: [{"name", "products": [{"product_number", "product_name",
                     "unit", "weeks": {"w1".."w4"}, "average"}]}]
        conversions: Conversion table used to fill UsageProduct.conversion
        user: Uploading user, recorded on the entry

    Returns:
        The new UsageEntry

    Raises:
        TransactionError: If any database step fails
    """
    try:
        with transaction.atomic():
            Store.objects.select_for_update().get(pk=store.pk)

            deleted, _ = UsageEntry.objects.filter(store=store).delete()
            logger.info(f"Replacing usage for store {store.number}: removed {deleted} rows")

            entry = UsageEntry.objects.create(
                store=store,
                uploaded_at=timezone.now(),
                uploaded_by=user if getattr(user, "is_authenticated", False) else None,
            )
            product_count = 0
            for position, category_data in enumerate(categories):
                _insert_category(entry, position, category_data, conversions)
                product_count += len(category_data.get("products") or [])
    except (DatabaseError, InvalidOperation) as e:
        logger.error(f"Usage replace failed for store {store.number}: {e}", exc_info=True)
        raise TransactionError(f"Failed to save usage data for store {store.number}") from e

    logger.info(
        f"Usage entry {entry.id} saved for store {store.number}: "
        f"{len(categories)} categories, {product_count} products"
    )
    return entry


# Single-field edit

def update_product_week(store: Store, product_id: int, week: str, value) -> UsageProduct:
    """
    Set one week value on one stored product and recompute its average.

    The product row is locked while the edit is applied so two edits to
    different weeks of the same product cannot both recompute the average
    from stale siblings.

    Raises:
        ValueError: If week is not one of w1..w4, or value is neither a blank
                    cell nor a number that fits the column
        UsageProduct.DoesNotExist: If the product is not part of the store's report
    """
    if week not in WEEK_FIELDS:
        raise ValueError(f"Unknown week field: {week}")

    number = parse_decimal(value)
    if number is None and not is_blank_cell(value):
        raise ValueError(f"Not a number: {value!r}")
    if number is not None and not fits_column(number):
        raise ValueError(f"Value out of range: {value!r}")

    with transaction.atomic():
        product = (
            UsageProduct.objects
            .select_for_update(of=("self",))
            .filter(category__entry__store=store)
            .get(pk=product_id)
        )
        setattr(product, week, number)
        product.average = recompute_average(product.weeks)
        product.save(update_fields=[week, "average", "updated_at"])

    logger.info(
        f"Store {store.number} product {product.product_number}: {week}={getattr(product, week)}, "
        f"average={product.average}"
    )
    return product


# Conversions

def reapply_conversions(conversions: ConversionTable = DEFAULT_CONVERSIONS, queryset=None) -> Tuple[int, int, List[str]]:
    """
    Copy the conversion table onto stored products.

    Returns:
        Tuple of (updated_count, skipped_count, unknown_product_numbers)
    """
    queryset = queryset if queryset is not None else UsageProduct.objects.all()
    updated = 0
    skipped = 0
    unknown = []
    with transaction.atomic():
        for product in queryset.select_for_update().only("id", "product_number", "conversion", "updated_at"):
            factor = conversions.lookup(product.product_number)
            if factor is None:
                skipped += 1
                unknown.append(product.product_number)
                continue
            if product.conversion != factor:
                product.conversion = factor
                product.save(update_fields=["conversion", "updated_at"])
            updated += 1
    return updated, skipped, unknown


# Read model

def get_latest_entry(store: Store) -> Optional[UsageEntry]:
    return (
        UsageEntry.objects
        .filter(store=store)
        .prefetch_related(
            Prefetch("categories", queryset=UsageCategory.objects.order_by("position", "id")),
            Prefetch("categories__products", queryset=UsageProduct.objects.order_by("position", "id")),
        )
        .order_by("-uploaded_at", "-id")
        .first()
    )


def product_row(product: UsageProduct, multiplier=None) -> Dict[str, Any]:
    return {
        "id": product.id,
        "product_number": product.product_number,
        "product_name": product.product_name,
        "unit": product.unit,
        "w1": product.w1,
        "w2": product.w2,
        "w3": product.w3,
        "w4": product.w4,
        "average": product.average,
        "conversion": product.conversion,
        "cs_per_1k": cs_per_1k(product.average, product.conversion),
        "volume_multiplier": volume_multiplier(product.average, product.conversion, multiplier),
        "variance": classify_variance(product.weeks),
        "product_group": group_for_product(product.product_number),
    }


def build_usage_table(entry: Optional[UsageEntry], multiplier=None) -> Optional[Dict[str, Any]]:
    if entry is None:
        return None
    return {
        "id": entry.id,
        "uploaded_at": entry.uploaded_at,
        "categories": [
            {
                "name": category.name,
                "products": [product_row(p, multiplier) for p in category.products.all()],
            }
            for category in entry.categories.all()
        ],
    }
