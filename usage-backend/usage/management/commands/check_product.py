"""
Print one stored product with its derived metrics.

Usage:
    python manage.py check_product 1020 P10002
    python manage.py check_product 1020 P10002 --multiplier 12
"""

from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError

from stores.models import Store
from usage.conf import multiplier_presets
from usage.conversions import DEFAULT_CONVERSIONS
from usage.models import UsageProduct
from usage.services import product_row


class Command(BaseCommand):
    help = "Show stored values and derived metrics for one product of a store"

    def add_arguments(self, parser):
        parser.add_argument("store_number", help="Store number, e.g. 1020")
        parser.add_argument("product_number", help="Product number, e.g. P10002")
        parser.add_argument(
            "--multiplier",
            help="Sales volume preset for the volume column (5, 10, 12, 40, 70)",
        )

    def handle(self, *args, **options):
        number = options["store_number"]
        product_number = options["product_number"].strip().upper()

        multiplier = None
        if options.get("multiplier"):
            try:
                multiplier = Decimal(options["multiplier"])
            except InvalidOperation:
                raise CommandError(f"Invalid multiplier: {options['multiplier']}")
            if multiplier not in multiplier_presets():
                raise CommandError(f"Multiplier {multiplier} is not one of the presets")

        try:
            store = Store.objects.get(number=number)
        except Store.DoesNotExist:
            raise CommandError(f"Store {number} does not exist")

        products = (
            UsageProduct.objects
            .filter(category__entry__store=store, product_number=product_number)
            .select_related("category")
            .order_by("category__position", "position")
        )
        if not products:
            raise CommandError(f"Product {product_number} not found for store {store.number}")

        table_value = DEFAULT_CONVERSIONS.lookup(product_number)
        self.stdout.write(
            f"Conversion table: {table_value if table_value is not None else 'not listed (default 1)'}"
        )
        for product in products:
            row = product_row(product, multiplier)
            self.stdout.write(f"\n[{product.category.name}] {row['product_number']} {row['product_name']} ({row['unit']})")
            for field in ("w1", "w2", "w3", "w4", "average", "conversion", "cs_per_1k", "volume_multiplier"):
                self.stdout.write(f"  {field}: {row[field]}")
            self.stdout.write(f"  variance: {row['variance']}")
            self.stdout.write(f"  group: {row['product_group']}")
