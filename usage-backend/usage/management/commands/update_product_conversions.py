"""
Management command to re-apply the conversion table to stored usage products.

Products whose number is not in the table keep their current conversion and
are counted as skipped.

Usage:
    python manage.py update_product_conversions
    python manage.py update_product_conversions --store 1020
    python manage.py update_product_conversions --verbose
"""

from django.core.management.base import BaseCommand, CommandError

from stores.models import Store
from usage.conversions import DEFAULT_CONVERSIONS
from usage.models import UsageProduct
from usage.services import reapply_conversions


class Command(BaseCommand):
    help = "Update UsageProduct.conversion from the product conversion table"

    def add_arguments(self, parser):
        parser.add_argument(
            "--store",
            help="Only update products of this store number",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="List product numbers missing from the conversion table",
        )

    def handle(self, *args, **options):
        store_number = options.get("store")
        verbose = options.get("verbose", False)

        queryset = UsageProduct.objects.all()
        if store_number:
            if not Store.objects.filter(number=store_number).exists():
                raise CommandError(f"Store {store_number} does not exist")
            queryset = queryset.filter(category__entry__store__number=store_number)
            self.stdout.write(f"Updating conversions for store {store_number}")

        updated, skipped, unknown = reapply_conversions(DEFAULT_CONVERSIONS, queryset)

        if verbose and unknown:
            self.stdout.write("Not in conversion table:")
            for number in sorted(set(unknown)):
                self.stdout.write(f"  {number}")

        self.stdout.write(
            self.style.SUCCESS(f"Updated {updated} products, skipped {skipped}")
        )
