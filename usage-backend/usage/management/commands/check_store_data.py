"""
Print the current usage report stored for a store.

Usage:
    python manage.py check_store_data 1020
    python manage.py check_store_data 1020 --limit 10
"""

from django.core.management.base import BaseCommand, CommandError

from stores.models import Store
from usage.services import get_latest_entry


class Command(BaseCommand):
    help = "Show the stored usage entry, categories and first products of a store"

    def add_arguments(self, parser):
        parser.add_argument("store_number", help="Store number, e.g. 1020")
        parser.add_argument(
            "--limit",
            type=int,
            default=3,
            help="Products to show per category (default 3)",
        )

    def handle(self, *args, **options):
        number = options["store_number"]
        limit = options["limit"]

        try:
            store = Store.objects.get(number=number)
        except Store.DoesNotExist:
            raise CommandError(f"Store {number} does not exist")

        entries = store.usage_entries.count()
        entry = get_latest_entry(store)
        self.stdout.write(f"Store {store.number} (id={store.id}): {entries} usage entries")
        if entry is None:
            self.stdout.write(self.style.WARNING("No usage data uploaded"))
            return

        self.stdout.write(f"Entry {entry.id} uploaded at {entry.uploaded_at:%Y-%m-%d %H:%M:%S}")
        for category in entry.categories.all():
            products = list(category.products.all())
            self.stdout.write(f"\n{category.name}: {len(products)} products")
            for product in products[:limit]:
                weeks = " ".join("-" if w is None else str(w) for w in product.weeks)
                self.stdout.write(
                    f"  {product.product_number} {product.product_name} [{product.unit}] "
                    f"{weeks} avg={product.average} conv={product.conversion}"
                )
