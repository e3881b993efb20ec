"""
Assign a user to a store so they can upload and edit its usage report.

Usage:
    python manage.py attach_user_to_store manager@example.com 1020
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from accounts.models import UserProfile
from stores.models import Store


class Command(BaseCommand):
    help = "Attach a user (by email) to a store (by number)"

    def add_arguments(self, parser):
        parser.add_argument("email", help="Email of the user")
        parser.add_argument("store_number", help="Store number, e.g. 1020")

    def handle(self, *args, **options):
        email = options["email"].strip()
        number = options["store_number"].strip()

        user = get_user_model().objects.filter(email__iexact=email).first()
        if user is None:
            raise CommandError(f"No user with email {email}")

        store = Store.objects.filter(number=number).first()
        if store is None:
            available = ", ".join(f"{s.number} (id={s.id})" for s in Store.objects.order_by("number"))
            raise CommandError(f"Store {number} does not exist. Available stores: {available or 'none'}")

        profile, _ = UserProfile.objects.get_or_create(user=user)
        self.stdout.write(f"Store {store.number} has {store.members.count()} users")

        if profile.stores.filter(pk=store.pk).exists():
            self.stdout.write(self.style.WARNING(f"{email} is already attached to store {store.number}"))
            return

        profile.stores.add(store)
        self.stdout.write(self.style.SUCCESS(
            f"Attached {email} to store {store.number}; store now has {store.members.count()} users"
        ))
