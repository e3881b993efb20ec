"""
Change the role on a user's profile.

Usage:
    python manage.py update_user_role owner@example.com
    python manage.py update_user_role manager@example.com --role manager
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from accounts.models import UserProfile
from common.roles import UserRole


class Command(BaseCommand):
    help = "Set the role of a user (by email), admin by default"

    def add_arguments(self, parser):
        parser.add_argument("email", help="Email of the user")
        parser.add_argument(
            "--role",
            choices=UserRole.values,
            default=UserRole.ADMIN,
            help="New role (default admin)",
        )

    def handle(self, *args, **options):
        email = options["email"].strip()
        role = options["role"]

        user = get_user_model().objects.filter(email__iexact=email).first()
        if user is None:
            raise CommandError(f"No user with email {email}")

        profile, _ = UserProfile.objects.get_or_create(user=user)
        self.stdout.write(f"{email}: current role is {profile.role}")

        if profile.role == role:
            self.stdout.write(self.style.WARNING(f"{email} is already {role}"))
            return

        profile.role = role
        profile.save(update_fields=["role", "updated_at"])
        self.stdout.write(self.style.SUCCESS(f"Updated {email} to {role}"))
