"""
Tests for the account management commands.
"""
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from common.roles import UserRole
from stores.models import Store


class AccountCommandTests(TestCase):
    def setUp(self):
        self.store = Store.objects.create(number="1020")
        Store.objects.create(number="2040")
        self.user = get_user_model().objects.create_user(
            username="manager", email="manager@example.com", password="pass"
        )

    def _call(self, *args, **kwargs):
        out = StringIO()
        call_command(*args, stdout=out, **kwargs)
        return out.getvalue()

    def test_attach_user_to_store(self):
        output = self._call("attach_user_to_store", "Manager@Example.com", "1020")

        self.assertIn("Store 1020 has 0 users", output)
        self.assertIn("store now has 1 users", output)
        self.assertTrue(self.user.profile.stores.filter(pk=self.store.pk).exists())

    def test_attach_twice_is_reported(self):
        self._call("attach_user_to_store", "manager@example.com", "1020")
        output = self._call("attach_user_to_store", "manager@example.com", "1020")

        self.assertIn("already attached", output)
        self.assertEqual(self.store.members.count(), 1)

    def test_attach_unknown_store_lists_stores(self):
        with self.assertRaises(CommandError) as ctx:
            self._call("attach_user_to_store", "manager@example.com", "9999")
        self.assertIn("1020", str(ctx.exception))
        self.assertIn("2040", str(ctx.exception))
        self.assertFalse(self.user.profile.stores.exists())

    def test_attach_unknown_user(self):
        with self.assertRaises(CommandError):
            self._call("attach_user_to_store", "nobody@example.com", "1020")

    def test_update_user_role_defaults_to_admin(self):
        output = self._call("update_user_role", "manager@example.com")

        self.assertIn("current role is associate", output)
        self.user.profile.refresh_from_db()
        self.assertEqual(self.user.profile.role, UserRole.ADMIN)

    def test_update_user_role_to_manager(self):
        self._call("update_user_role", "manager@example.com", role="manager")
        self.user.profile.refresh_from_db()
        self.assertEqual(self.user.profile.role, UserRole.MANAGER)

    def test_update_user_role_already_set(self):
        self._call("update_user_role", "manager@example.com")
        output = self._call("update_user_role", "manager@example.com")
        self.assertIn("already admin", output)

    def test_update_unknown_user(self):
        with self.assertRaises(CommandError):
            self._call("update_user_role", "nobody@example.com")
