"""
Tests for store access rules, the role-aware token and the store list.
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import exceptions
from rest_framework.test import APIRequestFactory, force_authenticate

from common.auth_tokens import RoleAwareTokenObtainPairSerializer
from common.permissions import accessible_stores, is_admin, user_can_access_store, user_role
from common.roles import UserRole, UserStatus
from stores.models import Store
from stores.views import StoreLiteViewSet


class StoreAccessTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.store_a = Store.objects.create(number="1020")
        self.store_b = Store.objects.create(number="2040")
        self.superuser = User.objects.create_superuser(username="root", email="root@example.com", password="pass")
        self.admin = User.objects.create_user(username="admin", password="pass")
        self.admin.profile.role = UserRole.ADMIN
        self.admin.profile.save(update_fields=["role"])
        self.associate = User.objects.create_user(username="associate", password="pass")
        self.associate.profile.stores.add(self.store_a)

    def test_profile_created_for_new_users(self):
        self.assertEqual(self.associate.profile.role, UserRole.ASSOCIATE)
        self.assertEqual(self.associate.profile.status, UserStatus.ACTIVE)
        self.assertEqual(self.superuser.profile.role, UserRole.ADMIN)

    def test_roles(self):
        self.assertEqual(user_role(self.superuser), UserRole.ADMIN)
        self.assertTrue(is_admin(self.admin))
        self.assertFalse(is_admin(self.associate))

    def test_admins_reach_every_store(self):
        for user in (self.superuser, self.admin):
            self.assertTrue(user_can_access_store(user, self.store_b))
            self.assertEqual(accessible_stores(user).count(), 2)

    def test_associate_reaches_assigned_store_only(self):
        self.assertTrue(user_can_access_store(self.associate, self.store_a))
        self.assertFalse(user_can_access_store(self.associate, self.store_b))
        self.assertEqual(list(accessible_stores(self.associate)), [self.store_a])

    def test_inactive_associate_reaches_nothing(self):
        profile = self.associate.profile
        profile.status = UserStatus.INACTIVE
        profile.save(update_fields=["status"])
        self.assertFalse(user_can_access_store(self.associate, self.store_a))
        self.assertEqual(accessible_stores(self.associate).count(), 0)

    def test_store_list_is_scoped(self):
        factory = APIRequestFactory()
        view = StoreLiteViewSet.as_view({"get": "list"})

        request = factory.get("/api/v1/stores/")
        force_authenticate(request, user=self.associate)
        response = view(request)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s["number"] for s in response.data], ["1020"])

        request = factory.get("/api/v1/stores/")
        force_authenticate(request, user=self.superuser)
        response = view(request)
        self.assertEqual([s["number"] for s in response.data], ["1020", "2040"])


class RoleAwareTokenTests(TestCase):
    def setUp(self):
        self.store = Store.objects.create(number="1020")
        self.user = get_user_model().objects.create_user(username="manager", password="secret-pass")
        self.user.profile.role = UserRole.MANAGER
        self.user.profile.save(update_fields=["role"])
        self.user.profile.stores.add(self.store)

    def test_token_carries_role_and_stores(self):
        serializer = RoleAwareTokenObtainPairSerializer(data={"username": "manager", "password": "secret-pass"})
        self.assertTrue(serializer.is_valid())
        data = serializer.validated_data
        self.assertEqual(data["role"], UserRole.MANAGER)
        self.assertEqual(data["store_ids"], [self.store.id])
        self.assertIn("access", data)
        self.assertIn("refresh", data)

    def test_inactive_profile_rejected(self):
        self.user.profile.status = UserStatus.INACTIVE
        self.user.profile.save(update_fields=["status"])
        serializer = RoleAwareTokenObtainPairSerializer(data={"username": "manager", "password": "secret-pass"})
        with self.assertRaises(exceptions.AuthenticationFailed):
            serializer.is_valid()
