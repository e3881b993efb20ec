# common/permissions.py
from rest_framework import permissions
from common.roles import UserRole, UserStatus
from stores.models import Store


def user_role(user):
    if not (user and user.is_authenticated):
        return None
    if user.is_superuser:
        return UserRole.ADMIN
    profile = getattr(user, "profile", None)
    return profile.role if profile else None


def is_admin(user) -> bool:
    return user_role(user) == UserRole.ADMIN


def user_can_access_store(user, store) -> bool:
    """
    Admins may view/edit every store's usage data; anyone else only the
    stores they are assigned to, and only while their account is active.
    """
    if not (user and user.is_authenticated and store):
        return False
    if is_admin(user):
        return True
    profile = getattr(user, "profile", None)
    if profile is None or profile.status != UserStatus.ACTIVE:
        return False
    return profile.stores.filter(pk=store.pk).exists()


def accessible_stores(user):
    if is_admin(user):
        return Store.objects.all()
    if not (user and user.is_authenticated):
        return Store.objects.none()
    return Store.objects.filter(members__user=user, members__status=UserStatus.ACTIVE)


class IsAdmin(permissions.BasePermission):
    """
    Allows access only to superusers and users with the ADMIN role.
    """
    def has_permission(self, request, view):
        return is_admin(request.user)


class HasStoreAccess(permissions.BasePermission):
    """
    Object-level check for views that resolve a Store from the URL.
    Views call self.check_object_permissions(request, store).
    """
    message = "You do not have access to this store"

    def has_object_permission(self, request, view, obj):
        store = obj if isinstance(obj, Store) else getattr(obj, "store", None)
        return user_can_access_store(request.user, store)
