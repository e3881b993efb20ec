from django.conf import settings
from django.db import models
from common.models import TimeStampedModel
from common.roles import UserRole, UserStatus


class UserProfile(TimeStampedModel):
    """
    Binds a Django user to a role and to the stores they work in.
    Admins reach every store; other roles only their assigned stores.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=20, choices=UserRole.choices, default=UserRole.ASSOCIATE)
    status = models.CharField(max_length=20, choices=UserStatus.choices, default=UserStatus.ACTIVE)
    stores = models.ManyToManyField("stores.Store", blank=True, related_name="members")

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["role"], name="accounts_profile_role_idx"),
        ]

    def __str__(self):
        return f"{self.user} ({self.role})"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active_member(self) -> bool:
        return self.status == UserStatus.ACTIVE
