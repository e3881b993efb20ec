# accounts/signals.py
from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from common.roles import UserRole

from .models import UserProfile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def ensure_user_profile(sender, instance, created, **kwargs):
    if not created:
        return
    role = UserRole.ADMIN if instance.is_superuser else UserRole.ASSOCIATE
    UserProfile.objects.get_or_create(user=instance, defaults={"role": role})
