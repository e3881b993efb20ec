from django.contrib import admin
from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "status", "updated_at")
    list_filter = ("role", "status")
    search_fields = ("user__username", "user__email")
    filter_horizontal = ("stores",)
    raw_id_fields = ("user",)
