# stores/admin.py
from django.contrib import admin
from .models import Store


class StoreUserInline(admin.TabularInline):
    model = Store.members.through
    extra = 0
    verbose_name = "Assigned user"
    verbose_name_plural = "Assigned users"


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("number", "assigned_users", "created_at", "updated_at")
    ordering = ("number",)
    list_per_page = 50
    search_fields = ("number",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [StoreUserInline]

    @admin.display(description="Users")
    def assigned_users(self, obj):
        return obj.members.count()
