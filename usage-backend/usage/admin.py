# usage/admin.py
from django.contrib import admin
from .models import UsageEntry, UsageCategory, UsageProduct


class UsageCategoryInline(admin.TabularInline):
    model = UsageCategory
    extra = 0
    fields = ['position', 'name']
    ordering = ['position']


@admin.register(UsageEntry)
class UsageEntryAdmin(admin.ModelAdmin):
    list_display = ['id', 'store', 'uploaded_at', 'uploaded_by', 'created_at']
    list_filter = ['uploaded_at', 'store']
    search_fields = ['store__number']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['store', 'uploaded_by']
    inlines = [UsageCategoryInline]


@admin.register(UsageProduct)
class UsageProductAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'product_number',
        'product_name',
        'unit',
        'w1',
        'w2',
        'w3',
        'w4',
        'average',
        'conversion',
        'category',
    ]
    list_filter = ['unit', 'category__name']
    search_fields = ['product_number', 'product_name', 'category__entry__store__number']
    raw_id_fields = ['category']
    readonly_fields = ['created_at', 'updated_at']
