# usage/models.py
from django.conf import settings
from django.db import models
from common.models import TimeStampedModel
from decimal import Decimal


WEEK_FIELDS = ("w1", "w2", "w3", "w4")


class UsageEntry(TimeStampedModel):
    """
    The current usage report of a store. Replaced wholesale on every upload:
    the previous entry (and its categories/products) is deleted in the same
    transaction that inserts the new one, so a store has at most one entry.
    """
    store = models.ForeignKey("stores.Store", on_delete=models.CASCADE, related_name="usage_entries")
    uploaded_at = models.DateTimeField(db_index=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="usage_entries_uploaded",
    )

    class Meta:
        db_table = "usage_entries"
        ordering = ["-uploaded_at", "-id"]
        indexes = [
            models.Index(fields=["store", "uploaded_at"], name="usage_entry_store_upl_idx"),
        ]
        verbose_name = "Usage entry"
        verbose_name_plural = "Usage entries"

    def __str__(self):
        return f"Usage {self.store} @ {self.uploaded_at:%Y-%m-%d %H:%M}"


class UsageCategory(TimeStampedModel):
    """
    A report section (Meat, Seafood, ...). The name is copied as submitted.
    """
    entry = models.ForeignKey(UsageEntry, on_delete=models.CASCADE, related_name="categories", db_column="usage_entry_id")
    name = models.CharField(max_length=120)
    position = models.PositiveIntegerField(default=0, help_text="Order of the section in the report")

    class Meta:
        db_table = "usage_categories"
        ordering = ["position", "id"]
        verbose_name = "Usage category"
        verbose_name_plural = "Usage categories"

    def __str__(self):
        return self.name


class UsageProduct(TimeStampedModel):
    """
    One product row of a usage report.

    `average` is a cache of the mean of the non-null weeks: stored as printed
    on upload, recomputed whenever a week value is edited.
    """
    category = models.ForeignKey(UsageCategory, on_delete=models.CASCADE, related_name="products", db_column="usage_category_id")
    product_number = models.CharField(max_length=20, db_index=True)
    product_name = models.CharField(max_length=255)
    unit = models.CharField(max_length=10)
    w1 = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    w2 = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    w3 = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    w4 = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    average = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    conversion = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        default=Decimal("1"),
        help_text="Units per case, from the conversion table",
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "usage_products"
        ordering = ["position", "id"]
        verbose_name = "Usage product"
        verbose_name_plural = "Usage products"

    def __str__(self):
        return f"{self.product_number} {self.product_name} ({self.unit})"

    @property
    def weeks(self):
        return [getattr(self, f) for f in WEEK_FIELDS]
