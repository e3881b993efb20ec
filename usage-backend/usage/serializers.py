# usage/serializers.py
from rest_framework import serializers

from .conf import multiplier_presets
from .models import WEEK_FIELDS
from .services import fits_column, is_blank_cell, parse_decimal

OUT_OF_RANGE = "Ensure there are no more than 8 digits before the decimal point."


def validate_cell_range(value):
    number = parse_decimal(value)
    if number is not None and not fits_column(number):
        raise serializers.ValidationError(OUT_OF_RANGE)


def _cell(**kwargs):
    # Report cells arrive as printed strings ("19.26", "-", "") or null
    return serializers.CharField(
        allow_null=True,
        allow_blank=True,
        required=False,
        default=None,
        validators=[validate_cell_range],
        **kwargs,
    )


class WeekValuesSerializer(serializers.Serializer):
    w1 = _cell()
    w2 = _cell()
    w3 = _cell()
    w4 = _cell()


class ProductSubmissionSerializer(serializers.Serializer):
    product_number = serializers.CharField(max_length=20)
    product_name = serializers.CharField(max_length=255, allow_blank=True)
    unit = serializers.CharField(max_length=10, allow_blank=True)
    weeks = WeekValuesSerializer(required=False)
    average = _cell()


class CategorySubmissionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    products = ProductSubmissionSerializer(many=True, required=False)


class UsageSubmissionSerializer(serializers.Serializer):
    """
    For POST /stores/{id}/usage/: the reviewed parse result.
    Replaces the store's current report.
    """
    store_number = serializers.CharField(required=False, allow_blank=True)
    categories = CategorySubmissionSerializer(many=True)

    def validate(self, data):
        store = self.context.get("store")
        number = (data.get("store_number") or "").strip()
        if store is not None and number and number != store.number:
            raise serializers.ValidationError(
                {"store_number": f"Report is for store {number}, not store {store.number}"}
            )
        return data


class WeekEditSerializer(serializers.Serializer):
    """For PATCH /stores/{id}/usage/products/{product_id}"""
    week = serializers.ChoiceField(choices=WEEK_FIELDS)
    value = serializers.CharField(allow_null=True, allow_blank=True)

    def validate_value(self, value):
        # Blank and dash cells clear the week; anything else must be a number
        if is_blank_cell(value):
            return value
        number = parse_decimal(value)
        if number is None:
            raise serializers.ValidationError("A valid number is required, or leave the cell blank.")
        if not fits_column(number):
            raise serializers.ValidationError(OUT_OF_RANGE)
        return value


class MultiplierQuerySerializer(serializers.Serializer):
    multiplier = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)

    def validate_multiplier(self, value):
        if value is None:
            return value
        presets = multiplier_presets()
        if value not in presets:
            allowed = ", ".join(str(p) for p in presets)
            raise serializers.ValidationError(f"Multiplier must be one of: {allowed}")
        return value


# Read side

class UsageProductRowSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    product_number = serializers.CharField()
    product_name = serializers.CharField()
    unit = serializers.CharField()
    w1 = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    w2 = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    w3 = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    w4 = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    average = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    conversion = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    cs_per_1k = serializers.DecimalField(max_digits=None, decimal_places=4, allow_null=True)
    volume_multiplier = serializers.DecimalField(max_digits=None, decimal_places=2, allow_null=True)
    variance = serializers.CharField()
    product_group = serializers.CharField()


class UsageCategoryViewSerializer(serializers.Serializer):
    name = serializers.CharField()
    products = UsageProductRowSerializer(many=True)


class UsageEntryViewSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    uploaded_at = serializers.DateTimeField()
    categories = UsageCategoryViewSerializer(many=True)
