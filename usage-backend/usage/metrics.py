# usage/metrics.py
"""
Read-side metrics for usage rows. Nothing here is persisted.
"""

from decimal import Decimal
from typing import Iterable, Optional

from django.db import models

from .conf import get_usage_config


class VarianceLevel(models.TextChoices):
    HIGH     = "high",     "High variance"
    MODERATE = "moderate", "Moderate variance"
    NORMAL   = "normal",   "Normal"


def _as_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def cs_per_1k(average, conversion) -> Optional[Decimal]:
    """
    Cases per $1000 of sales: average / conversion.
    None when average is missing or conversion is missing or zero.
    """
    avg = _as_decimal(average)
    conv = _as_decimal(conversion)
    if avg is None or conv is None or conv == 0:
        return None
    return avg / conv


def volume_multiplier(average, conversion, multiplier) -> Optional[Decimal]:
    """cs_per_1k scaled by the selected sales volume preset (5k, 10k, ...)"""
    per_1k = cs_per_1k(average, conversion)
    factor = _as_decimal(multiplier)
    if per_1k is None or factor is None:
        return None
    return per_1k * factor


def week_spread(weeks: Iterable) -> Decimal:
    values = [_as_decimal(w) for w in weeks if w is not None]
    if not values:
        return Decimal("0")
    return max(values) - min(values)


def classify_variance(weeks: Iterable, config: Optional[dict] = None) -> str:
    """
    Flag week-to-week swings: spread > 3 is high, spread > 1 is moderate.
    Both thresholds are exclusive.
    """
    config = config or get_usage_config()
    spread = week_spread(weeks)
    if spread > Decimal(str(config["high_variance_spread"])):
        return VarianceLevel.HIGH
    if spread > Decimal(str(config["moderate_variance_spread"])):
        return VarianceLevel.MODERATE
    return VarianceLevel.NORMAL
