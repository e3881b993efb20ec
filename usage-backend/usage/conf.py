# usage/conf.py
"""
Runtime configuration for the usage pipeline.

settings.USAGE_REPORT is merged over DEFAULTS, so a deploy only lists the
keys it changes.
"""

from decimal import Decimal

from django.conf import settings

DEFAULTS = {
    "max_upload_bytes": 10 * 1024 * 1024,
    # Volume projection presets, in thousands of dollars of sales (5k .. 70k)
    "multiplier_presets": [5, 10, 12, 40, 70],
    "high_variance_spread": 3,
    "moderate_variance_spread": 1,
}


def get_usage_config() -> dict:
    merged = DEFAULTS.copy()
    merged.update(getattr(settings, "USAGE_REPORT", {}) or {})
    return merged


def multiplier_presets() -> list:
    return [Decimal(str(value)) for value in get_usage_config()["multiplier_presets"]]
