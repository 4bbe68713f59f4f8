"""Ledger settings, read from the ``ADLEDGER`` dict in Django settings."""

from typing import Any

from django.conf import settings

from adledger.domain import DEFAULT_PAGE_COUNT

DEFAULTS: dict[str, Any] = {
    "DEFAULT_PAGE_COUNT": DEFAULT_PAGE_COUNT,
    "DEFAULT_CONTENT_TYPES": [
        ("Advert", "Advertisement content"),
        ("Article", "Editorial article content"),
        ("Puzzle", "Puzzle or game content"),
        ("Advertorial", "Promotional article content"),
        ("Front Cover", "Front cover content"),
        ("In-house", "In-house promotional content"),
    ],
    "DEFAULT_BUSINESS_TYPES": [],
    "CHARGE_MODE": "split",
    "TOP_CUSTOMERS_LIMIT": 10,
}


def ledger_settings() -> dict[str, Any]:
    """Return DEFAULTS overlaid with the project's ADLEDGER setting."""
    merged = dict(DEFAULTS)
    merged.update(getattr(settings, "ADLEDGER", {}))
    return merged
