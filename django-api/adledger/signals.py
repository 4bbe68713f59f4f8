"""Django signals for seeding per-owner defaults."""

import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from adledger.conf import ledger_settings

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def seed_default_labels(sender, instance, created, **kwargs):
    """Give every new user the configured default content and business types."""
    if not created or kwargs.get("raw"):
        return
    from adledger.services import build_services
    from adledger.stores.django_store import DjangoLedgerStore

    services = build_services(DjangoLedgerStore(), ledger_settings())
    services.labels.seed_defaults(str(instance.pk))
