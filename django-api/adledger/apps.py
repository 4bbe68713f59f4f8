from django.apps import AppConfig


class AdLedgerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "adledger"
    verbose_name = "Advertising ledger"

    def ready(self) -> None:
        from adledger import signals  # noqa: F401
