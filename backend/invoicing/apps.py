from django.apps import AppConfig


class InvoicingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "invoicing"
    verbose_name = "Invoicing"

    # register signal receivers and the default notification handlers
    def ready(self):
        import invoicing.signals  # noqa: F401
        from invoicing.notifications import register_default_handlers

        register_default_handlers()
