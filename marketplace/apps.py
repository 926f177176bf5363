from django.apps import AppConfig
from django.conf import settings


class MarketplaceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "marketplace"

    def ready(self):
        from marketplace.infra.events.listeners import register_marketplace_listeners
        from marketplace.infra.observability.tracing import setup_tracing

        register_marketplace_listeners()

        setup_tracing(
            service_name=getattr(settings, "OTEL_SERVICE_NAME", "coshop-marketplace"),
            endpoint=getattr(settings, "OTEL_EXPORTER_ENDPOINT", None),
            enable=getattr(settings, "OTEL_TRACING_ENABLED", False),
        )
