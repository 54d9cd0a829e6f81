from django.apps import AppConfig
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


class CoreBackendConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core_backend"

    def ready(self):
        """
        Log the engine configuration once at startup so retry and alert
        settings are visible in the service logs.
        """
        engine = getattr(settings, "POS_ENGINE", {})
        logger.debug(
            f"POS engine ready: max_retries={engine.get('TRANSACTION_MAX_RETRIES')}, "
            f"low_stock_alerts={engine.get('LOW_STOCK_ALERTS_ENABLED')}"
        )
