from django.apps import AppConfig
import logging

logger = logging.getLogger(__name__)


class StoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "store"

    def ready(self):
        """
        Build the read-only fallback catalog served while the database is
        unreachable. It never touches the database itself.
        """
        from .catalog import build_fallback_catalog

        try:
            snapshot = build_fallback_catalog()
            logger.info("Fallback catalog ready with %s products.", len(snapshot))
        except Exception:
            logger.exception("Unexpected error while building the fallback catalog.")
