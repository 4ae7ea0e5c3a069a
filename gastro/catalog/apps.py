from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'gastro.catalog'

    def ready(self):
        import gastro.catalog.signals  # noqa: F401
