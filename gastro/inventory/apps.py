from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'gastro.inventory'

    def ready(self):
        import gastro.inventory.signals  # noqa: F401
