from django.apps import AppConfig


class ComparisonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'gastro.comparison'

    def ready(self):
        import gastro.comparison.signals  # noqa: F401
