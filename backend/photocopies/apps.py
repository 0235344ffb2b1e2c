from django.apps import AppConfig


class PhotocopiesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.photocopies'

    def ready(self):
        """Import signals when app is ready"""
        import backend.photocopies.signals  # noqa: F401  # Cache invalidation signals
