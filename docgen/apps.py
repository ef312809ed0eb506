from django.apps import AppConfig


class DocgenConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'docgen'
    verbose_name = 'Document Generation'

    def ready(self):
        """Register the report templates when the app is ready."""
        import reports  # noqa: F401
