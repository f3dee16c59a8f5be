"""Django app configuration for the API application.

Registers signal handlers on app ready to connect profile creation and
token revocation.
"""

from django.apps import AppConfig


class ApiConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "api"
    verbose_name = "Academy LMS"

    def ready(self):
        import api.signals  # noqa: F401
