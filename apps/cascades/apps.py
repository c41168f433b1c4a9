"""Django app configuration for the cascading runs app."""

from django.apps import AppConfig


class CascadesConfig(AppConfig):
    """Configuration for the cascading runs app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.cascades"
    verbose_name = "Cascading Runs"
