"""Django app configuration for the GitHub collaborators app."""

from django.apps import AppConfig


class GithubConfig(AppConfig):
    """Configuration for the GitHub collaborators app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.github"
    verbose_name = "GitHub Collaborators"
