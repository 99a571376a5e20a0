"""Django app configuration for nextblog."""
from django.apps import AppConfig


class NextBlogConfig(AppConfig):
    """Configuration for the nextblog app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "nextblog"
    verbose_name = "NextBlog"
