"""
Plugin registry model for django-nextblog.
"""
from django.db import models


class Plugin(models.Model):
    """
    Installed plugin and its persisted configuration.

    Dependencies are stored by plugin name and resolved against the
    enabled set when the load order is computed.
    """

    name = models.CharField(max_length=128, unique=True)
    version = models.CharField(max_length=32)
    path = models.CharField(
        max_length=512,
        help_text="Import path of the plugin entry point (e.g. 'my_plugin.setup')",
    )
    is_enabled = models.BooleanField(default=False)
    config = models.JSONField(default=dict, blank=True)
    dependencies = models.JSONField(
        default=list,
        blank=True,
        help_text="Names of plugins that must load before this one",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.name} {self.version}"
