"""
Site settings and page view models for django-nextblog.
"""
from django.db import models


class SiteSetting(models.Model):
    """Key/value site setting. Missing keys fall back to configured defaults."""

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return self.key


class PageView(models.Model):
    """A single recorded visit."""

    article = models.ForeignKey(
        "nextblog.Article",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="page_views",
    )
    path = models.CharField(max_length=500)
    ip = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    referer = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.path} at {self.created_at}"
