"""
AI writing assistant models for django-nextblog.
"""
from django.db import models


class AIModel(models.Model):
    """
    Configured AI provider endpoint.

    ``api_key`` holds the encrypted key; use AIService to read it.
    """

    class Provider(models.TextChoices):
        OPENAI = "openai", "OpenAI"
        CLAUDE = "claude", "Claude"
        QWEN = "qwen", "Qwen"

    name = models.CharField(max_length=100)
    provider = models.CharField(max_length=20, choices=Provider.choices)
    api_url = models.URLField(max_length=500)
    api_key = models.TextField(help_text="Encrypted API key")
    model_id = models.CharField(max_length=100)
    config = models.JSONField(default=dict, blank=True)
    is_enabled = models.BooleanField(default=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "AI Model"

    def __str__(self):
        return f"{self.name} ({self.provider})"


class AIUsageLog(models.Model):
    """One provider call made on behalf of the writing assistant."""

    ai_model = models.ForeignKey(
        AIModel,
        null=True,
        on_delete=models.SET_NULL,
        related_name="usage_logs",
    )
    prompt = models.TextField()
    response = models.TextField(blank=True)
    success = models.BooleanField(default=True)
    error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "AI Usage Log"

    def __str__(self):
        status = "ok" if self.success else "failed"
        return f"AI call {self.pk} ({status})"
