"""
Comment model for django-nextblog.
"""
from django.db import models

from ..conf import blog_settings


class Comment(models.Model):
    """
    Reader comment on an article.

    Supports:
    - Threaded replies via parent field
    - Moderation workflow (pending, approved, spam, trashed)
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        SPAM = "SPAM", "Spam"
        TRASHED = "TRASHED", "Trashed"

    article = models.ForeignKey(
        "nextblog.Article",
        on_delete=models.CASCADE,
        related_name="comments",
    )
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="replies",
    )
    author_name = models.CharField(max_length=100)
    author_email = models.EmailField()
    author_url = models.URLField(blank=True)
    content = models.TextField(max_length=blog_settings.COMMENT_MAX_LENGTH)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["article", "status", "created_at"]),
        ]

    def __str__(self):
        return f"Comment by {self.author_name} on {self.article}"

    @property
    def preview(self):
        """Return truncated content for admin display."""
        if len(self.content) > 100:
            return self.content[:100] + "..."
        return self.content

    @property
    def is_reply(self):
        """Check if this is a reply to another comment."""
        return self.parent_id is not None

    @property
    def thread_depth(self):
        """Calculate nesting depth of this comment."""
        depth = 0
        current = self.parent
        while current:
            depth += 1
            current = current.parent
        return depth

    def approved_replies(self):
        return self.replies.filter(status=self.Status.APPROVED)

    def set_status(self, status):
        self.status = status
        self.save(update_fields=["status", "updated_at"])
