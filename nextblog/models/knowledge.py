"""
Knowledge base model for django-nextblog.
"""
from django.db import models
from django.urls import reverse

from ..utils import unique_slug


class KnowledgeDoc(models.Model):
    """
    Document in the knowledge base tree.

    Deleting a document removes all of its descendants.
    """

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    content = models.TextField(blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="children",
    )
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "id"]
        verbose_name = "Knowledge Document"

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(KnowledgeDoc, self.title, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("nextblog:knowledge_detail", kwargs={"slug": self.slug})

    def get_ancestors(self):
        """Return list of ancestor documents from root to parent."""
        ancestors = []
        current = self.parent
        while current:
            ancestors.insert(0, current)
            current = current.parent
        return ancestors
