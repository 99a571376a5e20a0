"""
Article, Category, Tag and Page models for django-nextblog.
"""
from django.conf import settings
from django.db import models
from django.urls import reverse
from django.utils import timezone

from ..conf import blog_settings
from ..utils import unique_slug


class Category(models.Model):
    """
    Hierarchical category for organizing articles.

    Categories support nesting via parent field for tree structures.
    """

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True, allow_unicode=True)
    description = models.TextField(blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="children",
    )
    sort_order = models.IntegerField(default=0, help_text="Display order within parent")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "Categories"

    def __str__(self):
        if self.parent:
            return f"{self.parent} > {self.name}"
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Category, self.name, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("nextblog:category_detail", kwargs={"slug": self.slug})

    @property
    def article_count(self):
        """Return count of published articles in this category."""
        return self.articles.filter(status=Article.Status.PUBLISHED).count()

    def get_ancestors(self):
        """Return list of ancestor categories from root to parent."""
        ancestors = []
        current = self.parent
        while current:
            ancestors.insert(0, current)
            current = current.parent
        return ancestors

    def get_descendants(self):
        """Return all descendant categories."""
        descendants = []
        for child in self.children.all():
            descendants.append(child)
            descendants.extend(child.get_descendants())
        return descendants


class Tag(models.Model):
    """
    Flat tag for articles.

    Tags are non-hierarchical and can be applied to multiple articles.
    """

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True, allow_unicode=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Tag, self.name, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("nextblog:tag_detail", kwargs={"slug": self.slug})


class ArticleQuerySet(models.QuerySet):
    def published(self):
        return self.filter(status=Article.Status.PUBLISHED)

    def live(self):
        """Everything except the trash."""
        return self.exclude(status=Article.Status.TRASHED)


class Article(models.Model):
    """
    Blog article written in Markdown.

    Supports:
    - Draft / published / scheduled / trashed lifecycle
    - Version history snapshots on edit
    - Per-article SEO overrides
    """

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PUBLISHED = "PUBLISHED", "Published"
        SCHEDULED = "SCHEDULED", "Scheduled"
        TRASHED = "TRASHED", "Trashed"

    # Content
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    content = models.TextField(blank=True)
    excerpt = models.TextField(
        blank=True,
        help_text="Optional manual excerpt. Auto-generated if blank.",
    )
    cover_image = models.CharField(max_length=500, blank=True)

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="nextblog_articles",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
    )

    # SEO
    seo_title = models.CharField(max_length=255, blank=True)
    seo_description = models.TextField(blank=True)

    # Taxonomy
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="articles",
    )
    tags = models.ManyToManyField(
        Tag,
        through="ArticleTag",
        related_name="articles",
        blank=True,
    )

    # Engagement stats
    view_count = models.PositiveIntegerField(default=0)

    # Lifecycle timestamps
    published_at = models.DateTimeField(null=True, blank=True, db_index=True)
    scheduled_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Schedule article to be published at this time",
    )
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ArticleQuerySet.as_manager()

    class Meta:
        ordering = ["-published_at", "-created_at"]
        indexes = [
            models.Index(fields=["status", "-published_at"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Article, self.title, exclude_pk=self.pk)

        if self.status == self.Status.PUBLISHED and not self.published_at:
            self.published_at = timezone.now()

        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("nextblog:article_detail", kwargs={"slug": self.slug})

    @property
    def preview(self):
        """Return the excerpt, or truncated content when none is set."""
        if self.excerpt:
            return self.excerpt
        limit = blog_settings.EXCERPT_LENGTH
        if len(self.content) > limit:
            return self.content[:limit] + "..."
        return self.content

    @property
    def is_published(self):
        return self.status == self.Status.PUBLISHED

    @property
    def is_scheduled(self):
        """Check if article is scheduled for future publication."""
        if self.status != self.Status.SCHEDULED or not self.scheduled_at:
            return False
        return self.scheduled_at > timezone.now()

    def publish(self):
        """Publish the article immediately."""
        self.status = self.Status.PUBLISHED
        self.published_at = timezone.now()
        self.deleted_at = None
        self.save(update_fields=["status", "published_at", "deleted_at", "updated_at"])

    def schedule(self, when):
        """Queue the article for publication at ``when``."""
        self.status = self.Status.SCHEDULED
        self.scheduled_at = when
        self.save(update_fields=["status", "scheduled_at", "updated_at"])

    def trash(self):
        """Soft delete the article. The row is kept."""
        self.status = self.Status.TRASHED
        self.deleted_at = timezone.now()
        self.save(update_fields=["status", "deleted_at", "updated_at"])

    def restore(self):
        """Bring a trashed article back as a draft."""
        self.status = self.Status.DRAFT
        self.deleted_at = None
        self.save(update_fields=["status", "deleted_at", "updated_at"])

    def increment_view_count(self):
        """Increment view count atomically."""
        Article.objects.filter(pk=self.pk).update(view_count=models.F("view_count") + 1)


class ArticleTag(models.Model):
    """
    Association row linking an article to a tag.

    At most one row exists per (article, tag) pair.
    """

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name="tag_links",
    )
    tag = models.ForeignKey(
        Tag,
        on_delete=models.CASCADE,
        related_name="article_links",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["article", "tag"], name="nextblog_unique_article_tag"),
        ]

    def __str__(self):
        return f"{self.article} - {self.tag}"


class ArticleVersion(models.Model):
    """
    Edit history for articles.

    Stores the title and content an article had before an edit.
    """

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name="versions",
    )
    title = models.CharField(max_length=255)
    content = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Version of {self.article_id} at {self.created_at}"


class PageQuerySet(models.QuerySet):
    def published(self):
        return self.filter(is_published=True)

    def navigation(self):
        return self.filter(is_published=True, show_in_nav=True)


class Page(models.Model):
    """
    Static page (about, friends, etc.).

    Pages are similar to articles but don't appear in feeds.
    """

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    content = models.TextField(blank=True)
    is_published = models.BooleanField(default=True)
    show_in_nav = models.BooleanField(
        default=False,
        help_text="Show in navigation menu",
    )
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PageQuerySet.as_manager()

    class Meta:
        ordering = ["sort_order", "title"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Page, self.title, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("nextblog:page_detail", kwargs={"slug": self.slug})
