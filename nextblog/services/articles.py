"""
Article workflows: authoring, versioning, publishing and listing.
"""
import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from ..models import Article, ArticleTag, ArticleVersion
from ..utils import paginate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "title",
    "content",
    "excerpt",
    "cover_image",
    "seo_title",
    "seo_description",
    "category_id",
    "scheduled_at",
}


class ArticleService:
    """Article operations backed by the Django ORM."""

    def __init__(self, model=Article, version_model=ArticleVersion, link_model=ArticleTag):
        self.model = model
        self.version_model = version_model
        self.link_model = link_model

    def create(self, title, content, author, category_id=None, tag_ids=None, **extra):
        """Create a draft article, optionally tagged."""
        with transaction.atomic():
            article = self.model.objects.create(
                title=title,
                content=content,
                author=author,
                category_id=category_id,
                status=self.model.Status.DRAFT,
                **extra,
            )
            if tag_ids:
                self.set_tags(article, tag_ids)
        return article

    def find_by_id(self, pk):
        return (
            self.model.objects.select_related("author", "category")
            .prefetch_related("tags", "versions")
            .filter(pk=pk)
            .first()
        )

    def find_by_slug(self, slug):
        return (
            self.model.objects.select_related("author", "category")
            .prefetch_related("tags")
            .filter(slug=slug)
            .first()
        )

    def update(self, pk, tag_ids=None, **fields):
        """
        Update an article.

        When the title or content changes, the previous values are kept as
        an ArticleVersion.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown article fields: {', '.join(sorted(unknown))}")

        with transaction.atomic():
            article = self.model.objects.select_for_update().get(pk=pk)
            content_changed = (
                ("title" in fields and fields["title"] != article.title)
                or ("content" in fields and fields["content"] != article.content)
            )
            if content_changed:
                self.version_model.objects.create(
                    article=article,
                    title=article.title,
                    content=article.content,
                )

            for name, value in fields.items():
                setattr(article, name, value)
            article.save()

            if tag_ids is not None:
                self.set_tags(article, tag_ids)
        return article

    def set_tags(self, article, tag_ids):
        """Replace the article's tags with ``tag_ids``."""
        wanted = list(dict.fromkeys(tag_ids))
        self.link_model.objects.filter(article=article).exclude(tag_id__in=wanted).delete()
        existing = set(
            self.link_model.objects.filter(article=article).values_list("tag_id", flat=True)
        )
        self.link_model.objects.bulk_create(
            [self.link_model(article=article, tag_id=tag_id) for tag_id in wanted if tag_id not in existing]
        )

    def publish(self, pk):
        article = self.model.objects.get(pk=pk)
        article.publish()
        return article

    def soft_delete(self, pk):
        article = self.model.objects.get(pk=pk)
        article.trash()
        return article

    def restore(self, pk):
        article = self.model.objects.get(pk=pk)
        article.restore()
        return article

    def delete(self, pk):
        """Remove an article permanently."""
        self.model.objects.get(pk=pk).delete()

    def published(self, category_id=None, tag_id=None):
        qs = self.model.objects.published().select_related("author", "category").prefetch_related("tags")
        if category_id is not None:
            qs = qs.filter(category_id=category_id)
        if tag_id is not None:
            qs = qs.filter(tag_links__tag_id=tag_id)
        return qs.order_by("-published_at", "-id")

    def find_published(self, category_id=None, tag_id=None, page=1, limit=None):
        """Published articles, newest first, one page at a time."""
        return paginate(self.published(category_id, tag_id), page, limit)

    def matching(self, query):
        """Published articles whose title or content contains ``query``."""
        return self.published().filter(Q(title__icontains=query) | Q(content__icontains=query))

    def search(self, query, page=1, limit=None):
        return paginate(self.matching(query), page, limit)

    def publish_due(self, now=None):
        """Publish scheduled articles whose time has come. Returns the count."""
        now = now or timezone.now()
        due = self.model.objects.filter(
            status=self.model.Status.SCHEDULED,
            scheduled_at__lte=now,
        )
        count = 0
        for article in due:
            article.publish()
            count += 1
        if count:
            logger.info("Published %d scheduled articles", count)
        return count
