"""
Site backup: JSON export/import and Markdown export.
"""
import json
import logging

import yaml
from django.core.serializers.json import DjangoJSONEncoder
from django.db import IntegrityError, transaction
from django.utils import timezone

from ..conf import blog_settings
from ..models import Article, ArticleTag, Category, KnowledgeDoc, Page, SiteSetting, Tag

logger = logging.getLogger(__name__)

ARTICLE_FIELDS = [
    "id",
    "title",
    "slug",
    "content",
    "excerpt",
    "cover_image",
    "status",
    "seo_title",
    "seo_description",
    "category_id",
    "view_count",
    "published_at",
    "scheduled_at",
    "deleted_at",
    "created_at",
]


class BackupService:
    """Export and restore site content."""

    def export_all(self):
        """Return every piece of content as plain Python data."""
        tag_names = {}
        for article_id, name in ArticleTag.objects.values_list("article_id", "tag__name"):
            tag_names.setdefault(article_id, []).append(name)

        articles = []
        for row in Article.objects.order_by("id").values(*ARTICLE_FIELDS):
            row["tags"] = sorted(tag_names.get(row["id"], []))
            articles.append(row)

        return {
            "version": blog_settings.BACKUP_FORMAT_VERSION,
            "exported_at": timezone.now().isoformat(),
            "articles": articles,
            "categories": list(Category.objects.order_by("id").values("id", "name", "slug", "description", "parent_id", "sort_order")),
            "tags": list(Tag.objects.order_by("id").values("id", "name", "slug")),
            "pages": list(Page.objects.order_by("id").values("id", "title", "slug", "content", "is_published", "show_in_nav", "sort_order")),
            "knowledge_docs": list(KnowledgeDoc.objects.order_by("id").values("id", "title", "slug", "content", "parent_id", "sort_order")),
            "settings": list(SiteSetting.objects.order_by("key").values("key", "value")),
        }

    def export_json(self, indent=2):
        return json.dumps(self.export_all(), cls=DjangoJSONEncoder, indent=indent, ensure_ascii=False)

    def import_all(self, data, author=None):
        """
        Restore a backup produced by export_all().

        Rows are upserted by id. A row that violates a constraint is
        skipped and logged. Articles are only restored when ``author`` is
        given, since user accounts are not part of the backup.

        Returns a dict of imported row counts per section.
        """
        imported = {
            "categories": 0,
            "tags": 0,
            "articles": 0,
            "pages": 0,
            "knowledge_docs": 0,
            "settings": 0,
        }

        categories = data.get("categories", [])
        for row in categories:
            if self._upsert(Category, row, ["name", "slug", "description", "sort_order"]):
                imported["categories"] += 1
        for row in categories:
            self._link_parent(Category, row)

        for row in data.get("tags", []):
            if self._upsert(Tag, row, ["name", "slug"]):
                imported["tags"] += 1

        for row in data.get("pages", []):
            if self._upsert(Page, row, ["title", "slug", "content", "is_published", "show_in_nav", "sort_order"]):
                imported["pages"] += 1

        docs = data.get("knowledge_docs", [])
        for row in docs:
            if self._upsert(KnowledgeDoc, row, ["title", "slug", "content", "sort_order"]):
                imported["knowledge_docs"] += 1
        for row in docs:
            self._link_parent(KnowledgeDoc, row)

        for row in data.get("settings", []):
            SiteSetting.objects.update_or_create(key=row["key"], defaults={"value": row.get("value", "")})
            imported["settings"] += 1

        if author is not None:
            for row in data.get("articles", []):
                if self._import_article(row, author):
                    imported["articles"] += 1

        logger.info("Backup import finished: %s", imported)
        return imported

    def export_markdown(self):
        """
        Return ``[(filename, text), ...]`` for published articles.

        Each file starts with a YAML front matter block.
        """
        files = []
        articles = Article.objects.published().select_related("category").prefetch_related("tags").order_by("id")
        for article in articles:
            front_matter = {
                "title": article.title,
                "date": (article.published_at or article.created_at).isoformat(),
            }
            if article.category:
                front_matter["category"] = article.category.name
            tags = [tag.name for tag in article.tags.all()]
            if tags:
                front_matter["tags"] = tags
            header = yaml.safe_dump(front_matter, allow_unicode=True, sort_keys=False)
            files.append((f"{article.slug}.md", f"---\n{header}---\n\n{article.content}"))
        return files

    def _upsert(self, model, row, fields):
        defaults = {name: row[name] for name in fields if name in row}
        try:
            with transaction.atomic():
                model.objects.update_or_create(pk=row["id"], defaults=defaults)
        except IntegrityError as e:
            logger.warning("Skipped %s %s during import: %s", model.__name__, row.get("id"), e)
            return False
        return True

    def _link_parent(self, model, row):
        parent_id = row.get("parent_id")
        if parent_id is not None and not model.objects.filter(pk=parent_id).exists():
            logger.warning("%s %s: parent %s was not imported, left at top level", model.__name__, row.get("id"), parent_id)
            parent_id = None
        model.objects.filter(pk=row["id"]).update(parent_id=parent_id)

    def _import_article(self, row, author):
        defaults = {name: row[name] for name in ARTICLE_FIELDS if name in row and name not in ("id", "category_id")}
        category_id = row.get("category_id")
        if category_id and Category.objects.filter(pk=category_id).exists():
            defaults["category_id"] = category_id
        defaults["author"] = author
        try:
            with transaction.atomic():
                article, _ = Article.objects.update_or_create(pk=row["id"], defaults=defaults)
                for name in row.get("tags", []):
                    tag, _ = Tag.objects.get_or_create(name=name)
                    ArticleTag.objects.get_or_create(article=article, tag=tag)
        except IntegrityError as e:
            logger.warning("Skipped article %s during import: %s", row.get("id"), e)
            return False
        return True
