"""
Tag and category workflows: CRUD plus merge and migrate-on-delete.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Prefetch

from ..models import Article, ArticleTag, Category, Tag
from ..utils import unique_slug

logger = logging.getLogger(__name__)


class TagService:
    """Tag registry backed by the Django ORM."""

    def __init__(self, model=Tag, link_model=ArticleTag):
        self.model = model
        self.link_model = link_model

    def create(self, name):
        return self.model.objects.create(name=name)

    def find_by_id(self, pk):
        """Return the tag with its article links prefetched, or None."""
        return (
            self.model.objects.filter(pk=pk)
            .prefetch_related(self._links_prefetch())
            .first()
        )

    def find_by_name(self, name):
        return self.model.objects.filter(name=name).first()

    def find_all(self):
        """All tags by name, each annotated with ``article_count``."""
        return list(
            self.model.objects.annotate(article_count=Count("article_links")).order_by("name")
        )

    def update(self, pk, name=None):
        tag = self.model.objects.get(pk=pk)
        if name and name != tag.name:
            tag.name = name
            tag.slug = unique_slug(self.model, name, exclude_pk=tag.pk)
            tag.save(update_fields=["name", "slug"])
        return tag

    def delete(self, pk):
        """Delete a tag and its association rows."""
        with transaction.atomic():
            self.link_model.objects.filter(tag_id=pk).delete()
            self.model.objects.get(pk=pk).delete()

    def article_count(self, pk):
        return self.link_model.objects.filter(tag_id=pk).count()

    def find_or_create_many(self, names):
        """Return a tag for each name, creating the missing ones."""
        tags = []
        for name in names:
            tag = self.find_by_name(name)
            if tag is None:
                tag = self.create(name)
            tags.append(tag)
        return tags

    def merge(self, source_id, target_id):
        """
        Move every article of the source tag onto the target, then delete the source.

        Articles already linked to the target are skipped so no duplicate
        (article, tag) row is created. Runs in a single transaction.
        Returns the target tag with its links prefetched.
        """
        if str(source_id) == str(target_id):
            raise ValidationError("Cannot merge a tag into itself.")

        with transaction.atomic():
            source = self.model.objects.select_for_update().get(pk=source_id)
            target = self.model.objects.select_for_update().get(pk=target_id)

            source_article_ids = list(
                self.link_model.objects.filter(tag=source).values_list("article_id", flat=True)
            )
            target_article_ids = set(
                self.link_model.objects.filter(tag=target).values_list("article_id", flat=True)
            )

            new_links = [
                self.link_model(article_id=article_id, tag=target)
                for article_id in source_article_ids
                if article_id not in target_article_ids
            ]
            self.link_model.objects.bulk_create(new_links)

            self.link_model.objects.filter(tag=source).delete()
            source.delete()

        logger.info(
            "Merged tag %s into %s (%d articles moved)",
            source_id,
            target_id,
            len(new_links),
        )
        return self.find_by_id(target_id)

    def _links_prefetch(self):
        return Prefetch(
            "article_links",
            queryset=self.link_model.objects.select_related("article").order_by("id"),
        )


class CategoryService:
    """Category registry backed by the Django ORM."""

    def __init__(self, model=Category, article_model=Article):
        self.model = model
        self.article_model = article_model

    def create(self, name, parent_id=None, description="", sort_order=0):
        return self.model.objects.create(
            name=name,
            parent_id=parent_id,
            description=description,
            sort_order=sort_order,
        )

    def find_by_id(self, pk):
        return self.model.objects.select_related("parent").filter(pk=pk).first()

    def find_by_slug(self, slug):
        return self.model.objects.select_related("parent").filter(slug=slug).first()

    def find_all(self):
        """All categories, each annotated with ``num_articles``."""
        return list(self.model.objects.annotate(num_articles=Count("articles")))

    def get_children(self, pk):
        return list(self.model.objects.filter(parent_id=pk))

    def get_tree(self):
        """
        Return root categories with ``tree_children`` populated recursively.

        One query; the tree is assembled in memory.
        """
        categories = list(self.model.objects.all())
        by_parent = {}
        for category in categories:
            category.tree_children = []
            by_parent.setdefault(category.parent_id, []).append(category)
        for category in categories:
            category.tree_children = by_parent.get(category.pk, [])
        return by_parent.get(None, [])

    def update(self, pk, **fields):
        category = self.model.objects.get(pk=pk)
        parent_id = fields.get("parent_id")
        if parent_id is not None:
            self._check_parent(category, parent_id)
        for name, value in fields.items():
            setattr(category, name, value)
        if "name" in fields and "slug" not in fields:
            category.slug = unique_slug(self.model, category.name, exclude_pk=category.pk)
        category.save()
        return category

    def delete(self, pk, migrate_to=None):
        """
        Delete a category, moving its articles to ``migrate_to``.

        Articles are updated in place to point at the target category (or
        left uncategorized when no target is given). Child categories move
        up to the deleted category's parent.
        """
        if migrate_to is not None and str(migrate_to) == str(pk):
            raise ValidationError("Cannot migrate a category's articles into itself.")

        with transaction.atomic():
            category = self.model.objects.select_for_update().get(pk=pk)
            if migrate_to is not None:
                self.model.objects.get(pk=migrate_to)

            moved = self.article_model.objects.filter(category_id=pk).update(category_id=migrate_to)
            self.model.objects.filter(parent_id=pk).update(parent_id=category.parent_id)
            category.delete()

        logger.info("Deleted category %s, %d articles moved to %s", pk, moved, migrate_to)

    def _check_parent(self, category, parent_id):
        if str(parent_id) == str(category.pk):
            raise ValidationError("A category cannot be its own parent.")
        descendant_ids = {str(c.pk) for c in category.get_descendants()}
        if str(parent_id) in descendant_ids:
            raise ValidationError("A category cannot be moved under its own descendant.")
