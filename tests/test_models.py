"""
Tests for django-nextblog models.
"""
import time
from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone
from django.utils.http import base36_to_int

from nextblog.models import (
    Article,
    ArticleTag,
    Category,
    Comment,
    MediaItem,
    Page,
    Tag,
)
from nextblog.utils import paginate, unique_slug


class TestSlugs:
    """Tests for slug helpers."""

    def test_suffix_is_base36_milliseconds(self, db):
        before = int(time.time() * 1000)
        slug = unique_slug(Tag, "Hello")
        after = int(time.time() * 1000)

        assert before <= base36_to_int(slug.rsplit("-", 1)[1]) <= after

    def test_unique_slug_has_timestamp_suffix(self, db):
        slug = unique_slug(Tag, "Hello World")
        assert slug.startswith("hello-world-")
        assert len(slug) > len("hello-world-")

    def test_unique_slug_keeps_unicode(self, db):
        slug = unique_slug(Tag, "你好 世界")
        assert slug.startswith("你好-世界-")

    def test_unique_slug_avoids_collision(self, db, monkeypatch):
        monkeypatch.setattr("nextblog.utils.int_to_base36", lambda number: "stamp")
        Tag.objects.create(name="first", slug="first-stamp")

        assert unique_slug(Tag, "first") == "first-stamp-1"

    def test_empty_text_gives_timestamp_slug(self, db):
        assert unique_slug(Tag, "!!!")


class TestPaginate:
    def test_page_slicing(self, db):
        for i in range(7):
            Tag.objects.create(name=f"tag{i}")

        page = paginate(Tag.objects.order_by("id"), page=2, limit=3)

        assert page["total"] == 7
        assert page["total_pages"] == 3
        assert page["page"] == 2
        assert [t.name for t in page["items"]] == ["tag3", "tag4", "tag5"]

    def test_empty_queryset(self, db):
        page = paginate(Tag.objects.all(), limit=3)
        assert page["items"] == []
        assert page["total_pages"] == 0


class TestCategory:
    """Tests for Category model."""

    def test_create_category(self, db):
        """Test creating a category."""
        cat = Category.objects.create(name="My Category")
        assert cat.name == "My Category"
        assert cat.slug.startswith("my-category-")

    def test_category_hierarchy(self, db, category):
        """Test nested categories."""
        child = Category.objects.create(
            name="Child Category",
            parent=category,
        )
        assert child.parent == category
        assert str(child) == "Test Category > Child Category"

    def test_get_ancestors(self, db, category):
        """Test getting category ancestors."""
        child = Category.objects.create(name="Child", parent=category)
        grandchild = Category.objects.create(name="Grandchild", parent=child)

        ancestors = grandchild.get_ancestors()
        assert len(ancestors) == 2
        assert ancestors[0] == category
        assert ancestors[1] == child

    def test_get_descendants(self, db, category):
        child = Category.objects.create(name="Child", parent=category)
        grandchild = Category.objects.create(name="Grandchild", parent=child)

        assert category.get_descendants() == [child, grandchild]

    def test_article_count(self, db, category, article, user):
        Article.objects.create(title="Draft", author=user, category=category)
        assert category.article_count == 1


class TestTag:
    """Tests for Tag model."""

    def test_create_tag(self, db):
        """Test creating a tag."""
        tag = Tag.objects.create(name="Django")
        assert tag.name == "Django"
        assert tag.slug.startswith("django-")

    def test_article_tag_pair_is_unique(self, db, tag, article):
        ArticleTag.objects.create(article=article, tag=tag)
        with pytest.raises(IntegrityError):
            ArticleTag.objects.create(article=article, tag=tag)


class TestArticle:
    """Tests for Article model."""

    def test_create_article(self, db, user):
        """Test creating an article."""
        article = Article.objects.create(
            title="Hello World",
            content="My first article!",
            author=user,
        )
        assert article.title == "Hello World"
        assert article.slug.startswith("hello-world-")
        assert article.status == Article.Status.DRAFT
        assert not article.is_published
        assert article.published_at is None

    def test_article_preview(self, db, user):
        """Test article preview truncation."""
        article = Article.objects.create(
            title="Test",
            content="x" * 500,
            author=user,
        )
        assert len(article.preview) == 203  # 200 + "..."

    def test_preview_prefers_excerpt(self, db, user):
        article = Article.objects.create(
            title="Test",
            content="x" * 500,
            excerpt="Short summary",
            author=user,
        )
        assert article.preview == "Short summary"

    def test_publish_article(self, db, user):
        """Test publishing a draft article."""
        article = Article.objects.create(title="Draft", content="Content", author=user)

        article.publish()
        article.refresh_from_db()

        assert article.is_published
        assert article.published_at is not None

    def test_create_published_sets_published_at(self, db, article):
        assert article.published_at is not None

    def test_schedule(self, db, user):
        article = Article.objects.create(title="Later", author=user)
        article.schedule(timezone.now() + timedelta(days=1))
        article.refresh_from_db()

        assert article.status == Article.Status.SCHEDULED
        assert article.is_scheduled

    def test_trash_and_restore(self, db, article):
        article.trash()
        article.refresh_from_db()
        assert article.status == Article.Status.TRASHED
        assert article.deleted_at is not None
        assert not Article.objects.live().filter(pk=article.pk).exists()

        article.restore()
        article.refresh_from_db()
        assert article.status == Article.Status.DRAFT
        assert article.deleted_at is None

    def test_increment_view_count(self, db, article):
        article.increment_view_count()
        article.increment_view_count()
        article.refresh_from_db()
        assert article.view_count == 2

    def test_absolute_url(self, db, article):
        assert article.get_absolute_url() == f"/blog/article/{article.slug}/"


class TestPage:
    def test_navigation(self, db):
        Page.objects.create(title="About", show_in_nav=True)
        Page.objects.create(title="Hidden", show_in_nav=True, is_published=False)
        Page.objects.create(title="Friends")

        assert [p.title for p in Page.objects.navigation()] == ["About"]


class TestComment:
    """Tests for Comment model."""

    def test_create_comment(self, db, article):
        """Test creating a comment."""
        comment = Comment.objects.create(
            article=article,
            author_name="Reader",
            author_email="reader@example.com",
            content="Great article!",
        )
        assert comment.content == "Great article!"
        assert comment.status == Comment.Status.PENDING

    def test_threaded_comments(self, db, article):
        """Test nested comment replies."""
        parent = Comment.objects.create(
            article=article,
            author_name="Reader",
            author_email="reader@example.com",
            content="Parent comment",
            status=Comment.Status.APPROVED,
        )
        reply = Comment.objects.create(
            article=article,
            author_name="Author",
            author_email="author@example.com",
            content="Reply",
            parent=parent,
            status=Comment.Status.APPROVED,
        )
        assert reply.is_reply
        assert reply.thread_depth == 1
        assert list(parent.approved_replies()) == [reply]


class TestMediaItem:
    """Tests for MediaItem model."""

    def test_human_file_size(self, db):
        """Test human-readable file size."""
        media = MediaItem.objects.create(
            content_hash="abc123",
            original_name="test.jpg",
            size=1536000,  # 1.5 MB
        )
        assert "MB" in media.human_file_size

    def test_file_extension(self, db):
        media = MediaItem.objects.create(
            content_hash="def456",
            original_name="Photo.JPG",
            mime_type="image/jpeg",
        )
        assert media.file_extension == ".jpg"
        assert media.is_image
        assert media.file_url is None
