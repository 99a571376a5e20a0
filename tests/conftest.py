"""
Shared fixtures for django-nextblog tests.
"""
import pytest
from django.contrib.auth import get_user_model

from nextblog.models import Article, Category, Tag

User = get_user_model()


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Keep uploaded files inside a per-test directory."""
    settings.MEDIA_ROOT = str(tmp_path / "media")
    return settings.MEDIA_ROOT


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username="testuser",
        email="test@example.com",
        password="testpass123",
    )


@pytest.fixture
def category(db):
    """Create a test category."""
    return Category.objects.create(name="Test Category")


@pytest.fixture
def tag(db):
    """Create a test tag."""
    return Tag.objects.create(name="test-tag")


@pytest.fixture
def article(db, user, category):
    """Create a published article."""
    return Article.objects.create(
        title="Test Article",
        content="# Intro\n\nThis is a test article body.",
        author=user,
        category=category,
        status=Article.Status.PUBLISHED,
    )


@pytest.fixture
def make_article(db, user):
    """Factory for extra articles."""

    def make(title="Another Article", **kwargs):
        kwargs.setdefault("content", "Body")
        kwargs.setdefault("status", Article.Status.PUBLISHED)
        return Article.objects.create(title=title, author=user, **kwargs)

    return make
