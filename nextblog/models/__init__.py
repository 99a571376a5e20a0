"""
Models for django-nextblog.

All models are importable from nextblog.models:

    from nextblog.models import Article, Category, Tag, Plugin
"""
from .posts import Category, Tag, Article, ArticleTag, ArticleVersion, Page
from .comments import Comment
from .media import MediaItem
from .knowledge import KnowledgeDoc
from .plugins import Plugin
from .site import SiteSetting, PageView
from .ai import AIModel, AIUsageLog

__all__ = [
    # Posts
    "Category",
    "Tag",
    "Article",
    "ArticleTag",
    "ArticleVersion",
    "Page",
    # Comments
    "Comment",
    # Media
    "MediaItem",
    # Knowledge base
    "KnowledgeDoc",
    # Plugins
    "Plugin",
    # Site
    "SiteSetting",
    "PageView",
    # AI
    "AIModel",
    "AIUsageLog",
]
