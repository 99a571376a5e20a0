"""
Service layer for django-nextblog.

Each service is a plain class holding the model classes it works on.
Build one instance per process and pass it to the code that needs it:

    from nextblog.services import TagService

    tags = TagService()
    tags.merge(source_id, target_id)
"""
from .ai import AIConfigurationError, AIProviderError, AIService
from .articles import ArticleService
from .backup import BackupService
from .comments import CommentService
from .knowledge import KnowledgeService
from .media import MediaService
from .plugins import PluginRegistry, PluginResult, resolve_load_order
from .site import SettingService, StatsService
from .taxonomy import CategoryService, TagService

__all__ = [
    "AIConfigurationError",
    "AIProviderError",
    "AIService",
    "ArticleService",
    "BackupService",
    "CategoryService",
    "CommentService",
    "KnowledgeService",
    "MediaService",
    "PluginRegistry",
    "PluginResult",
    "SettingService",
    "StatsService",
    "TagService",
    "resolve_load_order",
]
