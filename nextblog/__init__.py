"""
django-nextblog - A personal blog CMS for Django.

Features:
- Articles with version history, scheduling and soft delete
- Hierarchical categories and flat tags with merge/migrate workflows
- Threaded comments with moderation and spam screening
- Static pages and a knowledge base tree
- Content-addressed media library with thumbnails
- Plugin registry with dependency-ordered loading and error isolation
- AI-assisted writing against OpenAI-compatible and Claude providers
- JSON backup/restore and Markdown export
"""

__version__ = "0.1.0"
