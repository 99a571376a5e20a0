"""
Site settings and visit statistics.
"""
from datetime import timedelta

from django.db import transaction
from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from ..conf import blog_settings
from ..models import Article, Category, Comment, PageView, SiteSetting, Tag


class SettingService:
    """Key/value site settings with configured defaults."""

    def __init__(self, model=SiteSetting):
        self.model = model

    def get(self, key):
        setting = self.model.objects.filter(key=key).first()
        if setting is not None:
            return setting.value
        return blog_settings.SITE_DEFAULTS.get(key)

    def get_all(self):
        result = dict(blog_settings.SITE_DEFAULTS)
        for key, value in self.model.objects.values_list("key", "value"):
            result[key] = value
        return result

    def set(self, key, value):
        self.model.objects.update_or_create(key=key, defaults={"value": value})

    def set_many(self, values):
        """Store several settings; either all are written or none."""
        with transaction.atomic():
            for key, value in values.items():
                self.set(key, value)

    def delete(self, key):
        self.model.objects.filter(key=key).delete()

    def get_public(self):
        """Settings safe to expose to visitors, with ``{year}`` filled in."""
        values = self.get_all()
        for key in blog_settings.PRIVATE_SITE_SETTINGS:
            values.pop(key, None)
        if "footerText" in values:
            values["footerText"] = values["footerText"].replace("{year}", str(timezone.now().year))
        return values


class StatsService:
    """Visit tracking and dashboard numbers."""

    def __init__(self, model=PageView):
        self.model = model

    def record_view(self, path, article=None, ip=None, user_agent="", referer=""):
        view = self.model.objects.create(
            article=article,
            path=path,
            ip=ip,
            user_agent=user_agent or "",
            referer=referer or "",
        )
        if article is not None:
            article.increment_view_count()
        return view

    def article_view_count(self, article_id):
        article = Article.objects.filter(pk=article_id).only("view_count").first()
        return article.view_count if article else 0

    def popular_articles(self, limit=10):
        return list(Article.objects.published().order_by("-view_count", "-published_at")[:limit])

    def overall(self):
        return {
            "total_articles": Article.objects.live().count(),
            "published_articles": Article.objects.published().count(),
            "total_views": self.model.objects.count(),
            "total_comments": Comment.objects.filter(status=Comment.Status.APPROVED).count(),
            "pending_comments": Comment.objects.filter(status=Comment.Status.PENDING).count(),
            "total_categories": Category.objects.count(),
            "total_tags": Tag.objects.count(),
        }

    def public(self):
        """Numbers the front end may show. ``running_days`` counts from the first article."""
        now = timezone.now()
        published = Article.objects.published()
        first = published.exclude(published_at=None).order_by("published_at").first()
        return {
            "total_articles": published.count(),
            "total_views": self.model.objects.count(),
            "total_categories": Category.objects.count(),
            "total_tags": Tag.objects.count(),
            "total_comments": Comment.objects.filter(status=Comment.Status.APPROVED).count(),
            "recent_articles": published.filter(published_at__gte=now - timedelta(days=30)).count(),
            "running_days": (now - first.published_at).days if first else 0,
            "last_updated": now.isoformat(),
        }

    def recent_views(self, limit=100):
        return list(self.model.objects.all()[:limit])

    def views_by_date(self, days=30):
        """Return ``{"YYYY-MM-DD": count}`` for the last ``days`` days."""
        since = timezone.now() - timedelta(days=days)
        rows = (
            self.model.objects.filter(created_at__gte=since)
            .annotate(day=TruncDate("created_at"))
            .values("day")
            .annotate(count=Count("id"))
            .order_by("day")
        )
        return {row["day"].isoformat(): row["count"] for row in rows}
