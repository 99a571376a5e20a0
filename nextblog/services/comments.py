"""
Comment workflows: submission with spam screening and moderation.
"""
import logging
import re

from ..conf import blog_settings
from ..models import Comment
from ..utils import paginate

logger = logging.getLogger(__name__)

LINK_RE = re.compile(r"https?://", re.IGNORECASE)


def is_spam(content):
    """Flag content that contains a spam keyword or too many links."""
    lowered = content.lower()
    if any(keyword.lower() in lowered for keyword in blog_settings.SPAM_KEYWORDS):
        return True
    return len(LINK_RE.findall(content)) > blog_settings.SPAM_MAX_LINKS


class CommentService:
    """Comment operations backed by the Django ORM."""

    def __init__(self, model=Comment):
        self.model = model

    def create(self, article_id, content, author_name, author_email, parent_id=None, **extra):
        """
        Store a new comment.

        Spam goes straight to SPAM; everything else is PENDING when
        moderation is on and APPROVED when it is off.
        """
        if is_spam(content):
            status = self.model.Status.SPAM
            logger.info("Comment from %s flagged as spam", author_email)
        elif blog_settings.MODERATE_COMMENTS:
            status = self.model.Status.PENDING
        else:
            status = self.model.Status.APPROVED

        return self.model.objects.create(
            article_id=article_id,
            parent_id=parent_id,
            content=content,
            author_name=author_name,
            author_email=author_email,
            status=status,
            **extra,
        )

    def find_by_id(self, pk):
        return self.model.objects.select_related("article", "parent").filter(pk=pk).first()

    def find_by_article(self, article_id, page=1, limit=None):
        """Approved comments of an article, oldest first."""
        qs = self.model.objects.filter(
            article_id=article_id,
            status=self.model.Status.APPROVED,
        ).order_by("created_at", "id")
        return paginate(qs, page, limit)

    def find_pending(self):
        return list(self.model.objects.filter(status=self.model.Status.PENDING).select_related("article"))

    def approve(self, pk):
        return self._set_status(pk, self.model.Status.APPROVED)

    def mark_as_spam(self, pk):
        return self._set_status(pk, self.model.Status.SPAM)

    def trash(self, pk):
        return self._set_status(pk, self.model.Status.TRASHED)

    def _set_status(self, pk, status):
        comment = self.model.objects.get(pk=pk)
        comment.set_status(status)
        return comment
