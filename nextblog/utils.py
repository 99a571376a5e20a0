"""
Shared helpers for slugs and pagination.
"""
import math
import time

from django.utils.http import int_to_base36
from django.utils.text import slugify

from .conf import blog_settings


def unique_slug(model, text, exclude_pk=None):
    """
    Build a slug for ``text`` that is unique among ``model`` rows.

    The slugified text is truncated and suffixed with a base36 millisecond
    timestamp. If that still collides, a counter is appended.
    """
    base = slugify(text, allow_unicode=True)[:blog_settings.SLUG_MAX_LENGTH].strip("-")
    stamp = int_to_base36(int(time.time() * 1000))
    base_slug = f"{base}-{stamp}" if base else stamp

    slug = base_slug
    counter = 1
    queryset = model.objects.all()
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    while queryset.filter(slug=slug).exists():
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def paginate(queryset, page=1, limit=None):
    """
    Slice a queryset into one page.

    Returns a dict with ``items``, ``total``, ``page``, ``limit`` and
    ``total_pages``.
    """
    limit = limit or blog_settings.ARTICLES_PER_PAGE
    page = max(int(page), 1)
    total = queryset.count()
    offset = (page - 1) * limit
    return {
        "items": list(queryset[offset:offset + limit]),
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }
