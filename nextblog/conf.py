"""
Configuration settings for django-nextblog.

Override these in your Django settings.py:

    NEXTBLOG = {
        'ARTICLES_PER_PAGE': 10,
        'MODERATE_COMMENTS': True,
        'AI_ENCRYPTION_KEY': '...',
        ...
    }
"""
from django.conf import settings

DEFAULTS = {
    # Articles
    "ARTICLES_PER_PAGE": 10,
    "SLUG_MAX_LENGTH": 50,
    "EXCERPT_LENGTH": 200,

    # Comments
    "MODERATE_COMMENTS": True,
    "COMMENT_MAX_LENGTH": 5000,
    "SPAM_KEYWORDS": [
        "free money",
        "click here",
        "viagra",
        "casino",
        "lottery",
        "winner",
    ],
    "SPAM_MAX_LINKS": 3,

    # Media
    "MEDIA_UPLOAD_PATH": "nextblog/media/%Y/%m/",
    "THUMBNAIL_UPLOAD_PATH": "nextblog/thumbnails/%Y/%m/",
    "GENERATE_THUMBNAILS": True,
    "THUMBNAIL_SIZE": (300, 300),

    # Site settings
    "SITE_DEFAULTS": {
        "siteName": "NextBlog",
        "siteDescription": "",
        "siteKeywords": "",
        "siteUrl": "",
        "siteLogo": "",
        "siteFavicon": "",
        "footerText": "© {year} NextBlog. All rights reserved.",
        "googleAnalyticsId": "",
        "baiduAnalyticsId": "",
        "seoDefaultTitle": "",
        "seoDefaultDescription": "",
        "socialGithub": "",
        "socialTwitter": "",
        "socialWeibo": "",
    },
    "PRIVATE_SITE_SETTINGS": ["googleAnalyticsId", "baiduAnalyticsId"],

    # AI writing
    "AI_ENCRYPTION_KEY": None,  # falls back to SECRET_KEY
    "AI_REQUEST_TIMEOUT": 60,
    "AI_MAX_TOKENS": 4096,

    # Backup
    "BACKUP_FORMAT_VERSION": "1.0",
}


class NextBlogSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from nextblog.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid nextblog setting: {name}")

        user_settings = getattr(settings, "NEXTBLOG", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def SITE_DEFAULTS(self):
        """Return site defaults merged over the built-in ones."""
        user_settings = getattr(settings, "NEXTBLOG", {})
        merged = dict(DEFAULTS["SITE_DEFAULTS"])
        merged.update(user_settings.get("SITE_DEFAULTS", {}))
        return merged


blog_settings = NextBlogSettings()
