"""
Django admin configuration for nextblog.
"""
from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.html import format_html

from .models import (
    AIModel,
    AIUsageLog,
    Article,
    ArticleTag,
    ArticleVersion,
    Category,
    Comment,
    KnowledgeDoc,
    MediaItem,
    Page,
    PageView,
    Plugin,
    SiteSetting,
    Tag,
)
from .services import CategoryService, PluginRegistry, TagService


class ArticleTagInline(admin.TabularInline):
    """Inline for managing tags on articles."""

    model = ArticleTag
    extra = 1
    raw_id_fields = ["tag"]
    fields = ["tag"]


class ArticleVersionInline(admin.TabularInline):
    model = ArticleVersion
    extra = 0
    can_delete = False
    fields = ["title", "created_at"]
    readonly_fields = ["title", "created_at"]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "parent", "slug", "article_count", "sort_order"]
    list_filter = ["parent"]
    search_fields = ["name", "slug", "description"]
    prepopulated_fields = {"slug": ("name",)}
    list_editable = ["sort_order"]
    ordering = ["parent__name", "sort_order", "name"]

    category_service = CategoryService()

    def delete_model(self, request, obj):
        # Articles become uncategorized; child categories move up a level.
        self.category_service.delete(obj.pk)

    def delete_queryset(self, request, queryset):
        for category in queryset:
            self.category_service.delete(category.pk)


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "created_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["created_at"]
    actions = ["merge_tags"]

    tag_service = TagService()

    @admin.action(description="Merge selected tags into the oldest one")
    def merge_tags(self, request, queryset):
        tags = list(queryset.order_by("created_at", "id"))
        if len(tags) < 2:
            self.message_user(request, "Select at least two tags to merge.", level=messages.WARNING)
            return

        target = tags[0]
        try:
            for source in tags[1:]:
                self.tag_service.merge(source.pk, target.pk)
        except ValidationError as e:
            self.message_user(request, "; ".join(e.messages), level=messages.ERROR)
            return
        self.message_user(request, f"{len(tags) - 1} tags merged into {target.name}.")


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = [
        "title_preview",
        "author",
        "status",
        "category",
        "view_count",
        "published_at",
        "created_at",
    ]
    list_filter = ["status", "category", "created_at"]
    search_fields = ["title", "content", "author__username"]
    raw_id_fields = ["author", "category"]
    date_hierarchy = "created_at"
    inlines = [ArticleTagInline, ArticleVersionInline]
    readonly_fields = [
        "view_count",
        "created_at",
        "updated_at",
        "published_at",
        "deleted_at",
    ]
    prepopulated_fields = {"slug": ("title",)}

    fieldsets = (
        (None, {
            "fields": ("title", "slug", "content", "excerpt", "cover_image", "author")
        }),
        ("Taxonomy", {
            "fields": ("category",)
        }),
        ("Status", {
            "fields": ("status", "scheduled_at", "published_at", "deleted_at")
        }),
        ("SEO", {
            "fields": ("seo_title", "seo_description"),
            "classes": ("collapse",),
        }),
        ("Metadata", {
            "fields": ("view_count", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    actions = ["publish_articles", "trash_articles", "restore_articles"]

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    @admin.action(description="Publish selected articles")
    def publish_articles(self, request, queryset):
        for article in queryset:
            article.publish()
        self.message_user(request, f"{queryset.count()} articles published.")

    @admin.action(description="Move selected articles to trash")
    def trash_articles(self, request, queryset):
        for article in queryset:
            article.trash()
        self.message_user(request, f"{queryset.count()} articles trashed.")

    @admin.action(description="Restore selected articles as drafts")
    def restore_articles(self, request, queryset):
        for article in queryset:
            article.restore()
        self.message_user(request, f"{queryset.count()} articles restored.")


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = ["title", "slug", "is_published", "show_in_nav", "sort_order"]
    list_filter = ["is_published", "show_in_nav"]
    search_fields = ["title", "content"]
    prepopulated_fields = {"slug": ("title",)}
    list_editable = ["is_published", "show_in_nav", "sort_order"]


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = [
        "preview",
        "author_name",
        "article",
        "status",
        "ip_address",
        "created_at",
    ]
    list_filter = ["status", "created_at"]
    search_fields = ["content", "author_name", "author_email", "article__title"]
    raw_id_fields = ["article", "parent"]
    readonly_fields = ["ip_address", "user_agent", "created_at", "updated_at"]
    actions = ["approve_comments", "mark_spam", "trash_comments"]

    @admin.action(description="Approve selected comments")
    def approve_comments(self, request, queryset):
        count = queryset.update(status=Comment.Status.APPROVED)
        self.message_user(request, f"{count} comments approved.")

    @admin.action(description="Mark selected comments as spam")
    def mark_spam(self, request, queryset):
        count = queryset.update(status=Comment.Status.SPAM)
        self.message_user(request, f"{count} comments marked as spam.")

    @admin.action(description="Move selected comments to trash")
    def trash_comments(self, request, queryset):
        count = queryset.update(status=Comment.Status.TRASHED)
        self.message_user(request, f"{count} comments trashed.")


@admin.register(KnowledgeDoc)
class KnowledgeDocAdmin(admin.ModelAdmin):
    list_display = ["title", "parent", "slug", "sort_order", "updated_at"]
    list_filter = ["parent"]
    search_fields = ["title", "content"]
    prepopulated_fields = {"slug": ("title",)}
    list_editable = ["sort_order"]
    raw_id_fields = ["parent"]


@admin.register(MediaItem)
class MediaItemAdmin(admin.ModelAdmin):
    list_display = [
        "thumbnail_preview",
        "original_name",
        "mime_type",
        "human_file_size",
        "dimensions",
        "created_at",
    ]
    list_filter = ["mime_type", "created_at"]
    search_fields = ["original_name"]
    readonly_fields = [
        "content_hash",
        "size",
        "width",
        "height",
        "mime_type",
        "thumbnail",
        "created_at",
    ]

    def thumbnail_preview(self, obj):
        url = obj.thumbnail_url or (obj.file_url if obj.is_image else None)
        if url:
            return format_html(
                '<img src="{}" style="max-width: 50px; max-height: 50px;" />',
                url,
            )
        return obj.mime_type

    thumbnail_preview.short_description = "Preview"

    def dimensions(self, obj):
        if obj.width and obj.height:
            return f"{obj.width}x{obj.height}"
        return "-"

    dimensions.short_description = "Size"

    def delete_model(self, request, obj):
        obj.delete_files()
        super().delete_model(request, obj)


@admin.register(Plugin)
class PluginAdmin(admin.ModelAdmin):
    list_display = ["name", "version", "path", "is_enabled", "created_at"]
    list_filter = ["is_enabled"]
    search_fields = ["name", "path"]
    readonly_fields = ["created_at", "updated_at"]
    actions = ["enable_plugins", "disable_plugins"]

    plugin_registry = PluginRegistry()

    @admin.action(description="Enable selected plugins")
    def enable_plugins(self, request, queryset):
        for plugin in queryset:
            self.plugin_registry.enable(plugin.pk)
        self.message_user(request, f"{queryset.count()} plugins enabled.")

    @admin.action(description="Disable selected plugins")
    def disable_plugins(self, request, queryset):
        for plugin in queryset:
            self.plugin_registry.disable(plugin.pk)
        self.message_user(request, f"{queryset.count()} plugins disabled.")


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ["key", "value", "updated_at"]
    search_fields = ["key", "value"]


@admin.register(PageView)
class PageViewAdmin(admin.ModelAdmin):
    list_display = ["path", "article", "ip", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["path", "referer"]
    raw_id_fields = ["article"]
    readonly_fields = ["path", "article", "ip", "user_agent", "referer", "created_at"]


@admin.register(AIModel)
class AIModelAdmin(admin.ModelAdmin):
    list_display = ["name", "provider", "model_id", "is_enabled", "is_default"]
    list_filter = ["provider", "is_enabled"]
    search_fields = ["name", "model_id"]
    exclude = ["api_key"]


@admin.register(AIUsageLog)
class AIUsageLogAdmin(admin.ModelAdmin):
    list_display = ["pk", "ai_model", "success", "created_at"]
    list_filter = ["success", "created_at"]
    readonly_fields = ["ai_model", "prompt", "response", "success", "error", "created_at"]
