"""
Views for django-nextblog.

Services are class attributes so a project can hand in its own
instances: ``ArticleDetailView.as_view(stats_service=my_stats)``.
"""
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404, redirect
from django.views import View
from django.views.generic import DetailView, ListView, TemplateView

from .conf import blog_settings
from .models import Article, Category, Comment, KnowledgeDoc, Page, Tag
from .rendering import render_markdown
from .services import ArticleService, CommentService, KnowledgeService, SettingService, StatsService


class SiteContextMixin:
    """Adds site settings and navigation pages to every template."""

    setting_service = SettingService()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["site"] = self.setting_service.get_public()
        context["nav_pages"] = Page.objects.navigation()
        return context


class ArticleListView(SiteContextMixin, ListView):
    """List published articles with pagination."""

    template_name = "nextblog/article_list.html"
    context_object_name = "articles"
    paginate_by = blog_settings.ARTICLES_PER_PAGE
    article_service = ArticleService()

    def get_queryset(self):
        return self.article_service.published()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["categories"] = Category.objects.filter(parent=None)
        context["tags"] = Tag.objects.all()[:20]
        return context


class ArticleDetailView(SiteContextMixin, DetailView):
    """Display a single published article."""

    template_name = "nextblog/article_detail.html"
    context_object_name = "article"
    article_service = ArticleService()
    comment_service = CommentService()
    stats_service = StatsService()

    def get_object(self, queryset=None):
        article = self.article_service.find_by_slug(self.kwargs["slug"])
        if article is None or not article.is_published:
            raise Http404("Article not found")

        self.stats_service.record_view(
            path=self.request.path,
            article=article,
            ip=self.request.META.get("REMOTE_ADDR"),
            user_agent=self.request.META.get("HTTP_USER_AGENT", ""),
            referer=self.request.META.get("HTTP_REFERER", ""),
        )
        return article

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        rendered = render_markdown(self.object.content)
        context["content_html"] = rendered.html
        context["toc"] = rendered.toc
        context["comments"] = self.comment_service.find_by_article(self.object.pk, limit=100)["items"]
        context["related_articles"] = self._get_related_articles()
        return context

    def _get_related_articles(self):
        """Get articles related by category or tags."""
        article = self.object
        related = Article.objects.published().exclude(pk=article.pk)

        if article.category_id:
            related = related.filter(category_id=article.category_id)
        else:
            tag_ids = [tag.pk for tag in article.tags.all()]
            if not tag_ids:
                return []
            related = related.filter(tag_links__tag_id__in=tag_ids).distinct()

        return related[:5]


class CategoryArticleListView(ArticleListView):
    """List articles in a specific category."""

    template_name = "nextblog/article_list.html"

    def get_queryset(self):
        self.category = get_object_or_404(Category, slug=self.kwargs["slug"])
        return self.article_service.published(category_id=self.category.pk)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["category"] = self.category
        return context


class TagArticleListView(ArticleListView):
    """List articles with a specific tag."""

    template_name = "nextblog/article_list.html"

    def get_queryset(self):
        self.tag = get_object_or_404(Tag, slug=self.kwargs["slug"])
        return self.article_service.published(tag_id=self.tag.pk)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["tag"] = self.tag
        return context


class SearchView(ArticleListView):
    """Search published articles by title and content."""

    def get_queryset(self):
        self.query = self.request.GET.get("q", "").strip()
        if not self.query:
            return Article.objects.none()
        return self.article_service.matching(self.query)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["query"] = self.query
        return context


class PageDetailView(SiteContextMixin, DetailView):
    """Display a static page."""

    template_name = "nextblog/page_detail.html"
    context_object_name = "page"

    def get_queryset(self):
        return Page.objects.published()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["content_html"] = render_markdown(self.object.content).html
        return context


class KnowledgeIndexView(SiteContextMixin, TemplateView):
    """Knowledge base table of contents."""

    template_name = "nextblog/knowledge_index.html"
    knowledge_service = KnowledgeService()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["tree"] = self.knowledge_service.get_tree()
        return context


class KnowledgeDetailView(SiteContextMixin, DetailView):
    """Display a knowledge base document."""

    template_name = "nextblog/knowledge_detail.html"
    context_object_name = "doc"
    model = KnowledgeDoc

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        rendered = render_markdown(self.object.content)
        context["content_html"] = rendered.html
        context["toc"] = rendered.toc
        context["children"] = self.object.children.all()
        context["ancestors"] = self.object.get_ancestors()
        return context


class CommentCreateView(View):
    """Add a comment to an article."""

    comment_service = CommentService()

    def post(self, request, slug):
        article = get_object_or_404(Article.objects.published(), slug=slug)

        content = request.POST.get("content", "").strip()
        author_name = request.POST.get("author_name", "").strip()
        author_email = request.POST.get("author_email", "").strip()
        if not content or not author_name or not author_email:
            return JsonResponse({"error": "Name, email and comment are required"}, status=400)
        if len(content) > blog_settings.COMMENT_MAX_LENGTH:
            return JsonResponse({"error": "Comment is too long"}, status=400)

        parent_id = request.POST.get("parent_id", "").strip()
        if parent_id:
            if not parent_id.isdecimal():
                return JsonResponse({"error": "Invalid parent comment"}, status=400)
            get_object_or_404(Comment, pk=parent_id, article=article)

        comment = self.comment_service.create(
            article_id=article.pk,
            parent_id=parent_id or None,
            content=content,
            author_name=author_name,
            author_email=author_email,
            author_url=request.POST.get("author_url", "").strip(),
            ip_address=request.META.get("REMOTE_ADDR"),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

        if request.headers.get("Accept") == "application/json":
            return JsonResponse({
                "id": comment.pk,
                "content": comment.content,
                "author_name": comment.author_name,
                "created_at": comment.created_at.isoformat(),
                "status": comment.status,
            }, status=201)

        return redirect(article.get_absolute_url())
