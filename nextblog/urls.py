"""
URL configuration for django-nextblog.

Include in your project urls.py:

    path('blog/', include('nextblog.urls')),
"""
from django.urls import path

from . import views

app_name = "nextblog"

# Slugs may hold non-ASCII characters, so they are matched as <str:slug>.
urlpatterns = [
    # Articles
    path("", views.ArticleListView.as_view(), name="article_list"),
    path("article/<str:slug>/", views.ArticleDetailView.as_view(), name="article_detail"),
    path("article/<str:slug>/comment/", views.CommentCreateView.as_view(), name="comment_create"),

    # Categories and tags
    path("category/<str:slug>/", views.CategoryArticleListView.as_view(), name="category_detail"),
    path("tag/<str:slug>/", views.TagArticleListView.as_view(), name="tag_detail"),

    # Pages
    path("page/<str:slug>/", views.PageDetailView.as_view(), name="page_detail"),

    # Knowledge base
    path("knowledge/", views.KnowledgeIndexView.as_view(), name="knowledge_index"),
    path("knowledge/<str:slug>/", views.KnowledgeDetailView.as_view(), name="knowledge_detail"),

    # Search
    path("search/", views.SearchView.as_view(), name="search"),
]
