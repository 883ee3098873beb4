"""
URL configuration for the chat service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/chat/                  - Chat endpoints (see chat/urls.py)
        chats/                     - My chats / create group
        chats/direct/              - Get or create direct chat
        chats/groups/              - Groups I created
        chats/{id}/                - Details / rename / delete
        chats/{id}/members/        - Add members
        chats/{id}/members/{user}/ - Remove member
        chats/{id}/leave/          - Leave group
        chats/{id}/messages/       - Message feed / send text
        chats/{id}/attachments/    - Send attachments

WebSocket routes live in chat/routing.py and are mounted in config/asgi.py.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

api_v1_patterns = [
    path("chat/", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

# Serve uploaded attachments in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Chats, messages and users"
