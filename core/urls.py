# core/urls.py

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

handler404 = "core.views.custom_404"
handler500 = "core.views.custom_500"

urlpatterns = [
    path("admin/", admin.site.urls),

    # Accounts & JWT session
    path("api/auth/", include("users.api.urls")),

    # Catalogue, enrollment, trainer authoring
    path("api/", include("programs.api.urls")),

    # Stripe checkout, confirmation, webhooks
    path("api/", include("billing.api.urls")),

    # Progress, nutrition, dashboard, achievements
    path("api/", include("tracking.api.urls")),

    # Comments & ratings
    path("api/", include("community.api.urls")),

    # Admin console
    path("api/admin/", include("admin_moderation.api.urls")),

    # API Documentation (Swagger/ReDoc)
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    # Health checks
    path("health/", include("core.health_urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
