"""URL configuration for the cPOP backend."""

from django.conf import settings
from django.contrib import admin
from django.urls import include, path

from api.api import api

admin.site.site_header = f"{settings.SITE_NAME} v{settings.VERSION}"
admin.site.site_title = f"{settings.SITE_NAME} Admin"

urlpatterns = [
    path("api/", api.urls),
    path("", include("django_prometheus.urls")),  # Prometheus metrics endpoint at /metrics
]

if settings.ADMIN_URL:  # pragma: no cover
    urlpatterns.insert(1, path(settings.ADMIN_URL, admin.site.urls))
