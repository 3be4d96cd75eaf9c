from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("apps.authentication.urls")),
    path("api/admin/", include("apps.authentication.admin_urls")),
    path("api/", include("apps.listings.urls")),
    path("api/", include("apps.inspections.urls")),
    path("api/", include("apps.notifications.urls")),
    path("api/upload/", include("apps.uploads.urls")),
]
