from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import ListingViewSet, saved_properties

router = SimpleRouter(trailing_slash=False)
router.register(r"listings", ListingViewSet, basename="listing")

urlpatterns = [
    path("clients/<uuid:client_id>/saved-properties", saved_properties, name="client-saved-properties"),
    path("", include(router.urls)),
]
