from django.urls import path
from .views import verify_user_view

urlpatterns = [
    path("users/<uuid:user_id>/verify", verify_user_view, name="verify-user"),
]
