from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .views import register_view, login_view, logout_view, me_view

urlpatterns = [
    path("register", register_view, name="register"),
    path("login", login_view, name="login"),
    path("refresh", TokenRefreshView.as_view(), name="token_refresh"),
    path("logout", logout_view, name="logout"),
    path("me", me_view, name="me"),
]
