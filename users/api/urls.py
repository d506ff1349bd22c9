# users/api/urls.py
from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views import SignupView, SessionRefreshView, MeView

app_name = "users"

urlpatterns = [
    # Accounts
    path("signup/", SignupView.as_view(), name="signup"),
    path("me/", MeView.as_view(), name="me"),

    # JWT
    path("token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("session/refresh/", SessionRefreshView.as_view(), name="session-refresh"),
]
