# admin_moderation/api/urls.py
from django.urls import path

from .views import (
    AdminUsersView,
    AdminUserRoleView,
    AdminUserSubscriptionView,
    AdminUserEnrollmentsView,
    AdminEnrollmentDetailView,
    AdminProgramsView,
    AdminReportsView,
    AdminAuditLogView,
    AdminSubscriptionSetupView,
    AdminProductsView,
)

app_name = "admin_moderation"

urlpatterns = [
    # Users
    path("users/", AdminUsersView.as_view(), name="users"),
    path("users/<int:user_id>/role/", AdminUserRoleView.as_view(), name="user-role"),
    path("users/<int:user_id>/subscription/", AdminUserSubscriptionView.as_view(), name="user-subscription"),
    path("users/<int:user_id>/enrollments/", AdminUserEnrollmentsView.as_view(), name="user-enrollments"),
    path("enrollments/<uuid:pk>/", AdminEnrollmentDetailView.as_view(), name="enrollment-detail"),

    # Catalogue & reporting
    path("programs/", AdminProgramsView.as_view(), name="programs"),
    path("reports/", AdminReportsView.as_view(), name="reports"),
    path("audit-log/", AdminAuditLogView.as_view(), name="audit-log"),
    path("subscription/setup/", AdminSubscriptionSetupView.as_view(), name="subscription-setup"),
    path("products/", AdminProductsView.as_view(), name="products"),
]
