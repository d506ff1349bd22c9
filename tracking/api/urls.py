# tracking/api/urls.py
from django.urls import path

from .views import (
    ProgressView,
    NutritionEntryView,
    NutritionPlanView,
    DashboardView,
    AchievementsView,
    StreaksView,
)

app_name = "tracking"

urlpatterns = [
    path("progress/", ProgressView.as_view(), name="progress"),

    # Nutrition
    path("nutrition/", NutritionEntryView.as_view(), name="nutrition"),
    path("nutrition/plans/", NutritionPlanView.as_view(), name="nutrition-plans"),

    # Dashboard
    path("dashboard/", DashboardView.as_view(), name="dashboard"),
    path("dashboard/achievements/", AchievementsView.as_view(), name="achievements"),
    path("dashboard/streaks/", StreaksView.as_view(), name="streaks"),
]
