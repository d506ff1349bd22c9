# tracking/admin.py

from django.contrib import admin
from .models import Progress, NutritionEntry, NutritionPlan


@admin.register(Progress)
class ProgressAdmin(admin.ModelAdmin):
    list_display = ["user", "exercise", "weight", "completed_at"]
    search_fields = ["user__email", "exercise__name"]
    ordering = ["-completed_at"]


@admin.register(NutritionEntry)
class NutritionEntryAdmin(admin.ModelAdmin):
    list_display = ["user", "date", "calories", "protein", "completed"]
    list_filter = ["completed", "date"]
    search_fields = ["user__email"]
    ordering = ["-date"]


@admin.register(NutritionPlan)
class NutritionPlanAdmin(admin.ModelAdmin):
    list_display = ["title", "user", "daily_calories", "protein_grams", "created_at"]
    search_fields = ["title", "user__email"]
