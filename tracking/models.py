# tracking/models.py

import uuid
from django.db import models
from django.conf import settings


class Progress(models.Model):
    """One completed exercise set, optionally with the weight used"""

    class Meta:
        db_table = "tracking_progress"
        ordering = ["-completed_at"]
        indexes = [
            models.Index(fields=["user", "completed_at"], name="tracking_pr_user_id_5e3f1a_idx"),
            models.Index(fields=["user", "exercise"], name="tracking_pr_user_id_7c9b2d_idx"),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="progress"
    )
    exercise = models.ForeignKey(
        "programs.Exercise",
        on_delete=models.CASCADE,
        related_name="progress"
    )
    weight = models.FloatField(null=True, blank=True)
    notes = models.TextField(blank=True)
    completed_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} - {self.exercise} @ {self.completed_at:%Y-%m-%d}"


class NutritionEntry(models.Model):
    """Daily nutrition log; one row per user per UTC day"""

    class Meta:
        db_table = "tracking_nutrition_entry"
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(fields=["user", "date"], name="unique_nutrition_entry_per_day")
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="nutrition_entries"
    )
    date = models.DateField()
    calories = models.PositiveIntegerField(null=True, blank=True)
    protein = models.PositiveIntegerField(null=True, blank=True)
    completed = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} {self.date}"


class NutritionPlan(models.Model):
    class Meta:
        db_table = "tracking_nutrition_plan"
        ordering = ["-created_at"]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="nutrition_plans"
    )
    title = models.CharField(max_length=255)
    daily_calories = models.PositiveIntegerField(null=True, blank=True)
    protein_grams = models.PositiveIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title
