import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("programs", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Progress",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("weight", models.FloatField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("completed_at", models.DateTimeField(auto_now_add=True)),
                ("exercise", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="progress", to="programs.exercise")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="progress", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "tracking_progress",
                "ordering": ["-completed_at"],
                "indexes": [
                    models.Index(fields=["user", "completed_at"], name="tracking_pr_user_id_5e3f1a_idx"),
                    models.Index(fields=["user", "exercise"], name="tracking_pr_user_id_7c9b2d_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="NutritionEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField()),
                ("calories", models.PositiveIntegerField(blank=True, null=True)),
                ("protein", models.PositiveIntegerField(blank=True, null=True)),
                ("completed", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="nutrition_entries", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "tracking_nutrition_entry",
                "ordering": ["-date"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "date"), name="unique_nutrition_entry_per_day"),
                ],
            },
        ),
        migrations.CreateModel(
            name="NutritionPlan",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("daily_calories", models.PositiveIntegerField(blank=True, null=True)),
                ("protein_grams", models.PositiveIntegerField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="nutrition_plans", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "tracking_nutrition_plan",
                "ordering": ["-created_at"],
            },
        ),
    ]
