import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Program",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("level", models.CharField(choices=[("Beginner", "Beginner"), ("Intermediate", "Intermediate"), ("Advanced", "Advanced")], default="Beginner", max_length=20)),
                ("duration", models.PositiveIntegerField(default=4, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(52)])),
                ("image_url", models.URLField(blank=True)),
                ("published", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("trainer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="trainer_programs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "programs_program",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["trainer", "published"], name="programs_pr_trainer_6f1b2c_idx"),
                    models.Index(fields=["published", "created_at"], name="programs_pr_publish_9a3d4e_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Workout",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("day", models.PositiveIntegerField(default=1)),
                ("order", models.PositiveIntegerField(default=0)),
                ("program", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="workouts", to="programs.program")),
            ],
            options={
                "db_table": "programs_workout",
                "ordering": ["order", "day"],
            },
        ),
        migrations.CreateModel(
            name="Exercise",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("sets", models.PositiveIntegerField(default=3)),
                ("reps", models.CharField(blank=True, max_length=50)),
                ("rest_seconds", models.PositiveIntegerField(default=60)),
                ("video_url", models.URLField(blank=True)),
                ("order", models.PositiveIntegerField(default=0)),
                ("workout", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exercises", to="programs.workout")),
            ],
            options={
                "db_table": "programs_exercise",
                "ordering": ["order"],
            },
        ),
        migrations.CreateModel(
            name="Video",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("url", models.URLField()),
                ("thumbnail", models.URLField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("program", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="videos", to="programs.program")),
                ("uploaded_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="uploaded_videos", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "programs_video",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="CoursePart",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("order", models.PositiveIntegerField(default=0)),
                ("program", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="parts", to="programs.program")),
            ],
            options={
                "db_table": "programs_course_part",
                "ordering": ["order"],
            },
        ),
        migrations.CreateModel(
            name="CourseSection",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("url", models.URLField()),
                ("media_type", models.CharField(choices=[("video", "Video"), ("article", "Article"), ("pdf", "PDF")], default="video", max_length=20)),
                ("order", models.PositiveIntegerField(default=0)),
                ("part", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sections", to="programs.coursepart")),
            ],
            options={
                "db_table": "programs_course_section",
                "ordering": ["order"],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("active", models.BooleanField(default=True)),
                ("start_date", models.DateTimeField(auto_now_add=True)),
                ("program", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="enrollments", to="programs.program")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="enrollments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "programs_enrollment",
                "ordering": ["-start_date"],
                "indexes": [
                    models.Index(fields=["user", "active"], name="programs_en_user_id_2c7e8a_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "program"), name="unique_enrollment_per_program"),
                ],
            },
        ),
    ]
