# programs/models.py

import uuid
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator


class Program(models.Model):
    """
    Fitness course authored by a trainer.

    Only published programs are browsable by non-owners.
    """

    class Level(models.TextChoices):
        BEGINNER = 'Beginner', 'Beginner'
        INTERMEDIATE = 'Intermediate', 'Intermediate'
        ADVANCED = 'Advanced', 'Advanced'

    class Meta:
        db_table = 'programs_program'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['trainer', 'published'], name='programs_pr_trainer_6f1b2c_idx'),
            models.Index(fields=['published', 'created_at'], name='programs_pr_publish_9a3d4e_idx'),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    trainer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='trainer_programs'
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    level = models.CharField(max_length=20, choices=Level.choices, default=Level.BEGINNER)

    # Duration in weeks
    duration = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(52)],
        default=4
    )
    image_url = models.URLField(blank=True)

    published = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} by {self.trainer}"


class Workout(models.Model):
    """One session of a program, made of exercises"""

    class Meta:
        db_table = 'programs_workout'
        ordering = ['order', 'day']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name='workouts')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    day = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.program.title} / {self.title}"


class Exercise(models.Model):
    class Meta:
        db_table = 'programs_exercise'
        ordering = ['order']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    workout = models.ForeignKey(Workout, on_delete=models.CASCADE, related_name='exercises')
    name = models.CharField(max_length=255)
    sets = models.PositiveIntegerField(default=3)
    reps = models.CharField(max_length=50, blank=True)
    rest_seconds = models.PositiveIntegerField(default=60)
    video_url = models.URLField(blank=True)
    order = models.PositiveIntegerField(default=0)

    def __str__(self):
        return self.name


class Video(models.Model):
    """Exercise or preview video attached to a program"""

    class Meta:
        db_table = 'programs_video'
        ordering = ['created_at']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name='videos')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    url = models.URLField()
    thumbnail = models.URLField(blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='uploaded_videos'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title


class CoursePart(models.Model):
    """Chapter of the course outline"""

    class Meta:
        db_table = 'programs_course_part'
        ordering = ['order']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name='parts')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    order = models.PositiveIntegerField(default=0)


class CourseSection(models.Model):
    class MediaType(models.TextChoices):
        VIDEO = 'video', 'Video'
        ARTICLE = 'article', 'Article'
        PDF = 'pdf', 'PDF'

    class Meta:
        db_table = 'programs_course_section'
        ordering = ['order']

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    part = models.ForeignKey(CoursePart, on_delete=models.CASCADE, related_name='sections')
    title = models.CharField(max_length=255)
    url = models.URLField()
    media_type = models.CharField(max_length=20, choices=MediaType.choices, default=MediaType.VIDEO)
    order = models.PositiveIntegerField(default=0)


class Enrollment(models.Model):
    """
    Explicit per-program access grant.

    Predates the membership model; an active subscription grants access to
    every published program regardless of enrollments.
    """

    class Meta:
        db_table = 'programs_enrollment'
        ordering = ['-start_date']
        constraints = [
            models.UniqueConstraint(fields=['user', 'program'], name='unique_enrollment_per_program')
        ]
        indexes = [
            models.Index(fields=['user', 'active'], name='programs_en_user_id_2c7e8a_idx'),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='enrollments'
    )
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name='enrollments')
    active = models.BooleanField(default=True)
    start_date = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} -> {self.program.title}"


class Favorite(models.Model):
    """Program bookmarked by a member"""

    class Meta:
        db_table = 'programs_favorite'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'program'], name='unique_favorite_per_program')
        ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='favorites'
    )
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name='favorited_by')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} * {self.program.title}"
