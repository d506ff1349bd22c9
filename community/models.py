# community/models.py

import uuid
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator


class Comment(models.Model):
    """
    Discussion on a program, optionally scoped to an exercise or video.
    Replies point at a top-level comment through `parent`.
    """

    class Meta:
        db_table = "community_comment"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["program", "parent", "created_at"], name="community_c_program_3a8e4f_idx"),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="comments"
    )
    program = models.ForeignKey("programs.Program", on_delete=models.CASCADE, related_name="comments")
    exercise = models.ForeignKey(
        "programs.Exercise",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="comments"
    )
    video = models.ForeignKey(
        "programs.Video",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="comments"
    )
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="replies"
    )
    text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} on {self.program_id}: {self.text[:40]}"


class Rating(models.Model):
    class Meta:
        db_table = "community_rating"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "program"], name="unique_rating_per_program")
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ratings"
    )
    program = models.ForeignKey("programs.Program", on_delete=models.CASCADE, related_name="ratings")
    score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    review = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} rated {self.program_id}: {self.score}"
