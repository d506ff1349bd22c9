# community/services/community_service.py

"""
COMMUNITY SERVICE

Comments and ratings on programs. Writing requires an active enrollment,
or being the program's trainer or an admin. Comments can be edited or
deleted by their author, the program's trainer or an admin.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Avg, Count

from community.models import Comment, Rating
from core.exceptions import NotFound, Unauthorized, ValidationError
from programs.models import Program, Enrollment
from programs.services.access import is_owner_or_admin
from users.services.session import SessionSnapshot

logger = logging.getLogger(__name__)

RECENT_RATINGS = 20


def get_program(program_id) -> Program:
    try:
        return Program.objects.get(pk=program_id)
    except (Program.DoesNotExist, DjangoValidationError):
        raise NotFound("Program not found")


def can_participate(user, program) -> bool:
    if is_owner_or_admin(SessionSnapshot.from_user(user), program):
        return True
    return Enrollment.objects.filter(user=user, program=program, active=True).exists()


def can_moderate(user, comment) -> bool:
    if comment.user_id == user.pk:
        return True
    return is_owner_or_admin(SessionSnapshot.from_user(user), comment.program)


class CommentService:

    def list_comments(self, program_id, exercise_id=None, video_id=None):
        """Top-level comments newest first, each with replies oldest first"""
        try:
            comments = Comment.objects.filter(
                program_id=program_id,
                exercise_id=exercise_id or None,
                video_id=video_id or None,
                parent__isnull=True,
            )
        except DjangoValidationError:
            raise ValidationError("Invalid program, exercise or video id")

        return comments.select_related("user").order_by("-created_at")

    def create_comment(self, user, program_id, text, exercise_id=None, video_id=None, parent_id=None):
        text = (text or "").strip()
        if not text or not program_id:
            raise ValidationError("Text and program ID are required")

        program = get_program(program_id)
        if not can_participate(user, program):
            raise Unauthorized("You must be enrolled in this program to comment")

        parent = None
        if parent_id:
            try:
                parent = Comment.objects.filter(pk=parent_id, program=program).first()
            except DjangoValidationError:
                parent = None
            if parent is None:
                raise NotFound("Parent comment not found")

        comment = Comment.objects.create(
            user=user,
            program=program,
            exercise_id=exercise_id or None,
            video_id=video_id or None,
            parent=parent,
            text=text,
        )
        logger.info(f"User {user.pk} commented on program {program.pk}")
        return comment

    def get_for_moderation(self, user, comment_id) -> Comment:
        try:
            comment = Comment.objects.select_related("program").get(pk=comment_id)
        except Comment.DoesNotExist:
            raise NotFound("Comment not found")

        if not can_moderate(user, comment):
            raise Unauthorized("Forbidden")
        return comment

    def update_comment(self, user, comment_id, text):
        text = (text or "").strip()
        if not text:
            raise ValidationError("Missing text")

        comment = self.get_for_moderation(user, comment_id)
        comment.text = text
        comment.save(update_fields=["text", "updated_at"])
        return comment

    def delete_comment(self, user, comment_id):
        comment = self.get_for_moderation(user, comment_id)
        comment.delete()
        logger.info(f"Comment {comment_id} deleted by user {user.pk}")


class RatingService:

    def summary(self, program_id) -> dict:
        try:
            ratings = Rating.objects.filter(program_id=program_id)
        except DjangoValidationError:
            raise ValidationError("Invalid program id")
        agg = ratings.aggregate(average=Avg("score"), count=Count("id"))

        return {
            "average": agg["average"],
            "count": agg["count"] or 0,
            "recent": ratings.select_related("user").order_by("-created_at")[:RECENT_RATINGS],
        }

    @transaction.atomic
    def rate(self, user, program_id, score, review=None):
        """Create or replace the caller's rating. Returns (rating, created)."""
        if not program_id or score in (None, ""):
            raise ValidationError("Missing fields")

        try:
            score = int(score)
        except (TypeError, ValueError):
            raise ValidationError("Score must be 1-5")
        if score < 1 or score > 5:
            raise ValidationError("Score must be 1-5")

        program = get_program(program_id)
        if not can_participate(user, program):
            raise Unauthorized("Must be enrolled to rate")

        rating, created = Rating.objects.update_or_create(
            user=user,
            program=program,
            defaults={"score": score, "review": review or None},
        )
        return rating, created
