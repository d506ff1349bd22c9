# programs/services/program_service.py

"""
PROGRAM SERVICE

Trainer authoring and member enrollment:
1. Create a program (unpublished) with optional preview video and outline
2. Add workouts with their exercises
3. Edit or remove a single workout
4. Enroll a member in a published program
5. Keep a member's favorite programs
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, IntegrityError

from core.exceptions import NotFound
from programs.models import (
    Program,
    Workout,
    Exercise,
    Video,
    CoursePart,
    CourseSection,
    Enrollment,
    Favorite,
)

logger = logging.getLogger(__name__)


@dataclass
class EnrollmentResult:
    """Result of an enrollment attempt"""
    success: bool
    enrollment: Optional[Enrollment] = None
    error_message: Optional[str] = None


class ProgramService:
    """Service for program authoring and enrollment"""

    @transaction.atomic
    def create_program(self, trainer, data: dict, video_url: str = "", parts=None) -> Program:
        """
        Create a program owned by `trainer`.

        Programs start unpublished. Parts without a name and sections without
        a title or url are skipped.
        """
        program = Program.objects.create(trainer=trainer, published=False, **data)

        if video_url:
            try:
                with transaction.atomic():
                    Video.objects.create(
                        program=program,
                        title=f"{program.title} - Preview",
                        description=f"{program.title} preview video",
                        url=video_url,
                        thumbnail=data.get("image_url", ""),
                        uploaded_by=trainer,
                    )
            except IntegrityError as exc:
                # Preview is optional; the program itself is kept
                logger.error(f"Failed to create preview video for program {program.id}: {exc}")

        for part_index, part in enumerate(parts or []):
            if not part.get("name"):
                continue

            created_part = CoursePart.objects.create(
                program=program,
                name=part["name"],
                description=part.get("description") or "",
                order=part_index,
            )

            for section_index, section in enumerate(part.get("sections") or []):
                if not section.get("title") or not section.get("url"):
                    continue
                CourseSection.objects.create(
                    part=created_part,
                    title=section["title"],
                    url=section["url"],
                    media_type=section.get("media_type") or CourseSection.MediaType.VIDEO,
                    order=section_index,
                )

        logger.info(f"Program {program.id} created by trainer {trainer.id}")
        return program

    @transaction.atomic
    def add_workout(self, program: Program, data: dict, exercises=None) -> Workout:
        """Add a workout and its exercises, keeping the given exercise order"""
        if "order" not in data:
            data = {**data, "order": program.workouts.count()}
        workout = Workout.objects.create(program=program, **data)

        for index, exercise in enumerate(exercises or []):
            Exercise.objects.create(workout=workout, order=index, **exercise)

        return workout

    @transaction.atomic
    def update_workout(self, workout: Workout, data: dict, exercises=None) -> Workout:
        """Update workout fields; a given exercise list replaces the old one"""
        for name, value in data.items():
            setattr(workout, name, value)
        workout.save()

        if exercises is not None:
            workout.exercises.all().delete()
            for index, exercise in enumerate(exercises):
                Exercise.objects.create(workout=workout, order=index, **exercise)

        logger.info(f"Workout {workout.id} updated in program {workout.program_id}")
        return workout

    def delete_workout(self, workout: Workout):
        workout_id, program_id = workout.id, workout.program_id
        workout.delete()
        logger.info(f"Workout {workout_id} deleted from program {program_id}")

    def enroll(self, user, program_id) -> EnrollmentResult:
        """Enroll `user` in a published program"""
        try:
            program = Program.objects.get(id=program_id, published=True)
        except (Program.DoesNotExist, DjangoValidationError):
            return EnrollmentResult(
                success=False,
                error_message="Program not found or not available"
            )

        if Enrollment.objects.filter(user=user, program=program).exists():
            return EnrollmentResult(
                success=False,
                error_message="Already enrolled in this program"
            )

        try:
            with transaction.atomic():
                enrollment = Enrollment.objects.create(user=user, program=program, active=True)
        except IntegrityError:
            # Concurrent request won the unique constraint
            return EnrollmentResult(
                success=False,
                error_message="Already enrolled in this program"
            )

        logger.info(f"User {user.id} enrolled in program {program.id}")
        return EnrollmentResult(success=True, enrollment=enrollment)

    def favorite_program_ids(self, user) -> list:
        return [
            str(program_id)
            for program_id in Favorite.objects.filter(user=user).values_list("program_id", flat=True)
        ]

    def set_favorite(self, user, program_id, favorite: bool) -> list:
        """
        Add or remove a favorite and return the caller's favorite ids.

        Only published programs can be added; removing a program that is not a favorite is a no-op.
        """
        if favorite:
            try:
                program = Program.objects.get(id=program_id, published=True)
            except (Program.DoesNotExist, DjangoValidationError):
                raise NotFound("Program not found")
            Favorite.objects.get_or_create(user=user, program=program)
        else:
            try:
                Favorite.objects.filter(user=user, program_id=program_id).delete()
            except DjangoValidationError:
                raise NotFound("Program not found")

        return self.favorite_program_ids(user)
