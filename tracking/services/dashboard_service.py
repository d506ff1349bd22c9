# tracking/services/dashboard_service.py

"""
DASHBOARD SERVICE

Aggregates a member's programs, progress and counters:
- subscribed members see every published program as an enrollment
- others see their active enrollments
- trainers and admins also get the programs they authored
"""

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError
from django.db.models import Count

from programs.services.access import has_active_subscription
from tracking.models import Progress
from tracking.services.achievements import evaluate_achievements
from tracking.services.streaks import consecutive_day_streak
from users.services.session import load_subscription_snapshot, SessionSnapshot

logger = logging.getLogger(__name__)


@dataclass
class DashboardData:
    has_active_subscription: bool = False
    programs: list = field(default_factory=list)
    progress_by_program: dict = field(default_factory=dict)
    trainer_programs: list = field(default_factory=list)
    total_workouts: int = 0
    total_active_programs: int = 0
    current_streak: int = 0
    nutrition_streak: int = 0


def program_progress(completed: int, total_exercises: int) -> dict:
    total = total_exercises or 1
    return {
        "completed": completed,
        "total": total,
        "percentage": round(completed / total * 100),
    }


class DashboardService:

    def is_subscribed(self, user) -> bool:
        snapshot = load_subscription_snapshot(user.pk)
        if snapshot is None:
            snapshot = SessionSnapshot.from_user(user)
        return has_active_subscription(snapshot)

    def visible_programs(self, user, subscribed: bool):
        from programs.models import Program

        programs = Program.objects.select_related("trainer").annotate(
            exercise_count=Count("workouts__exercises", distinct=True),
            enrollment_count=Count("enrollments", distinct=True),
        )
        if subscribed:
            return list(programs.filter(published=True))
        return list(programs.filter(enrollments__user=user, enrollments__active=True))

    def trainer_programs(self, user):
        from programs.models import Program

        if user.role not in ("TRAINER", "ADMIN"):
            return []
        return list(
            Program.objects.filter(trainer=user).annotate(
                enrollment_count=Count("enrollments", distinct=True),
                workout_count=Count("workouts", distinct=True),
            )
        )

    def build(self, user) -> DashboardData:
        data = DashboardData(nutrition_streak=user.nutrition_streak)

        try:
            data.has_active_subscription = self.is_subscribed(user)
            programs = self.visible_programs(user, data.has_active_subscription)

            progress_rows = list(
                Progress.objects.filter(user=user).values_list(
                    "exercise__workout__program_id", "completed_at"
                )
            )

            completed_by_program = {}
            for program_id, _ in progress_rows:
                completed_by_program[program_id] = completed_by_program.get(program_id, 0) + 1

            data.programs = programs
            data.progress_by_program = {
                str(p.id): program_progress(completed_by_program.get(p.id, 0), p.exercise_count)
                for p in programs
            }
            data.trainer_programs = self.trainer_programs(user)
            data.total_workouts = len(progress_rows)
            data.total_active_programs = len(programs)
            data.current_streak = consecutive_day_streak(
                completed_at for _, completed_at in progress_rows
            )
        except DatabaseError as exc:
            logger.error(f"Dashboard read failed for user {user.pk}: {exc}")

        return data

    def achievements(self, user):
        data = self.build(user)
        return evaluate_achievements(data.total_workouts, data.total_active_programs)
