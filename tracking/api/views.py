# tracking/api/views.py
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated

from tracking.models import Progress, NutritionPlan
from tracking.services.achievements import (
    NUTRITION_MILESTONES,
    WORKOUT_MILESTONES,
    evaluate_achievements,
    evaluate_milestones,
    next_milestone,
)
from tracking.services.dashboard_service import DashboardService
from tracking.services.nutrition_service import NutritionService
from .serializers import (
    ProgressSerializer,
    NutritionEntryInputSerializer,
    NutritionEntrySerializer,
    NutritionPlanSerializer,
    DashboardProgramSerializer,
)

logger = logging.getLogger(__name__)

RECENT_PROGRESS = 50


# ============================================================
# PROGRESS
# ============================================================

class ProgressView(APIView):
    """Log completed exercises and list the latest ones."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        progress = Progress.objects.filter(user=request.user).select_related("exercise")

        exercise_id = request.query_params.get("exerciseId")
        if exercise_id:
            progress = progress.filter(exercise_id=exercise_id)

        return Response(ProgressSerializer(progress[:RECENT_PROGRESS], many=True).data)

    def post(self, request):
        serializer = ProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        progress = serializer.save(user=request.user)

        logger.info(f"User {request.user.id} logged progress on exercise {progress.exercise_id}")
        return Response(ProgressSerializer(progress).data, status=status.HTTP_201_CREATED)


# ============================================================
# NUTRITION
# ============================================================

class NutritionEntryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        entries = NutritionService().recent_entries(request.user)
        return Response(NutritionEntrySerializer(entries, many=True).data)

    def post(self, request):
        serializer = NutritionEntryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        entry, created = NutritionService().save_entry(
            request.user,
            data["date"],
            calories=data.get("calories"),
            protein=data.get("protein"),
            completed=data["completed"],
        )

        payload = NutritionEntrySerializer(entry).data
        payload["nutrition_streak"] = request.user.nutrition_streak
        return Response(
            payload,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class NutritionPlanView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        plans = NutritionPlan.objects.filter(user=request.user)
        return Response(NutritionPlanSerializer(plans, many=True).data)

    def post(self, request):
        serializer = NutritionPlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


# ============================================================
# DASHBOARD
# ============================================================

class DashboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = DashboardService().build(request.user)

        return Response({
            "has_active_subscription": data.has_active_subscription,
            "programs": DashboardProgramSerializer(data.programs, many=True).data,
            "progress_by_program": data.progress_by_program,
            "trainer_programs": DashboardProgramSerializer(data.trainer_programs, many=True).data,
            "total_workouts": data.total_workouts,
            "total_active_programs": data.total_active_programs,
            "current_streak": data.current_streak,
            "nutrition_streak": data.nutrition_streak,
            "user_role": request.user.role,
        })


class AchievementsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = DashboardService().build(request.user)
        achievements = evaluate_achievements(data.total_workouts, data.total_active_programs)

        return Response({
            "achievements": achievements,
            "unlocked_count": sum(1 for a in achievements if a["unlocked"]),
            "total_count": len(achievements),
            "total_workouts": data.total_workouts,
            "total_active_programs": data.total_active_programs,
        })


class StreaksView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = DashboardService().build(request.user)

        return Response({
            "current_streak": data.current_streak,
            "nutrition_streak": data.nutrition_streak,
            "total_workouts": data.total_workouts,
            "workout_milestones": evaluate_milestones(data.current_streak, WORKOUT_MILESTONES),
            "nutrition_milestones": evaluate_milestones(data.nutrition_streak, NUTRITION_MILESTONES),
            "next_workout_milestone": next_milestone(data.current_streak, WORKOUT_MILESTONES),
            "next_nutrition_milestone": next_milestone(data.nutrition_streak, NUTRITION_MILESTONES),
        })
