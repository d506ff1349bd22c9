# programs/api/views.py

"""
PROGRAM API VIEWS

Catalogue browsing, trainer authoring, enrollment and favorites.
Content visibility is decided by programs.services.access; writes are
limited to the program's trainer and admins by IsOwnerOrAdmin.
"""

import logging

from django.db.models import Count
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny

from core.exceptions import NotFound, Unauthorized
from core.permissions import IsTrainerOrAdmin, IsOwnerOrAdmin
from programs.models import Program, Workout, Enrollment
from programs.services.access import decide_for_request, has_active_subscription, is_owner_or_admin
from programs.services.program_service import ProgramService
from users.services.session import SessionSnapshot, load_subscription_snapshot
from .serializers import (
    ProgramSerializer,
    ProgramCreateSerializer,
    ProgramUpdateSerializer,
    WorkoutSerializer,
    WorkoutDetailSerializer,
    VideoSerializer,
    EnrollmentSerializer,
    build_program_payload,
)

logger = logging.getLogger(__name__)


def ensure_visible(request, program):
    """Unpublished programs exist only for their trainer and admins."""
    if not program.published:
        session = SessionSnapshot.from_request(request)
        if not is_owner_or_admin(session, program):
            raise NotFound("Program not found")


def get_visible_program(request, pk):
    try:
        program = Program.objects.select_related("trainer").get(pk=pk)
    except Program.DoesNotExist:
        raise NotFound("Program not found")

    ensure_visible(request, program)
    return program


def get_visible_workout(request, pk):
    try:
        workout = Workout.objects.select_related("program", "program__trainer").get(pk=pk)
    except Workout.DoesNotExist:
        raise NotFound("Workout not found")

    ensure_visible(request, workout.program)
    return workout


class OwnerWriteMixin:
    """Anyone may read; writes need the program's trainer or an admin."""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated(), IsOwnerOrAdmin()]


# ============================================================
# CATALOGUE
# ============================================================

class ProgramListCreateView(APIView):
    """List published programs; trainers create new ones."""

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsTrainerOrAdmin()]
        return [AllowAny()]

    def get(self, request):
        programs = (
            Program.objects.filter(published=True)
            .select_related("trainer")
            .annotate(enrollment_count=Count("enrollments"))
        )
        level = request.query_params.get("level")
        if level:
            programs = programs.filter(level=level)

        return Response(ProgramSerializer(programs, many=True).data)

    def post(self, request):
        serializer = ProgramCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        video_url = data.pop("video_url", "")
        parts = data.pop("parts", None)

        program = ProgramService().create_program(
            trainer=request.user,
            data=data,
            video_url=video_url,
            parts=parts,
        )

        return Response(ProgramSerializer(program).data, status=status.HTTP_201_CREATED)


class ProgramDetailView(OwnerWriteMixin, APIView):
    """Program detail shaped by the caller's access; owners edit and delete."""

    def get(self, request, pk):
        program = get_visible_program(request, pk)
        decision = decide_for_request(request, program)
        return Response(build_program_payload(program, decision))

    def patch(self, request, pk):
        program = get_visible_program(request, pk)
        self.check_object_permissions(request, program)

        serializer = ProgramUpdateSerializer(program, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        logger.info(f"Program {program.id} updated by user {request.user.id}")
        return Response(ProgramSerializer(program).data)

    def delete(self, request, pk):
        program = get_visible_program(request, pk)
        self.check_object_permissions(request, program)

        program.delete()
        logger.info(f"Program {pk} deleted by user {request.user.id}")
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProgramWorkoutsView(OwnerWriteMixin, APIView):
    """Workouts of a program; only callers with full access may read them."""

    def get(self, request, pk):
        program = get_visible_program(request, pk)
        decision = decide_for_request(request, program)
        if not decision.grants_full_content:
            raise Unauthorized("Subscribe or enroll to see the workouts of this program.")

        workouts = program.workouts.prefetch_related("exercises")
        return Response(WorkoutSerializer(workouts, many=True).data)

    def post(self, request, pk):
        program = get_visible_program(request, pk)
        self.check_object_permissions(request, program)

        serializer = WorkoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        exercises = data.pop("exercises", [])
        workout = ProgramService().add_workout(program, data, exercises)

        return Response(WorkoutSerializer(workout).data, status=status.HTTP_201_CREATED)


class WorkoutDetailView(OwnerWriteMixin, APIView):
    """A single workout; the program's trainer or an admin edit and delete it."""

    def get(self, request, pk):
        workout = get_visible_workout(request, pk)
        decision = decide_for_request(request, workout.program)
        if not decision.grants_full_content:
            raise Unauthorized("Subscribe or enroll to see the workouts of this program.")

        return Response(WorkoutDetailSerializer(workout).data)

    def put(self, request, pk):
        workout = get_visible_workout(request, pk)
        self.check_object_permissions(request, workout)

        serializer = WorkoutSerializer(workout, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        exercises = data.pop("exercises", None)
        workout = ProgramService().update_workout(workout, data, exercises)

        return Response(WorkoutSerializer(workout).data)

    patch = put

    def delete(self, request, pk):
        workout = get_visible_workout(request, pk)
        self.check_object_permissions(request, workout)

        ProgramService().delete_workout(workout)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProgramVideosView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk):
        program = get_visible_program(request, pk)
        decision = decide_for_request(request, program)
        if not decision.grants_full_content:
            raise Unauthorized("Subscribe or enroll to watch the videos of this program.")

        return Response(VideoSerializer(program.videos.all(), many=True).data)


class TrainerProgramsView(APIView):
    """The caller's own programs, published or not."""
    permission_classes = [IsTrainerOrAdmin]

    def get(self, request):
        programs = (
            Program.objects.filter(trainer=request.user)
            .select_related("trainer")
            .annotate(
                enrollment_count=Count("enrollments", distinct=True),
                workout_count=Count("workouts", distinct=True),
            )
        )

        data = []
        for program in programs:
            item = ProgramSerializer(program).data
            item["workout_count"] = program.workout_count
            data.append(item)

        return Response(data)


# ============================================================
# ENROLLMENT
# ============================================================

class EnrollmentListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        enrollments = (
            Enrollment.objects.filter(user=request.user, active=True)
            .select_related("program", "program__trainer")
        )
        return Response(EnrollmentSerializer(enrollments, many=True).data)

    def post(self, request):
        program_id = request.data.get("programId") or request.data.get("program_id")
        if not program_id:
            return Response(
                {"success": False, "message": "programId is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        result = ProgramService().enroll(request.user, program_id)

        if not result.success:
            return Response(
                {"success": False, "message": result.error_message},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            EnrollmentSerializer(result.enrollment).data,
            status=status.HTTP_201_CREATED,
        )


# ============================================================
# FAVORITES & STATUS
# ============================================================

class FavoritesView(APIView):
    """The caller's favorite programs; POST {programId, action: add|remove}."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        programs = (
            Program.objects.filter(favorited_by__user=request.user, published=True)
            .select_related("trainer")
        )
        return Response({
            "favoriteProgramIds": ProgramService().favorite_program_ids(request.user),
            "programs": ProgramSerializer(programs, many=True).data,
        })

    def post(self, request):
        program_id = request.data.get("programId")
        action = request.data.get("action")
        if not program_id or action not in ("add", "remove"):
            return Response(
                {"success": False, "message": "Invalid request data"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        favorites = ProgramService().set_favorite(request.user, program_id, favorite=action == "add")
        return Response({"success": True, "favorites": favorites})


class ProgramsStatusView(APIView):
    """Enrollment, favorite and membership flags for decorating the catalogue."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        enrolled = Enrollment.objects.filter(user=request.user, active=True).values_list(
            "program_id", flat=True
        )

        snapshot = load_subscription_snapshot(request.user.pk)
        if snapshot is None:
            snapshot = SessionSnapshot.from_request(request)

        return Response({
            "enrolledProgramIds": [str(program_id) for program_id in enrolled],
            "favoriteProgramIds": ProgramService().favorite_program_ids(request.user),
            "hasActiveSubscription": has_active_subscription(snapshot),
        })
