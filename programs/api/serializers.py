# programs/api/serializers.py

"""
PROGRAM SERIALIZERS

Catalogue listing, trainer authoring input and the program detail payload.
The detail payload follows the access decision: full content for
owner/subscriber/enrolled callers, a teaser otherwise.
"""

from rest_framework import serializers

from programs.models import (
    Program,
    Workout,
    Exercise,
    Video,
    CoursePart,
    CourseSection,
    Enrollment,
)
from programs.services.access import AccessDecision


class TrainerSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    image = serializers.CharField()


class ProgramSerializer(serializers.ModelSerializer):
    trainer = TrainerSummarySerializer(read_only=True)
    enrollment_count = serializers.SerializerMethodField()

    class Meta:
        model = Program
        fields = [
            "id",
            "title",
            "description",
            "level",
            "duration",
            "image_url",
            "published",
            "trainer",
            "enrollment_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "trainer", "created_at", "updated_at"]

    def get_enrollment_count(self, obj):
        annotated = getattr(obj, "enrollment_count", None)
        if annotated is not None:
            return annotated
        return obj.enrollments.count()


class ProgramUpdateSerializer(serializers.ModelSerializer):
    """Owner edits, including the publish toggle"""

    class Meta:
        model = Program
        fields = ["title", "description", "level", "duration", "image_url", "published"]


class CourseSectionInputSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, allow_blank=True)
    url = serializers.CharField(required=False, allow_blank=True)
    media_type = serializers.ChoiceField(
        choices=CourseSection.MediaType.choices,
        required=False,
    )


class CoursePartInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    sections = CourseSectionInputSerializer(many=True, required=False)


class ProgramCreateSerializer(serializers.ModelSerializer):
    video_url = serializers.URLField(required=False, allow_blank=True, write_only=True)
    parts = CoursePartInputSerializer(many=True, required=False, write_only=True)

    class Meta:
        model = Program
        fields = ["title", "description", "level", "duration", "image_url", "video_url", "parts"]


class ExerciseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Exercise
        fields = ["id", "name", "sets", "reps", "rest_seconds", "video_url", "order"]
        read_only_fields = ["id", "order"]


class WorkoutSerializer(serializers.ModelSerializer):
    exercises = ExerciseSerializer(many=True, required=False)

    class Meta:
        model = Workout
        fields = ["id", "title", "description", "day", "order", "exercises"]
        read_only_fields = ["id"]


class WorkoutDetailSerializer(WorkoutSerializer):
    """Single workout with the program it belongs to"""
    program = ProgramSerializer(read_only=True)

    class Meta(WorkoutSerializer.Meta):
        fields = WorkoutSerializer.Meta.fields + ["program"]


class VideoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Video
        fields = ["id", "title", "description", "url", "thumbnail", "created_at"]


class CourseSectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CourseSection
        fields = ["id", "title", "url", "media_type", "order"]


class CoursePartSerializer(serializers.ModelSerializer):
    sections = CourseSectionSerializer(many=True, read_only=True)

    class Meta:
        model = CoursePart
        fields = ["id", "name", "description", "order", "sections"]


class EnrollmentSerializer(serializers.ModelSerializer):
    program = ProgramSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = ["id", "program", "active", "start_date"]


# =========================
# DETAIL PAYLOAD
# =========================

CALLS_TO_ACTION = {
    AccessDecision.LOCKED: {
        "action": "subscribe",
        "message": "Subscribe to unlock every workout in this program.",
        "url": "/api/checkout/",
    },
    AccessDecision.ANONYMOUS: {
        "action": "sign_in",
        "message": "Sign in to start this program.",
        "url": "/api/auth/token/",
    },
}


def build_program_payload(program, decision):
    """
    Program detail for one caller.

    Locked and anonymous callers get counts and the outline's part names,
    never workouts, videos or section urls.
    """
    data = ProgramSerializer(program).data
    full = decision.grants_full_content

    data.update({
        "access": decision.value,
        "has_full_access": full,
        "locked": not full,
        "workout_count": program.workouts.count(),
        "video_count": program.videos.count(),
        "call_to_action": CALLS_TO_ACTION.get(decision),
    })

    if full:
        data["workouts"] = WorkoutSerializer(
            program.workouts.prefetch_related("exercises"), many=True
        ).data
        data["videos"] = VideoSerializer(program.videos.all(), many=True).data
        data["outline"] = CoursePartSerializer(
            program.parts.prefetch_related("sections"), many=True
        ).data
    else:
        data["workouts"] = []
        data["videos"] = []
        data["outline"] = [{"name": part.name} for part in program.parts.all()]

    return data
