# tracking/api/serializers.py

from rest_framework import serializers

from programs.api.serializers import ProgramSerializer
from programs.models import Exercise
from tracking.models import Progress, NutritionEntry, NutritionPlan


class ProgressSerializer(serializers.ModelSerializer):
    exercise_id = serializers.PrimaryKeyRelatedField(
        source="exercise",
        queryset=Exercise.objects.all(),
    )
    exercise_name = serializers.CharField(source="exercise.name", read_only=True)
    workout_id = serializers.UUIDField(source="exercise.workout_id", read_only=True)

    class Meta:
        model = Progress
        fields = ["id", "exercise_id", "exercise_name", "workout_id", "weight", "notes", "completed_at"]
        read_only_fields = ["id", "completed_at"]
        extra_kwargs = {"notes": {"required": False, "allow_blank": True}}


class NutritionEntryInputSerializer(serializers.Serializer):
    date = serializers.CharField()
    calories = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    protein = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    completed = serializers.BooleanField(default=True)


class NutritionEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = NutritionEntry
        fields = ["id", "date", "calories", "protein", "completed", "created_at", "updated_at"]


class NutritionPlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = NutritionPlan
        fields = ["id", "title", "daily_calories", "protein_grams", "notes", "created_at"]
        read_only_fields = ["id", "created_at"]


class DashboardProgramSerializer(ProgramSerializer):
    workout_count = serializers.SerializerMethodField()

    class Meta(ProgramSerializer.Meta):
        fields = ProgramSerializer.Meta.fields + ["workout_count"]

    def get_workout_count(self, obj):
        annotated = getattr(obj, "workout_count", None)
        if annotated is not None:
            return annotated
        return obj.workouts.count()
