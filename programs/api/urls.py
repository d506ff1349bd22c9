# programs/api/urls.py

from django.urls import path

from .views import (
    ProgramListCreateView,
    ProgramDetailView,
    ProgramWorkoutsView,
    WorkoutDetailView,
    ProgramVideosView,
    TrainerProgramsView,
    EnrollmentListCreateView,
    FavoritesView,
    ProgramsStatusView,
)

app_name = "programs"

urlpatterns = [
    # Catalogue & authoring
    path("programs/", ProgramListCreateView.as_view(), name="program-list"),
    path("programs/<uuid:pk>/", ProgramDetailView.as_view(), name="program-detail"),
    path("programs/<uuid:pk>/workouts/", ProgramWorkoutsView.as_view(), name="program-workouts"),
    path("programs/<uuid:pk>/videos/", ProgramVideosView.as_view(), name="program-videos"),
    path("workouts/<uuid:pk>/", WorkoutDetailView.as_view(), name="workout-detail"),
    path("trainer/programs/", TrainerProgramsView.as_view(), name="trainer-programs"),

    # Enrollment
    path("enrollments/", EnrollmentListCreateView.as_view(), name="enrollments"),

    # Favorites & catalogue status
    path("user/favorites/", FavoritesView.as_view(), name="favorites"),
    path("user/programs-status/", ProgramsStatusView.as_view(), name="programs-status"),
]
