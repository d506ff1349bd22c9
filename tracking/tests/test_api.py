"""
Progress logging, nutrition log, dashboard and achievements endpoints.
"""

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from programs.models import Program, Workout, Exercise, Enrollment
from tracking.models import Progress, NutritionEntry
from tracking.services.nutrition_service import NutritionService
from tracking.services.streaks import utc_today
from users.models import User


class TrackingAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.trainer = User.objects.create_user("trainer@example.com", "pass12345", role=User.Role.TRAINER)
        self.member = User.objects.create_user("member@example.com", "pass12345")
        self.client.force_authenticate(self.member)

        self.program = Program.objects.create(trainer=self.trainer, title="Strength", published=True)
        self.other_program = Program.objects.create(trainer=self.trainer, title="Cardio", published=True)
        workout = Workout.objects.create(program=self.program, title="Day 1")
        self.squat = Exercise.objects.create(workout=workout, name="Squat", order=0)
        self.bench = Exercise.objects.create(workout=workout, name="Bench", order=1)


class TestProgress(TrackingAPITestCase):

    def test_log_and_list(self):
        response = self.client.post(
            "/api/progress/",
            {"exercise_id": str(self.squat.pk), "weight": 100.5, "notes": "easy"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["exercise_name"], "Squat")

        listed = self.client.get("/api/progress/", {"exerciseId": str(self.squat.pk)})
        self.assertEqual(len(listed.data), 1)
        self.assertEqual(listed.data[0]["weight"], 100.5)

    def test_unknown_exercise_rejected(self):
        response = self.client.post(
            "/api/progress/",
            {"exercise_id": "00000000-0000-0000-0000-000000000000"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)


class TestNutrition(TrackingAPITestCase):

    def test_same_day_updates_existing_entry(self):
        today = utc_today().isoformat()

        first = self.client.post("/api/nutrition/", {"date": today, "calories": 2000, "protein": 150}, format="json")
        second = self.client.post("/api/nutrition/", {"date": today, "calories": 2200}, format="json")

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 200)
        entry = NutritionEntry.objects.get(user=self.member)
        self.assertEqual(entry.calories, 2200)
        self.assertEqual(entry.protein, 150)
        self.assertEqual(second.data["nutrition_streak"], 1)

    def test_streak_counts_consecutive_days(self):
        service = NutritionService()
        today = utc_today()
        for offset in (2, 1, 0):
            service.save_entry(self.member, today - timedelta(days=offset), calories=1800)

        self.member.refresh_from_db()
        self.assertEqual(self.member.nutrition_streak, 3)

    def test_gap_resets_streak(self):
        service = NutritionService()
        today = utc_today()
        service.save_entry(self.member, today - timedelta(days=1), calories=1800)
        service.save_entry(self.member, today - timedelta(days=3), calories=1800)

        self.member.refresh_from_db()
        self.assertEqual(self.member.nutrition_streak, 0)

    def test_invalid_date(self):
        response = self.client.post("/api/nutrition/", {"date": "yesterday"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "A valid date is required")

    def test_nutrition_plans(self):
        created = self.client.post(
            "/api/nutrition/plans/",
            {"title": "Cut", "daily_calories": 2000, "protein_grams": 160},
            format="json",
        )
        listed = self.client.get("/api/nutrition/plans/")

        self.assertEqual(created.status_code, 201)
        self.assertEqual(listed.data[0]["title"], "Cut")


class TestDashboard(TrackingAPITestCase):

    def test_enrolled_member_sees_enrollments_and_progress(self):
        Enrollment.objects.create(user=self.member, program=self.program)
        Progress.objects.create(user=self.member, exercise=self.squat)

        response = self.client.get("/api/dashboard/")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["has_active_subscription"])
        self.assertEqual([p["title"] for p in response.data["programs"]], ["Strength"])
        self.assertEqual(
            response.data["progress_by_program"][str(self.program.pk)],
            {"completed": 1, "total": 2, "percentage": 50},
        )
        self.assertEqual(response.data["total_workouts"], 1)
        self.assertEqual(response.data["total_active_programs"], 1)
        self.assertEqual(response.data["current_streak"], 1)
        self.assertEqual(response.data["trainer_programs"], [])

    def test_subscriber_sees_every_published_program(self):
        User.objects.filter(pk=self.member.pk).update(subscription_status="active", subscription_id="sub_1")

        response = self.client.get("/api/dashboard/")

        self.assertTrue(response.data["has_active_subscription"])
        self.assertEqual({p["title"] for p in response.data["programs"]}, {"Strength", "Cardio"})
        self.assertEqual(
            response.data["progress_by_program"][str(self.other_program.pk)],
            {"completed": 0, "total": 1, "percentage": 0},
        )

    def test_trainer_sees_authored_programs(self):
        self.client.force_authenticate(self.trainer)
        response = self.client.get("/api/dashboard/")

        self.assertEqual(len(response.data["trainer_programs"]), 2)
        self.assertEqual(response.data["user_role"], "TRAINER")

    def test_old_progress_breaks_workout_streak(self):
        progress = Progress.objects.create(user=self.member, exercise=self.squat)
        Progress.objects.filter(pk=progress.pk).update(completed_at=timezone.now() - timedelta(days=2))

        response = self.client.get("/api/dashboard/streaks/")

        self.assertEqual(response.data["current_streak"], 0)
        self.assertEqual(response.data["next_workout_milestone"]["days"], 3)

    def test_achievements(self):
        Enrollment.objects.create(user=self.member, program=self.program)
        Progress.objects.create(user=self.member, exercise=self.squat)

        response = self.client.get("/api/dashboard/achievements/")

        unlocked = {a["key"] for a in response.data["achievements"] if a["unlocked"]}
        self.assertEqual(unlocked, {"first_workout", "first_program"})
        self.assertEqual(response.data["unlocked_count"], 2)
        self.assertEqual(response.data["total_count"], 9)
