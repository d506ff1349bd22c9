from datetime import date, datetime, timedelta, timezone

from django.test import SimpleTestCase

from tracking.services.achievements import (
    ACHIEVEMENTS,
    NUTRITION_MILESTONES,
    WORKOUT_MILESTONES,
    evaluate_achievements,
    evaluate_milestones,
    next_milestone,
)
from tracking.services.streaks import consecutive_day_streak, to_utc_date


def by_key(results):
    return {r["key"]: r for r in results}


class TestAchievements(SimpleTestCase):

    def test_each_achievement_unlocks_exactly_at_its_requirement(self):
        for achievement in ACHIEVEMENTS:
            requirement = achievement.requirement
            for current, unlocked in ((requirement - 1, False), (requirement, True)):
                if achievement.counter == "workouts":
                    results = evaluate_achievements(current, 0)
                else:
                    results = evaluate_achievements(0, current)
                self.assertEqual(
                    by_key(results)[achievement.key]["unlocked"],
                    unlocked,
                    f"{achievement.key} at {current}",
                )

    def test_progress_is_capped_and_rounded(self):
        results = by_key(evaluate_achievements(total_workouts=3, total_active_programs=7))

        self.assertEqual(results["first_workout"]["progress"], 100)
        self.assertEqual(results["ten_workouts"]["progress"], 30)
        self.assertEqual(results["fifteen_workouts"]["progress"], 20)
        self.assertEqual(results["five_programs"]["progress"], 100)
        self.assertEqual(results["three_programs"]["current"], 7)

    def test_zero_counters_unlock_nothing(self):
        results = evaluate_achievements(0, 0)
        self.assertFalse(any(r["unlocked"] for r in results))
        self.assertEqual(len(results), 9)


class TestMilestones(SimpleTestCase):

    def test_unlocked_milestones(self):
        unlocked = [m["days"] for m in evaluate_milestones(14, WORKOUT_MILESTONES) if m["unlocked"]]
        self.assertEqual(unlocked, [3, 7, 14])

    def test_next_milestone(self):
        self.assertEqual(
            next_milestone(5, NUTRITION_MILESTONES),
            {"days": 7, "title": "Healthy Habits", "remaining": 2},
        )
        self.assertIsNone(next_milestone(100, WORKOUT_MILESTONES))


class TestStreaks(SimpleTestCase):

    def setUp(self):
        self.today = date(2026, 3, 10)

    def test_consecutive_days_ending_today(self):
        dates = [self.today - timedelta(days=n) for n in (0, 1, 2, 4)]
        self.assertEqual(consecutive_day_streak(dates, today=self.today), 3)

    def test_missing_today_is_zero(self):
        dates = [self.today - timedelta(days=1), self.today - timedelta(days=2)]
        self.assertEqual(consecutive_day_streak(dates, today=self.today), 0)

    def test_duplicates_count_once(self):
        dates = [self.today, self.today, self.today - timedelta(days=1)]
        self.assertEqual(consecutive_day_streak(dates, today=self.today), 2)

    def test_datetimes_are_bucketed_by_utc_day(self):
        late_evening = datetime(2026, 3, 9, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        self.assertEqual(to_utc_date(late_evening), self.today)
        self.assertEqual(consecutive_day_streak([late_evening], today=self.today), 1)
