# tracking/services/achievements.py

"""
ACHIEVEMENTS & MILESTONES

Static threshold tables evaluated against counters on every request.
Nothing here is persisted; each entry is unlocked independently when its
counter reaches the requirement.
"""

from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Achievement:
    key: str
    title: str
    description: str
    counter: str  # "workouts" or "programs"
    requirement: int
    rarity: str


@dataclass(frozen=True)
class Milestone:
    days: int
    title: str


ACHIEVEMENTS = (
    Achievement("first_workout", "First Steps", "Complete your first workout", "workouts", 1, "Common"),
    Achievement("five_workouts", "Getting Started", "Complete 5 workouts", "workouts", 5, "Common"),
    Achievement("ten_workouts", "Dedicated", "Complete 10 workouts", "workouts", 10, "Uncommon"),
    Achievement("fifteen_workouts", "Fitness Enthusiast", "Complete 15 workouts", "workouts", 15, "Rare"),
    Achievement("first_program", "Program Pioneer", "Enroll in your first program", "programs", 1, "Common"),
    Achievement("three_programs", "Coach Explorer", "Enroll in 3 programs", "programs", 3, "Uncommon"),
    Achievement("thirty_workouts", "Fitness Champion", "Complete 30 workouts", "workouts", 30, "Epic"),
    Achievement("fifty_workouts", "Elite Athlete", "Complete 50 workouts", "workouts", 50, "Legendary"),
    Achievement("five_programs", "Program Master", "Enroll in 5 programs", "programs", 5, "Epic"),
)

WORKOUT_MILESTONES = (
    Milestone(3, "Getting Started"),
    Milestone(7, "Week Warrior"),
    Milestone(14, "Two Week Champion"),
    Milestone(30, "Monthly Master"),
    Milestone(50, "Golden Streak"),
    Milestone(100, "Century Club"),
)

NUTRITION_MILESTONES = (
    Milestone(3, "Nutrition Novice"),
    Milestone(7, "Healthy Habits"),
    Milestone(14, "Nutrition Champion"),
    Milestone(30, "Diet Master"),
    Milestone(50, "Nutrition Legend"),
    Milestone(100, "Century Eater"),
)


def evaluate_achievements(total_workouts: int, total_active_programs: int, definitions=ACHIEVEMENTS):
    counters = {"workouts": total_workouts, "programs": total_active_programs}
    results = []

    for achievement in definitions:
        current = counters[achievement.counter]
        results.append({
            **asdict(achievement),
            "current": current,
            "unlocked": current >= achievement.requirement,
            "progress": min(round(current / achievement.requirement * 100), 100),
        })

    return results


def evaluate_milestones(streak: int, table=WORKOUT_MILESTONES):
    return [
        {"days": m.days, "title": m.title, "unlocked": streak >= m.days}
        for m in table
    ]


def next_milestone(streak: int, table=WORKOUT_MILESTONES):
    """First milestone not reached yet, or None"""
    for m in table:
        if streak < m.days:
            return {"days": m.days, "title": m.title, "remaining": m.days - streak}
    return None
