# tracking/services/nutrition_service.py

"""
NUTRITION SERVICE

Daily nutrition log with one entry per user per UTC day. Saving an entry
recomputes the user's nutrition streak.
"""

import logging
from datetime import date, datetime

from django.db import transaction
from django.utils.dateparse import parse_date, parse_datetime

from core.exceptions import ValidationError
from tracking.models import NutritionEntry
from tracking.services.streaks import consecutive_day_streak, to_utc_date

logger = logging.getLogger(__name__)

RECENT_ENTRIES = 30


def parse_entry_date(value) -> date:
    """Accept a date, a datetime or their ISO strings; return the UTC day."""
    if isinstance(value, (date, datetime)):
        return to_utc_date(value)

    if isinstance(value, str) and value:
        parsed = parse_datetime(value) or parse_date(value)
        if parsed is not None:
            return to_utc_date(parsed)

    raise ValidationError("A valid date is required")


class NutritionService:

    @transaction.atomic
    def save_entry(self, user, date_value, calories=None, protein=None, completed=True):
        """
        Create or update the entry for that day.

        Falsy calories/protein keep the values already stored.
        Returns (entry, created).
        """
        day = parse_entry_date(date_value)

        entry, created = NutritionEntry.objects.select_for_update().get_or_create(
            user=user,
            date=day,
            defaults={
                "calories": calories or None,
                "protein": protein or None,
                "completed": completed,
            },
        )

        if not created:
            entry.calories = calories or entry.calories
            entry.protein = protein or entry.protein
            entry.completed = completed
            entry.save(update_fields=["calories", "protein", "completed", "updated_at"])

        self.update_streak(user)
        return entry, created

    def update_streak(self, user) -> int:
        dates = NutritionEntry.objects.filter(user=user).values_list("date", flat=True)
        streak = consecutive_day_streak(dates)

        type(user).objects.filter(pk=user.pk).update(nutrition_streak=streak)
        user.nutrition_streak = streak

        logger.debug(f"Nutrition streak for user {user.pk}: {streak}")
        return streak

    def recent_entries(self, user, limit=RECENT_ENTRIES):
        return NutritionEntry.objects.filter(user=user).order_by("-date")[:limit]
