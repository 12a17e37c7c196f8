"""Detection of planned meals that were not logged in time."""

from datetime import datetime, time, timedelta

from nutrition_engine.domain.meal_logs import DailyNutritionLog, MissedMeal
from nutrition_engine.domain.plans import NutritionPlan
from nutrition_engine.services.day_types import select_meals

MISSED_MEAL_POLL_INTERVAL = timedelta(minutes=5)


def detect_missed_meals(
    plan: NutritionPlan, daily_log: DailyNutritionLog, now: datetime | time
) -> tuple[MissedMeal, ...]:
    """Return overdue, unlogged meals for the log's day type.

    Meals sharing a display name are reported once, using the first one in
    plan order. The result depends only on the arguments.
    """
    current = now.time() if isinstance(now, datetime) else now
    current_minute = (current.hour, current.minute)
    candidates = select_meals(plan, daily_log.day_type).meals

    missed: dict[str, MissedMeal] = {}
    for meal in candidates:
        suggested = meal.time_suggestion
        if suggested is None:
            continue
        if (suggested.hour, suggested.minute) >= current_minute:
            continue
        if daily_log.is_meal_logged(meal.id):
            continue
        if meal.name in missed:
            continue
        missed[meal.name] = MissedMeal(
            meal_id=meal.id, name=meal.name, suggested_time=suggested
        )
    return tuple(missed.values())
