"""Day-type resolution and meal selection for nutrition plans."""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from nutrition_engine.domain.meal_logs import LoggedMeal
from nutrition_engine.domain.plans import (
    FellBackToAllMeals,
    MealSelection,
    NutritionPlan,
    SelectedMeals,
)

_logger = logging.getLogger(__name__)


def resolve_day_type(
    declared: Sequence[str],
    requested: str | None = None,
    logged: str | None = None,
) -> str | None:
    """Pick the day type governing a view of the plan.

    An explicit request wins when the plan declares it, then the day type
    recorded on the date's logs, then the first declared day type. A plan
    without day types is ungated and yields None.
    """
    if requested and requested in declared:
        return requested
    if logged and logged in declared:
        return logged
    if declared:
        return declared[0]
    return None


def primary_logged_day_type(
    logs: Iterable[LoggedMeal], declared: Sequence[str]
) -> str | None:
    """Return the most common declared day type among a date's logs."""
    counts = Counter(
        log.day_type for log in logs if log.day_type and log.day_type in declared
    )
    if not counts:
        return None
    # Counter preserves insertion order, so ties go to the earliest log.
    return counts.most_common(1)[0][0]


def select_meals(plan: NutritionPlan, day_type: str | None) -> MealSelection:
    """Return the plan meals tagged with a day type, ordered by index.

    An ungated view (day_type None) selects every meal. When a day type is
    given but nothing matches, every meal is returned as FellBackToAllMeals so
    that callers can surface inconsistent day-type tagging.
    """
    ordered = plan.ordered_meals
    if day_type is None:
        return SelectedMeals(meals=ordered, day_type=None)
    matching = tuple(meal for meal in ordered if meal.day_type == day_type)
    if matching:
        return SelectedMeals(meals=matching, day_type=day_type)
    if ordered:
        _logger.warning(
            "No meals tagged with day type, using all meals: plan_id=%s day_type=%s",
            plan.id,
            day_type,
        )
    return FellBackToAllMeals(meals=ordered, day_type=day_type)
