"""Meal logging and daily nutrition aggregation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_engine.domain.meal_logs import (
    DailyNutritionLog,
    LoggedFoodItem,
    LoggedMeal,
    LoggedMealWithNutrition,
    MissedMeal,
)
from nutrition_engine.domain.nutrition import NutritionValues
from nutrition_engine.domain.plans import NutritionPlan
from nutrition_engine.errors import MealNotFoundError
from nutrition_engine.services.day_types import (
    primary_logged_day_type,
    resolve_day_type,
    select_meals,
)
from nutrition_engine.services.missed_meals import detect_missed_meals
from nutrition_engine.services.nutrition import sum_nutrition
from nutrition_engine.services.plans import NutritionPlanService

UNSPECIFIED_DAY_TYPE = "Unspecified"

_logger = logging.getLogger(__name__)


class MealLogRepository(Protocol):
    """Persistence interface for meal logs and extra meal lines."""

    def create_meal_log(  # noqa: PLR0913
        self,
        user_id: UUID,
        nutrition_plan_id: UUID | None,
        name: str,
        log_date: date,
        log_time: time,
        day_type: str | None,
        is_extra_meal: bool,
        meal_id: UUID | None = None,
        notes: str | None = None,
    ) -> LoggedMeal:
        """Insert a meal log row and return it."""

    def create_logged_food_items(
        self, meal_log_id: UUID, items: list[LoggedFoodItem]
    ) -> None:
        """Insert the food lines of an extra meal log."""

    def list_meal_logs(self, user_id: UUID, log_date: date) -> list[LoggedMeal]:
        """Return a user's logs for a date, ordered by time, with nested data."""

    def delete_meal_log(self, meal_log_id: UUID) -> None:
        """Delete a meal log and its lines."""

    def is_meal_logged(self, user_id: UUID, meal_id: UUID, log_date: date) -> bool:
        """Return whether a planned meal has a log on a date."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MealLogService:
    """Service that logs planned meals and builds daily nutrition views."""

    repository: MealLogRepository
    plan_service: NutritionPlanService
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = field(default=_utc_now)

    def now(self) -> datetime:
        """Return the wall-clock time in the configured timezone."""
        return self.clock().astimezone(ZoneInfo(self.timezone_name))

    def log_planned_meal(
        self,
        user_id: UUID,
        meal_id: UUID,
        log_date: date,
        notes: str | None = None,
        day_type: str | None = None,
    ) -> LoggedMeal:
        """Record that a planned meal was eaten."""
        meal = self.plan_service.get_meal(meal_id)
        if meal is None:
            raise MealNotFoundError(meal_id)
        logged = self.repository.create_meal_log(
            user_id=user_id,
            nutrition_plan_id=meal.nutrition_plan_id,
            name=meal.name,
            log_date=log_date,
            log_time=self.now().time().replace(microsecond=0),
            day_type=day_type or meal.day_type or UNSPECIFIED_DAY_TYPE,
            is_extra_meal=False,
            meal_id=meal.id,
            notes=notes,
        )
        _logger.info(
            "Logged planned meal: user_id=%s meal_id=%s date=%s",
            user_id,
            meal_id,
            log_date.isoformat(),
        )
        return logged

    def delete_logged_meal(self, meal_log_id: UUID) -> None:
        """Remove a meal log (un-log)."""
        self.repository.delete_meal_log(meal_log_id)

    def is_meal_logged(self, user_id: UUID, meal_id: UUID, log_date: date) -> bool:
        """Return whether a planned meal was logged on a date."""
        return self.repository.is_meal_logged(user_id, meal_id, log_date)

    def build_daily_log(
        self,
        user_id: UUID,
        log_date: date,
        plan: NutritionPlan | None,
        day_type: str | None = None,
    ) -> DailyNutritionLog:
        """Aggregate a date's logs against the plan.

        Planned logs take their nutrition from the meal's current lines, so
        edits to a meal show up in past days as well. A log whose meal was
        deleted counts as zero.
        """
        logs = self.repository.list_meal_logs(user_id, log_date)
        declared = plan.day_types if plan is not None else ()
        resolved = resolve_day_type(
            declared,
            requested=day_type,
            logged=primary_logged_day_type(logs, declared),
        )
        logged_meals = tuple(
            LoggedMealWithNutrition(log=log, nutrition=_log_nutrition(log))
            for log in logs
        )
        consumed = sum_nutrition(meal.nutrition for meal in logged_meals)

        if plan is not None:
            selection = select_meals(plan, resolved)
            planned_meals = selection.meals
            planned = sum_nutrition(meal.nutrition for meal in planned_meals)
            fell_back = selection.fell_back
            targets = plan.targets
        else:
            planned_meals = ()
            planned = NutritionValues(0.0, 0.0, 0.0, 0.0)
            fell_back = False
            targets = None

        return DailyNutritionLog(
            date=log_date,
            day_type=resolved,
            meal_selection_fell_back=fell_back,
            logged_meals=logged_meals,
            consumed=consumed,
            planned=planned,
            targets=targets,
            planned_meals=planned_meals,
            logged_meal_ids=_logged_meal_ids(logs),
        )

    def build_daily_logs(
        self,
        user_id: UUID,
        start: date,
        end: date,
        plan: NutritionPlan | None,
    ) -> list[DailyNutritionLog]:
        """Build one daily log per date from start to end inclusive."""
        logs: list[DailyNutritionLog] = []
        current = start
        while current <= end:
            logs.append(self.build_daily_log(user_id, current, plan))
            current += timedelta(days=1)
        return logs

    def find_missed_meals(
        self,
        user_id: UUID,
        plan: NutritionPlan,
        now: datetime | None = None,
    ) -> tuple[MissedMeal, ...]:
        """Build today's log and return meals that are overdue."""
        current = now or self.now()
        daily_log = self.build_daily_log(user_id, current.date(), plan)
        return detect_missed_meals(plan, daily_log, current)


def _log_nutrition(log: LoggedMeal) -> NutritionValues:
    if log.is_extra_meal:
        return sum_nutrition(item.nutrition for item in log.food_items)
    if log.meal is None:
        return NutritionValues(0.0, 0.0, 0.0, 0.0)
    return log.meal.nutrition


def _logged_meal_ids(logs: list[LoggedMeal]) -> tuple[UUID, ...]:
    ids: list[UUID] = []
    for log in logs:
        if log.is_extra_meal or log.meal_id is None:
            continue
        if log.meal_id not in ids:
            ids.append(log.meal_id)
    return tuple(ids)
