"""Commit flow for extra meals logged outside the plan."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_engine.domain.foods import FoodItem, FoodSource
from nutrition_engine.domain.forms import (
    CUSTOM_DAY_TYPE,
    ExtraMealForm,
    ExtraMealLine,
)
from nutrition_engine.domain.meal_logs import LoggedFoodItem, LoggedMealWithNutrition
from nutrition_engine.errors import ExtraMealValidationError
from nutrition_engine.services.foods import FoodItemService, custom_food_from_form
from nutrition_engine.services.meal_logs import MealLogRepository
from nutrition_engine.services.nutrition import sum_nutrition
from nutrition_engine.services.units import is_weight_unit

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ExtraMealService:
    """Creates custom foods, the extra meal log, and its food lines.

    Steps run in order and stop at the first store error. Earlier writes are
    not rolled back unless cleanup_orphans is set, in which case a meal log
    whose lines failed to insert is deleted before the error is re-raised.
    """

    repository: MealLogRepository
    food_service: FoodItemService
    timezone_name: str = "UTC"
    cleanup_orphans: bool = False
    clock: Callable[[], datetime] = field(default=_utc_now)

    def log_extra_meal(
        self,
        user_id: UUID,
        nutrition_plan_id: UUID | None,
        form: ExtraMealForm,
        log_date: date,
        profile_id: UUID | None = None,
    ) -> LoggedMealWithNutrition:
        """Validate and persist an extra meal, returning its nutrition."""
        validate_extra_meal_form(form)
        foods = [
            self._resolve_food_item(index, line)
            for index, line in enumerate(form.food_items)
        ]
        lines = [
            self._prepare_line(line, food, owner_id=profile_id or user_id)
            for line, food in zip(form.food_items, foods, strict=True)
        ]

        now = self.clock().astimezone(ZoneInfo(self.timezone_name))
        logged = self.repository.create_meal_log(
            user_id=user_id,
            nutrition_plan_id=nutrition_plan_id,
            name=form.name.strip(),
            log_date=log_date,
            log_time=now.time().replace(microsecond=0),
            day_type=form.resolved_day_type,
            is_extra_meal=True,
            notes=(form.notes or "").strip() or None,
        )

        lines = [replace(line, meal_log_id=logged.id) for line in lines]
        linked = [line for line in lines if line.food_item_id is not None]
        if len(linked) < len(lines):
            _logger.warning(
                "Skipping extra meal lines without a stored food item: "
                "meal_log_id=%s skipped=%s",
                logged.id,
                len(lines) - len(linked),
            )
        if linked:
            try:
                self.repository.create_logged_food_items(logged.id, linked)
            except Exception:
                _logger.error(
                    "Failed to insert extra meal lines: meal_log_id=%s cleanup=%s",
                    logged.id,
                    self.cleanup_orphans,
                )
                if self.cleanup_orphans:
                    self._delete_orphan(logged.id)
                raise

        _logger.info(
            "Logged extra meal: user_id=%s meal_log_id=%s lines=%s",
            user_id,
            logged.id,
            len(linked),
        )
        return LoggedMealWithNutrition(
            log=replace(logged, food_items=tuple(lines)),
            nutrition=sum_nutrition(line.nutrition for line in lines),
        )

    def _resolve_food_item(self, index: int, line: ExtraMealLine) -> FoodItem | None:
        """Return the food item for a line, reading it from the store if needed."""
        if line.food_item is not None:
            return None
        if line.is_custom:
            raise ExtraMealValidationError(
                "food_item",
                "Custom food item details are required",
                line_index=index,
            )
        food_item_id = _parse_uuid(line.food_item_id)
        if food_item_id is None:
            raise ExtraMealValidationError(
                "food_item_id",
                f"Unknown food item: {line.food_item_id}",
                line_index=index,
            )
        if line.custom_macros is not None:
            return None
        food = self.food_service.get_food_item(food_item_id)
        if food is None:
            raise ExtraMealValidationError(
                "food_item_id",
                f"Unknown food item: {line.food_item_id}",
                line_index=index,
            )
        return food

    def _prepare_line(
        self, line: ExtraMealLine, stored_food: FoodItem | None, owner_id: UUID
    ) -> LoggedFoodItem:
        food = stored_food
        food_item_id = stored_food.id if stored_food is not None else None
        if line.is_custom and line.food_item is not None:
            transient = custom_food_from_form(line.food_item, created_by=owner_id)
            food = self._create_custom_food(transient)
            food_item_id = food.id
        elif line.food_item is not None:
            food_item_id = _parse_uuid(line.food_item_id)
            food = replace(
                custom_food_from_form(line.food_item, created_by=None),
                id=food_item_id,
                source=FoodSource.VERIFIED,
            )
        elif food_item_id is None:
            food_item_id = _parse_uuid(line.food_item_id)

        macros = line.custom_macros
        return LoggedFoodItem(
            id=None,
            meal_log_id=None,
            food_item_id=food_item_id,
            quantity=line.quantity,
            unit=line.unit,
            food_item=food,
            calories=macros.calories if macros else None,
            protein_grams=macros.protein_g if macros else None,
            carbs_grams=macros.carbs_g if macros else None,
            fat_grams=macros.fat_g if macros else None,
        )

    def _delete_orphan(self, meal_log_id: UUID) -> None:
        try:
            self.repository.delete_meal_log(meal_log_id)
        except Exception:
            _logger.exception(
                "Failed to delete orphaned extra meal log: meal_log_id=%s",
                meal_log_id,
            )

    def _create_custom_food(self, transient: FoodItem) -> FoodItem:
        try:
            return self.food_service.repository.create_food_item(transient)
        except Exception:
            _logger.warning(
                "Failed to create custom food item, using unsaved values: name=%s",
                transient.name,
                exc_info=True,
            )
            return transient


def validate_extra_meal_form(form: ExtraMealForm) -> None:
    """Reject a form that cannot be logged, before anything is written."""
    if not form.name.strip():
        raise ExtraMealValidationError("name", "Meal name is required")
    if not form.food_items:
        raise ExtraMealValidationError(
            "food_items", "Please add at least one food item"
        )
    if form.day_type == CUSTOM_DAY_TYPE and not form.resolved_day_type:
        raise ExtraMealValidationError(
            "custom_day_type", "Please provide a custom day type"
        )
    for index, line in enumerate(form.food_items):
        if is_weight_unit(line.unit):
            continue
        macros = line.custom_macros
        if macros is None or macros.calories <= 0:
            label = line.food_item.food_name if line.food_item else line.food_item_id
            raise ExtraMealValidationError(
                "custom_macros",
                "Please enter complete nutrition information for "
                f'"{label}" ({line.quantity:g} {line.unit})',
                line_index=index,
            )


def _parse_uuid(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None
