"""Domain models for meal logging."""

from dataclasses import dataclass
from datetime import date, time
from uuid import UUID

from nutrition_engine.domain.foods import FoodItem
from nutrition_engine.domain.nutrition import NutritionTargets, NutritionValues
from nutrition_engine.domain.plans import Meal
from nutrition_engine.services.nutrition import line_nutrition, subtract_nutrition


@dataclass(frozen=True)
class LoggedFoodItem:
    """A food line of an extra meal log."""

    id: UUID | None
    meal_log_id: UUID | None
    food_item_id: UUID | None
    quantity: float
    unit: str
    food_item: FoodItem | None = None
    calories: float | None = None
    protein_grams: float | None = None
    carbs_grams: float | None = None
    fat_grams: float | None = None

    @property
    def override(self) -> NutritionValues | None:
        """Explicit macros captured at logging time, if any."""
        if self.calories is None:
            return None
        return NutritionValues(
            calories=self.calories,
            protein=self.protein_grams or 0.0,
            carbs=self.carbs_grams or 0.0,
            fat=self.fat_grams or 0.0,
        )

    @property
    def nutrition(self) -> NutritionValues:
        """Macros for this line."""
        return line_nutrition(self.food_item, self.quantity, self.unit, self.override)


@dataclass(frozen=True)
class LoggedMeal:
    """A single logging event for a user and date."""

    id: UUID
    user_id: UUID
    nutrition_plan_id: UUID | None
    name: str
    date: date
    time: time
    day_type: str | None
    is_extra_meal: bool
    meal_id: UUID | None = None
    notes: str | None = None
    meal: Meal | None = None
    food_items: tuple[LoggedFoodItem, ...] = ()


@dataclass(frozen=True)
class LoggedMealWithNutrition:
    """A logged meal with its computed macros."""

    log: LoggedMeal
    nutrition: NutritionValues

    @property
    def id(self) -> UUID:
        return self.log.id

    @property
    def total_calories(self) -> float:
        return self.nutrition.calories

    @property
    def total_protein(self) -> float:
        return self.nutrition.protein

    @property
    def total_carbs(self) -> float:
        return self.nutrition.carbs

    @property
    def total_fat(self) -> float:
        return self.nutrition.fat


@dataclass(frozen=True)
class DailyNutritionLog:
    """Consumed versus planned nutrition for one user and date."""

    date: date
    day_type: str | None
    meal_selection_fell_back: bool
    logged_meals: tuple[LoggedMealWithNutrition, ...]
    consumed: NutritionValues
    planned: NutritionValues
    targets: NutritionTargets | None
    planned_meals: tuple[Meal, ...]
    logged_meal_ids: tuple[UUID, ...]

    @property
    def remaining(self) -> NutritionValues:
        """Planned macros not yet consumed; negative when over."""
        return subtract_nutrition(self.planned, self.consumed)

    def is_meal_logged(self, meal_id: UUID) -> bool:
        """Return whether a planned meal has a non-extra log on this date."""
        return meal_id in self.logged_meal_ids


@dataclass(frozen=True)
class MissedMeal:
    """A planned meal whose suggested time passed without a log."""

    meal_id: UUID
    name: str
    suggested_time: time
