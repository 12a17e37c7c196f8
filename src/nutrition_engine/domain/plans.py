"""Domain models for nutrition plans and their meals."""

from dataclasses import dataclass, field
from datetime import time
from uuid import UUID

from nutrition_engine.domain.foods import FoodItem
from nutrition_engine.domain.nutrition import NutritionTargets, NutritionValues
from nutrition_engine.services.nutrition import line_nutrition, sum_nutrition


@dataclass(frozen=True)
class MealFoodItem:
    """A food line within a planned meal."""

    id: UUID
    food_item_id: UUID | None
    food_item: FoodItem | None
    quantity: float
    unit: str

    @property
    def nutrition(self) -> NutritionValues:
        """Macros for this line."""
        return line_nutrition(self.food_item, self.quantity, self.unit)


@dataclass(frozen=True)
class Meal:
    """A planned meal; totals are always derived from its lines."""

    id: UUID
    nutrition_plan_id: UUID
    name: str
    order_in_plan: int = 0
    day_type: str | None = None
    time_suggestion: time | None = None
    notes: str | None = None
    food_items: tuple[MealFoodItem, ...] = ()

    @property
    def nutrition(self) -> NutritionValues:
        """Sum of the calculated nutrition of every line."""
        return sum_nutrition(item.nutrition for item in self.food_items)

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
class NutritionPlan:
    """Macro targets plus the ordered meals of a plan."""

    id: UUID
    name: str
    total_calories: float | None = None
    protein_grams: float | None = None
    carbohydrate_grams: float | None = None
    fat_grams: float | None = None
    description: str | None = None
    meals: tuple[Meal, ...] = ()

    @property
    def ordered_meals(self) -> tuple[Meal, ...]:
        """Meals sorted by ordering index, ties kept in insertion order."""
        return tuple(sorted(self.meals, key=lambda meal: meal.order_in_plan))

    @property
    def day_types(self) -> tuple[str, ...]:
        """Distinct day-type labels in order of first appearance."""
        labels: list[str] = []
        for meal in self.ordered_meals:
            if meal.day_type and meal.day_type not in labels:
                labels.append(meal.day_type)
        return tuple(labels)

    @property
    def targets(self) -> NutritionTargets | None:
        """Plan-level targets, or None when the author declared none."""
        values = (
            self.total_calories,
            self.protein_grams,
            self.carbohydrate_grams,
            self.fat_grams,
        )
        if all(value is None for value in values):
            return None
        return NutritionTargets(
            calories=self.total_calories,
            protein_grams=self.protein_grams,
            carbohydrate_grams=self.carbohydrate_grams,
            fat_grams=self.fat_grams,
        )

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal of this plan by id."""
        for meal in self.meals:
            if meal.id == meal_id:
                return meal
        return None


@dataclass(frozen=True)
class SelectedMeals:
    """Meals whose day type matched the requested one."""

    meals: tuple[Meal, ...]
    day_type: str | None
    fell_back: bool = field(default=False, init=False)


@dataclass(frozen=True)
class FellBackToAllMeals:
    """Every plan meal, returned because no meal matched the day type."""

    meals: tuple[Meal, ...]
    day_type: str | None
    fell_back: bool = field(default=True, init=False)


MealSelection = SelectedMeals | FellBackToAllMeals
