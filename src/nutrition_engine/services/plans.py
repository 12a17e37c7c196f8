"""Read access to nutrition plans."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_engine.domain.nutrition import NutritionValues
from nutrition_engine.domain.plans import Meal, NutritionPlan
from nutrition_engine.services.day_types import select_meals
from nutrition_engine.services.nutrition import sum_nutrition


class NutritionPlanRepository(Protocol):
    """Persistence interface for nutrition plans and their meals."""

    def get_plan(self, plan_id: UUID) -> NutritionPlan | None:
        """Return a plan with nested meals and food lines, if present."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a single meal with its food lines, if present."""

    def get_assigned_plan_id(self, user_id: UUID) -> UUID | None:
        """Return the most recent nutrition plan assigned to a user."""


@dataclass
class NutritionPlanService:
    """Service for loading plans and deriving per-day-type targets."""

    repository: NutritionPlanRepository

    def get_plan(self, plan_id: UUID) -> NutritionPlan | None:
        """Return a plan by id."""
        return self.repository.get_plan(plan_id)

    def get_user_plan(self, user_id: UUID) -> NutritionPlan | None:
        """Return the plan currently assigned to a user, if any."""
        plan_id = self.repository.get_assigned_plan_id(user_id)
        if plan_id is None:
            return None
        return self.repository.get_plan(plan_id)

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        return self.repository.get_meal(meal_id)

    @staticmethod
    def day_type_targets(plan: NutritionPlan, day_type: str | None) -> NutritionValues:
        """Sum the nutrition of the meals selected for a day type."""
        selection = select_meals(plan, day_type)
        return sum_nutrition(meal.nutrition for meal in selection.meals)
