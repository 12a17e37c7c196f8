"""Supabase repository for nutrition plans, meals, and meal food lines."""

from dataclasses import dataclass
from datetime import time
from uuid import UUID

from supabase import Client

from nutrition_engine.adapters.supabase_food_item_repository import parse_food_item
from nutrition_engine.domain.plans import Meal, MealFoodItem, NutritionPlan
from nutrition_engine.services.plans import NutritionPlanRepository

MEAL_FOOD_ITEM_COLUMNS = "*, food_item:food_items(*)"


@dataclass
class SupabaseNutritionPlanRepository(NutritionPlanRepository):
    """Supabase implementation for plan reads."""

    client: Client

    def get_plan(self, plan_id: UUID) -> NutritionPlan | None:
        """Return a plan with its meals ordered by order_in_plan."""
        response = (
            self.client.table("nutrition_plans")
            .select("*")
            .eq("id", str(plan_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]

        meals_response = (
            self.client.table("meals")
            .select("*")
            .eq("nutrition_plan_id", str(plan_id))
            .order("order_in_plan", desc=False)
            .execute()
        )
        meal_rows = meals_response.data or []
        lines_by_meal: dict[str, list[dict[str, object]]] = {}
        meal_ids = [str(meal_row["id"]) for meal_row in meal_rows]
        if meal_ids:
            lines_response = (
                self.client.table("meal_food_items")
                .select(MEAL_FOOD_ITEM_COLUMNS)
                .in_("meal_id", meal_ids)
                .execute()
            )
            for line in lines_response.data or []:
                lines_by_meal.setdefault(str(line["meal_id"]), []).append(line)

        return NutritionPlan(
            id=UUID(str(row["id"])),
            name=str(row.get("name") or ""),
            total_calories=_optional_float(row.get("total_calories")),
            protein_grams=_optional_float(row.get("protein_grams")),
            carbohydrate_grams=_optional_float(row.get("carbohydrate_grams")),
            fat_grams=_optional_float(row.get("fat_grams")),
            description=row.get("description") or None,
            meals=tuple(
                parse_meal(meal_row, lines_by_meal.get(str(meal_row["id"]), []))
                for meal_row in meal_rows
            ),
        )

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal with its food lines."""
        response = (
            self.client.table("meals")
            .select("*")
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        lines_response = (
            self.client.table("meal_food_items")
            .select(MEAL_FOOD_ITEM_COLUMNS)
            .eq("meal_id", str(meal_id))
            .execute()
        )
        return parse_meal(response.data[0], lines_response.data or [])

    def get_assigned_plan_id(self, user_id: UUID) -> UUID | None:
        """Return the latest nutrition-only assignment for an athlete."""
        response = (
            self.client.table("assigned_plans")
            .select("nutrition_plan_id")
            .eq("athlete_id", str(user_id))
            .is_("program_template_id", "null")
            .not_.is_("nutrition_plan_id", "null")
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data or not response.data[0].get("nutrition_plan_id"):
            return None
        return UUID(str(response.data[0]["nutrition_plan_id"]))


def parse_meal(row: dict[str, object], lines: list[dict[str, object]]) -> Meal:
    """Parse a meals row and its meal_food_items rows."""
    return Meal(
        id=UUID(str(row["id"])),
        nutrition_plan_id=UUID(str(row["nutrition_plan_id"])),
        name=str(row.get("name") or ""),
        order_in_plan=int(row.get("order_in_plan") or 0),
        day_type=row.get("day_type") or None,
        time_suggestion=parse_time(row.get("time_suggestion")),
        notes=row.get("notes") or None,
        food_items=tuple(_parse_meal_food_item(line) for line in lines),
    )


def parse_time(value: object) -> time | None:
    """Parse an HH:MM[:SS] column, ignoring values that do not parse."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        return None


def _parse_meal_food_item(row: dict[str, object]) -> MealFoodItem:
    food = row.get("food_item")
    food_item_id = row.get("food_item_id")
    return MealFoodItem(
        id=UUID(str(row["id"])),
        food_item_id=UUID(str(food_item_id)) if food_item_id else None,
        food_item=parse_food_item(food) if isinstance(food, dict) else None,
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or "g"),
    )


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None
