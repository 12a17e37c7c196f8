"""Supabase repository for meal logs and extra meal lines."""

from dataclasses import dataclass
from datetime import date, time
from uuid import UUID

from supabase import Client

from nutrition_engine.adapters.supabase_food_item_repository import parse_food_item
from nutrition_engine.adapters.supabase_nutrition_plan_repository import (
    parse_meal,
    parse_time,
)
from nutrition_engine.domain.meal_logs import LoggedFoodItem, LoggedMeal
from nutrition_engine.errors import StoreError
from nutrition_engine.services.meal_logs import MealLogRepository

MEAL_LOG_COLUMNS = (
    "*, "
    "meal:meals(*, food_items:meal_food_items(*, food_item:food_items(*))), "
    "food_items:extra_meal_food_items(*, food_item:food_items(*))"
)


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meal logs."""

    client: Client

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
        """Create a meal log row and return it."""
        response = (
            self.client.table("meal_logs")
            .insert(
                {
                    "user_id": str(user_id),
                    "meal_id": str(meal_id) if meal_id else None,
                    "nutrition_plan_id": (
                        str(nutrition_plan_id) if nutrition_plan_id else None
                    ),
                    "name": name,
                    "date": log_date.isoformat(),
                    "time": log_time.strftime("%H:%M:%S"),
                    "day_type": day_type,
                    "notes": notes,
                    "is_extra_meal": is_extra_meal,
                }
            )
            .execute()
        )
        if not response.data:
            raise StoreError("Failed to create meal log")
        return _parse_log(response.data[0])

    def create_logged_food_items(
        self, meal_log_id: UUID, items: list[LoggedFoodItem]
    ) -> None:
        """Create extra_meal_food_items rows.

        The macro override columns are only sent when a line in the batch
        carries overrides. PostgREST requires every row of a bulk insert to
        have the same keys.
        """
        linked = [item for item in items if item.food_item_id is not None]
        if not linked:
            return
        with_overrides = any(item.calories is not None for item in linked)
        payload = []
        for item in linked:
            row: dict[str, object] = {
                "meal_log_id": str(meal_log_id),
                "food_item_id": str(item.food_item_id),
                "quantity": item.quantity,
                "unit": item.unit,
            }
            if with_overrides:
                row.update(
                    {
                        "calories": item.calories,
                        "protein_grams": item.protein_grams,
                        "carbs_grams": item.carbs_grams,
                        "fat_grams": item.fat_grams,
                    }
                )
            payload.append(row)
        response = self.client.table("extra_meal_food_items").insert(payload).execute()
        if not response.data:
            raise StoreError("Failed to create extra meal food items")

    def list_meal_logs(self, user_id: UUID, log_date: date) -> list[LoggedMeal]:
        """Return a user's logs for a date ordered by time."""
        response = (
            self.client.table("meal_logs")
            .select(MEAL_LOG_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("date", log_date.isoformat())
            .order("time", desc=False)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]

    def delete_meal_log(self, meal_log_id: UUID) -> None:
        """Delete a meal log; its extra meal lines cascade."""
        self.client.table("meal_logs").delete().eq("id", str(meal_log_id)).execute()

    def is_meal_logged(self, user_id: UUID, meal_id: UUID, log_date: date) -> bool:
        """Return whether a planned meal has a log on a date."""
        response = (
            self.client.table("meal_logs")
            .select("id")
            .eq("user_id", str(user_id))
            .eq("meal_id", str(meal_id))
            .eq("date", log_date.isoformat())
            .limit(1)
            .execute()
        )
        return bool(response.data)


def _parse_log(row: dict[str, object]) -> LoggedMeal:
    meal_row = row.get("meal")
    meal = None
    if isinstance(meal_row, dict):
        meal = parse_meal(meal_row, list(meal_row.get("food_items") or []))
    meal_id = row.get("meal_id")
    plan_id = row.get("nutrition_plan_id")
    return LoggedMeal(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        nutrition_plan_id=UUID(str(plan_id)) if plan_id else None,
        name=str(row.get("name") or ""),
        date=date.fromisoformat(str(row["date"])),
        time=parse_time(row.get("time")) or time(0, 0),
        day_type=row.get("day_type") or None,
        is_extra_meal=bool(row.get("is_extra_meal", False)),
        meal_id=UUID(str(meal_id)) if meal_id else None,
        notes=row.get("notes") or None,
        meal=meal,
        food_items=tuple(
            _parse_logged_item(item) for item in row.get("food_items") or []
        ),
    )


def _parse_logged_item(row: dict[str, object]) -> LoggedFoodItem:
    food = row.get("food_item")
    food_item_id = row.get("food_item_id")
    return LoggedFoodItem(
        id=UUID(str(row["id"])) if row.get("id") else None,
        meal_log_id=UUID(str(row["meal_log_id"])) if row.get("meal_log_id") else None,
        food_item_id=UUID(str(food_item_id)) if food_item_id else None,
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or "g"),
        food_item=parse_food_item(food) if isinstance(food, dict) else None,
        calories=_optional_float(row.get("calories")),
        protein_grams=_optional_float(row.get("protein_grams")),
        carbs_grams=_optional_float(row.get("carbs_grams")),
        fat_grams=_optional_float(row.get("fat_grams")),
    )


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None
