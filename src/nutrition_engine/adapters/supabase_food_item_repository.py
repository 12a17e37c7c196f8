"""Supabase repository for the food item catalogue."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_engine.domain.foods import FoodItem, FoodSource
from nutrition_engine.errors import StoreError
from nutrition_engine.services.foods import FoodItemRepository

# Stored source values that map onto the custom and external provenances;
# everything else (ausnut, coach, system) is curated reference data.
_SOURCE_FROM_ROW = {
    "custom": FoodSource.CUSTOM,
    "open_food_facts": FoodSource.EXTERNAL_DATABASE,
    "usda": FoodSource.EXTERNAL_DATABASE,
}
_SOURCE_TO_ROW = {
    FoodSource.CUSTOM: "custom",
    FoodSource.EXTERNAL_DATABASE: "open_food_facts",
    FoodSource.VERIFIED: "system",
}


@dataclass
class SupabaseFoodItemRepository(FoodItemRepository):
    """Supabase-backed food item repository."""

    client: Client

    def create_food_item(self, item: FoodItem) -> FoodItem:
        """Insert a food item and return the stored row."""
        response = (
            self.client.table("food_items").insert(_food_payload(item)).execute()
        )
        if not response.data:
            raise StoreError("Failed to create food item")
        return parse_food_item(response.data[0])

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id, if present."""
        response = (
            self.client.table("food_items")
            .select("*")
            .eq("id", str(food_item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_food_item(response.data[0])

    def get_by_barcode(self, barcode: str) -> FoodItem | None:
        """Return the food item carrying a barcode, if present."""
        response = (
            self.client.table("food_items")
            .select("*")
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_food_item(response.data[0])

    def search_food_items(self, words: list[str], limit: int) -> list[FoodItem]:
        """Return food items whose name contains every word."""
        query = self.client.table("food_items").select("*")
        for word in words:
            query = query.ilike("food_name", f"%{word}%")
        response = query.order("food_name").limit(limit).execute()
        return [parse_food_item(row) for row in response.data or []]


def parse_food_item(row: dict[str, object]) -> FoodItem:
    """Parse a food_items row into a domain model."""
    created_by = row.get("created_by")
    return FoodItem(
        id=UUID(str(row["id"])) if row.get("id") else None,
        name=str(row.get("food_name") or ""),
        calories_per_100g=_float(row.get("calories_per_100g")),
        protein_per_100g=_float(row.get("protein_per_100g")),
        carbs_per_100g=_float(row.get("carbs_per_100g")),
        fat_per_100g=_float(row.get("fat_per_100g")),
        fiber_per_100g=_optional_float(row.get("fiber_per_100g")),
        serving_size_g=_optional_float(row.get("serving_size_g")),
        barcode=row.get("barcode") or None,
        source=_SOURCE_FROM_ROW.get(str(row.get("source")), FoodSource.VERIFIED),
        created_by=UUID(str(created_by)) if created_by else None,
        brand=row.get("brand") or None,
        nutrient_basis=str(row.get("nutrient_basis") or "per 100g"),
        is_verified=bool(row.get("is_verified", False)),
    )


def _food_payload(item: FoodItem) -> dict[str, object]:
    return {
        "food_name": item.name,
        "calories_per_100g": item.calories_per_100g,
        "protein_per_100g": item.protein_per_100g,
        "carbs_per_100g": item.carbs_per_100g,
        "fat_per_100g": item.fat_per_100g,
        "fiber_per_100g": item.fiber_per_100g or 0,
        "serving_size_g": item.serving_size_g,
        "barcode": item.barcode,
        "brand": item.brand,
        "nutrient_basis": item.nutrient_basis,
        "source": _SOURCE_TO_ROW[item.source],
        "created_by": str(item.created_by) if item.created_by else None,
        "is_verified": item.is_verified,
    }


def _float(value: object) -> float:
    return float(value) if value is not None else 0.0


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None
