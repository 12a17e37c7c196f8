"""Form payloads submitted by UI code."""

from pydantic import BaseModel, Field

CUSTOM_FOOD_ID_PREFIX = "custom-"
CUSTOM_DAY_TYPE = "Custom Day"


class CustomFoodItemForm(BaseModel):
    """User-entered values for a new custom food item."""

    food_name: str = Field(min_length=1)
    calories_per_100g: float = Field(default=0.0, ge=0.0)
    protein_per_100g: float = Field(default=0.0, ge=0.0)
    carbs_per_100g: float = Field(default=0.0, ge=0.0)
    fat_per_100g: float = Field(default=0.0, ge=0.0)
    fiber_per_100g: float | None = Field(default=None, ge=0.0)
    serving_size_g: float | None = Field(default=None, gt=0.0)
    barcode: str | None = None
    brand: str | None = None
    nutrient_basis: str = "per 100g"


class FoodItemInput(CustomFoodItemForm):
    """Food item carried inline with an extra meal line."""

    id: str | None = None


class MacroOverride(BaseModel):
    """Macros entered by hand for a line in a non-weight unit."""

    calories: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)


class ExtraMealLine(BaseModel):
    """One food line of an extra meal form."""

    food_item_id: str
    food_item: FoodItemInput | None = None
    quantity: float = Field(gt=0.0)
    unit: str = "g"
    custom_macros: MacroOverride | None = None

    @property
    def is_custom(self) -> bool:
        """Whether the line references a food item not yet persisted."""
        return self.food_item_id.startswith(CUSTOM_FOOD_ID_PREFIX)


class ExtraMealForm(BaseModel):
    """An ad hoc meal logged outside the plan."""

    name: str = ""
    day_type: str
    custom_day_type: str | None = None
    notes: str | None = None
    food_items: list[ExtraMealLine] = Field(default_factory=list)

    @property
    def resolved_day_type(self) -> str:
        """The day type to store, substituting the custom label when chosen."""
        if self.day_type == CUSTOM_DAY_TYPE:
            return (self.custom_day_type or "").strip()
        return self.day_type
