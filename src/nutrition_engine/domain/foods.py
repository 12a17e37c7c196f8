"""Domain models for food reference records."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

_MACRO_FIELDS = (
    "calories_per_100g",
    "protein_per_100g",
    "carbs_per_100g",
    "fat_per_100g",
    "fiber_per_100g",
)


class FoodSource(str, Enum):
    """Provenance of a food item."""

    VERIFIED = "verified"
    CUSTOM = "custom"
    EXTERNAL_DATABASE = "external-database"


@dataclass(frozen=True)
class FoodItem:
    """Nutritional reference record with macros per 100g."""

    id: UUID | None
    name: str
    calories_per_100g: float
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float
    fiber_per_100g: float | None = None
    serving_size_g: float | None = None
    barcode: str | None = None
    source: FoodSource = FoodSource.VERIFIED
    created_by: UUID | None = None
    brand: str | None = None
    nutrient_basis: str = "per 100g"
    is_verified: bool = False

    def __post_init__(self) -> None:
        for field_name in _MACRO_FIELDS:
            value = getattr(self, field_name)
            if value is not None and value < 0:
                raise ValueError(f"{field_name} must be non-negative")


@dataclass(frozen=True)
class BarcodeLookup:
    """Result of a barcode lookup."""

    item: FoodItem
    origin: str
    persisted: bool
