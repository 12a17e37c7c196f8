"""Error types raised by the nutrition engine."""

from uuid import UUID


class NutritionEngineError(Exception):
    """Base class for engine errors."""


class StoreError(NutritionEngineError, RuntimeError):
    """The data store accepted a write but returned no row."""


class UnsupportedUnitError(NutritionEngineError, ValueError):
    """A quantity unit is not in the conversion table."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"Unsupported unit: {unit!r}")
        self.unit = unit


class MealNotFoundError(NutritionEngineError, LookupError):
    """A planned meal referenced by id does not exist."""

    def __init__(self, meal_id: UUID) -> None:
        super().__init__(f"Meal not found: {meal_id}")
        self.meal_id = meal_id


class ExtraMealValidationError(NutritionEngineError, ValueError):
    """An extra meal form failed validation before any write."""

    def __init__(
        self, field: str, message: str, line_index: int | None = None
    ) -> None:
        super().__init__(message)
        self.field = field
        self.message = message
        self.line_index = line_index
